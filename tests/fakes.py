"""Stand-ins for psycopg2 connections, cursors and pools."""

from collections import deque
from types import SimpleNamespace

import psycopg2
import psycopg2.errors


class FakeUniqueViolation(psycopg2.errors.UniqueViolation):
    """UniqueViolation carrying the diagnostics a real server would send."""

    pgcode = "23505"

    def __init__(self, field="email", value="john@example.com", constraint="users_email_key"):
        super().__init__(f'duplicate key value violates unique constraint "{constraint}"')
        self._diag = SimpleNamespace(
            message_detail=f"Key ({field})=({value}) already exists.",
            constraint_name=constraint,
            column_name=None,
        )

    @property
    def diag(self):
        return self._diag


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.description = None
        self.rowcount = -1
        self.query = None
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.conn.executed.append((sql, params))
        self.query = sql.encode()
        response = self.conn.responses.popleft() if self.conn.responses else {}
        if "error" in response:
            raise response["error"]
        rows = response.get("rows")
        self._rows = list(rows or [])
        self.description = [("column",)] if rows is not None else None
        self.rowcount = response.get("rowcount", len(self._rows))

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None


class FakeConnection:
    """Records statements; answers them from a queue of scripted responses."""

    def __init__(self):
        self.executed = []
        self.responses = deque()
        self.commits = 0
        self.rollbacks = 0
        self.closed = 0

    def respond(self, rows=None, rowcount=None, error=None):
        response = {}
        if rows is not None:
            response["rows"] = rows
        if rowcount is not None:
            response["rowcount"] = rowcount
        if error is not None:
            response["error"] = error
        self.responses.append(response)
        return self

    def cursor(self, cursor_factory=None):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = 1

    @property
    def statements(self):
        return [sql for sql, _ in self.executed]


class FakePool:
    def __init__(self, conn):
        self.conn = conn
        self.checked_out = 0
        self.returned = []
        self.closed_all = False

    def getconn(self):
        self.checked_out += 1
        return self.conn

    def putconn(self, conn, close=False):
        self.checked_out -= 1
        self.returned.append((conn, close))

    def closeall(self):
        self.closed_all = True


class ClosingPool:
    """
    Behaves like psycopg2's pool: keeps at most `minconn` idle connections
    and closes any other connection handed back.
    """

    def __init__(self, minconn=1):
        self.minconn = minconn
        self.idle = []
        self.created = []
        self.forced_closes = 0

    def getconn(self):
        if self.idle:
            return self.idle.pop()
        conn = FakeConnection()
        self.created.append(conn)
        return conn

    def putconn(self, conn, close=False):
        if close:
            self.forced_closes += 1
        if close or len(self.idle) >= self.minconn:
            conn.close()
        else:
            self.idle.append(conn)

    def closeall(self):
        for conn in self.idle:
            conn.close()
        self.idle = []
