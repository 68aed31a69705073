"""
db/connection.py
----------------
Manages the PostgreSQL connection pool and the generic CRUD helpers.
Uses psycopg2's ThreadedConnectionPool for efficient connection reuse.

`Database` is an explicit object: components that need the database receive
one. Scripts that prefer a process-wide instance can use `init_pool()`,
`get_database()` and `close_pool()`.
"""

import dataclasses
import threading
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

import psycopg2
from psycopg2 import pool, extras

from config import (
    DB_CONNECT_TIMEOUT,
    DB_HOST,
    DB_IDLE_TIMEOUT,
    DB_NAME,
    DB_PASS,
    DB_POOL_MAX,
    DB_POOL_MIN,
    DB_PORT,
    DB_USER,
)
from db.errors import ConnectionFailure, DataAccessError, translate_error
from db.schema import Table, get_table
from utils.logger import get_logger

logger = get_logger(__name__)


def _preview(sql: str) -> str:
    """First non-blank line of a statement, for log lines."""
    for line in sql.strip().splitlines():
        if line.strip():
            return line.strip()
    return ""


def _last_statement(cur) -> str:
    """Preview of the statement a cursor ran last (psycopg2 keeps it as bytes)."""
    query = getattr(cur, "query", None)
    if isinstance(query, bytes):
        query = query.decode("utf-8", "replace")
    return _preview(query) if query else "(no statement)"


def build_insert(tbl: Table, record: dict) -> tuple[str, list]:
    """
    INSERT ... RETURNING id for one record.

    Raises:
        InvalidIdentifier: If a key is not a writable column of the table.
        ValueError: If the record is empty.
    """
    if not record:
        raise ValueError(f"Nothing to insert into '{tbl.name}'")
    columns = [tbl.check_writable(c) for c in record]
    placeholders = ", ".join(["%s"] * len(columns))
    sql = (
        f"INSERT INTO {tbl.name} ({', '.join(columns)}) "
        f"VALUES ({placeholders}) RETURNING id"
    )
    return sql, list(record.values())


class Database:
    """
    A bounded pool of PostgreSQL connections plus query helpers.

    Every helper acquires a pooled connection, runs one statement, commits,
    and releases the connection on every exit path. Callers block for at most
    ``connect_timeout`` seconds when all ``max_conn`` connections are busy.
    Failures are logged and re-raised as `db.errors` exceptions; nothing is
    retried.
    """

    def __init__(
        self,
        host: str = DB_HOST,
        port: int = DB_PORT,
        dbname: str = DB_NAME,
        user: str = DB_USER,
        password: str = DB_PASS,
        min_conn: int = DB_POOL_MIN,
        max_conn: int = DB_POOL_MAX,
        connect_timeout: int = DB_CONNECT_TIMEOUT,
        idle_timeout: int = DB_IDLE_TIMEOUT,
        conn_pool: Optional[pool.AbstractConnectionPool] = None,
    ):
        """
        Open the pool.

        Args:
            conn_pool: An already built pool to use instead of connecting
                with the other arguments.

        Raises:
            ConnectionFailure: If the database is unreachable.
        """
        self.max_conn = max_conn
        self.connect_timeout = connect_timeout
        self.idle_timeout = idle_timeout
        self._slots = threading.BoundedSemaphore(max_conn)
        self._last_used: dict[int, float] = {}
        self._fatal_error: Optional[str] = None

        if conn_pool is not None:
            self._pool = conn_pool
            return
        try:
            self._pool = pool.ThreadedConnectionPool(
                min_conn, max_conn,
                host=host, port=port, dbname=dbname,
                user=user, password=password,
                connect_timeout=connect_timeout,
            )
            logger.info(f"Database connection pool initialized ({host}:{port}/{dbname}, max={max_conn}).")
        except psycopg2.Error as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise translate_error(e) from e

    # ── CONNECTIONS ───────────────────────────────────────

    @property
    def healthy(self) -> bool:
        """False once a pool-level failure has been recorded and not cleared by `ping()`."""
        return self._fatal_error is None

    def _record_failure(self, error: Exception) -> None:
        self._fatal_error = str(error).strip() or error.__class__.__name__
        logger.critical(f"Database pool unhealthy: {self._fatal_error}")

    def _acquire(self):
        if self._pool is None:
            raise ConnectionFailure("Database pool is closed.")
        if not self._slots.acquire(timeout=self.connect_timeout):
            logger.error(f"No free connection after {self.connect_timeout}s (max={self.max_conn}).")
            raise ConnectionFailure(
                f"Timed out after {self.connect_timeout}s waiting for a pooled connection"
            )
        try:
            conn = self._pool.getconn()
            last = self._last_used.pop(id(conn), None)
            stale = last is not None and self.idle_timeout and time.monotonic() - last > self.idle_timeout
            if conn.closed or stale:
                self._pool.putconn(conn, close=True)
                conn = self._pool.getconn()
            return conn
        except psycopg2.Error as e:
            self._slots.release()
            error = translate_error(e)
            if isinstance(error, ConnectionFailure):
                self._record_failure(e)
            raise error from e

    def _release(self, conn) -> None:
        try:
            if self._pool is None:
                conn.close()
                return
            broken = bool(conn.closed)
            if broken:
                self._record_failure(ConnectionFailure("server closed a pooled connection"))
            else:
                self._last_used[id(conn)] = time.monotonic()
            self._pool.putconn(conn, close=broken)
            if conn.closed:
                self._last_used.pop(id(conn), None)
        finally:
            self._slots.release()

    @staticmethod
    def _rollback(conn) -> None:
        if not conn.closed:
            conn.rollback()

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """
        Borrow a connection for the duration of a ``with`` block.

        The connection goes back to the pool whether the block succeeds or
        raises.
        """
        conn = self._acquire()
        try:
            yield conn
        finally:
            self._release(conn)

    @contextmanager
    def transaction(self) -> Iterator[extras.RealDictCursor]:
        """
        Run several statements atomically on a single connection.

        Yields a dict cursor. COMMIT when the block exits normally, ROLLBACK
        on any exception (driver errors are re-raised translated).
        """
        start = time.perf_counter()
        with self.connection() as conn:
            cur = None
            try:
                with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                    yield cur
                conn.commit()
            except Exception as e:
                self._rollback(conn)
                duration = (time.perf_counter() - start) * 1000
                logger.error(
                    f"Transaction rolled back after: {_last_statement(cur)}... [{duration:.0f} ms]: {e}"
                )
                if isinstance(e, psycopg2.Error):
                    raise translate_error(e) from e
                raise

    # ── QUERIES ───────────────────────────────────────────

    def _run(self, sql: str, params: Optional[Sequence] = None) -> tuple[list[dict], int]:
        start = time.perf_counter()
        with self.connection() as conn:
            try:
                with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                    cur.execute(sql, params)
                    rows = [dict(r) for r in cur.fetchall()] if cur.description else []
                    rowcount = cur.rowcount
                conn.commit()
            except psycopg2.Error as e:
                self._rollback(conn)
                duration = (time.perf_counter() - start) * 1000
                logger.error(f"Query failed: {_preview(sql)}... [{duration:.0f} ms]: {e}")
                raise translate_error(e) from e
        duration = (time.perf_counter() - start) * 1000
        logger.debug(f"Executed query: {_preview(sql)}... [{duration:.0f} ms]")
        return rows, rowcount

    def execute_query(self, sql: str, params: Optional[Sequence] = None) -> list[dict]:
        """
        Run one parameterized statement and return its rows.

        Args:
            sql: Statement text with ``%s`` placeholders.
            params: Positional values bound to the placeholders.

        Returns:
            Rows as dicts (empty for statements that return nothing).
        """
        rows, _ = self._run(sql, params)
        return rows

    def execute(self, sql: str, params: Optional[Sequence] = None) -> int:
        """Run one statement and return the number of affected rows."""
        _, rowcount = self._run(sql, params)
        return rowcount

    def ping(self) -> bool:
        """Round-trip ``SELECT 1``; clears a recorded failure on success."""
        try:
            self.execute_query("SELECT 1 AS ok")
        except DataAccessError as e:
            self._record_failure(e)
            return False
        self._fatal_error = None
        return True

    def health(self) -> dict:
        """Health snapshot for a supervisor: status, last error, pool bounds."""
        return {
            "healthy": self.healthy,
            "error": self._fatal_error,
            "max_connections": self.max_conn,
            "closed": self._pool is None,
        }

    # ── CRUD ──────────────────────────────────────────────

    @staticmethod
    def _record_for(tbl: Table, entity: Any) -> dict:
        """Column → value mapping for an insert or update."""
        if dataclasses.is_dataclass(entity):
            if hasattr(entity, "to_record"):
                return entity.to_record()
            return {
                k: v for k, v in dataclasses.asdict(entity).items()
                if v is not None and k in tbl.writable
            }
        return dict(entity)

    def create(self, table: str, entity: Any) -> int:
        """
        Insert one row and return its generated id.

        Args:
            table: Table name (must be part of the schema).
            entity: A dict of column values or a model dataclass.

        Raises:
            ConstraintViolation: On a duplicate email, SKU, etc.
            InvalidIdentifier: If a key is not a writable column.
        """
        tbl = get_table(table)
        sql, params = build_insert(tbl, self._record_for(tbl, entity))
        rows = self.execute_query(sql, params)
        new_id = rows[0]["id"]
        logger.info(f"Inserted {tbl.name} #{new_id}")
        return new_id

    def read_all(self, table: str) -> list[dict]:
        """Every row of a table, ordered by id."""
        tbl = get_table(table)
        return self.execute_query(f"SELECT * FROM {tbl.name} ORDER BY id ASC")

    def read_by_id(self, table: str, row_id: int) -> Optional[dict]:
        """One row by primary key, or None if absent."""
        tbl = get_table(table)
        rows = self.execute_query(f"SELECT * FROM {tbl.name} WHERE id = %s", (row_id,))
        return rows[0] if rows else None

    def update(self, table: str, row_id: int, partial: Any) -> None:
        """
        Set only the supplied columns on one row.

        There is no existence check: updating a missing id silently changes
        nothing. ``updated_at`` is refreshed on tables that carry it.
        """
        tbl = get_table(table)
        record = self._record_for(tbl, partial)
        if not record:
            logger.warning(f"Empty update for {tbl.name} #{row_id}; nothing to do.")
            return
        assignments = [f"{tbl.check_writable(c)} = %s" for c in record]
        if tbl.touch_on_update:
            assignments.append("updated_at = NOW()")
        sql = f"UPDATE {tbl.name} SET {', '.join(assignments)} WHERE id = %s"
        self.execute(sql, [*record.values(), row_id])
        logger.info(f"Updated {tbl.name} #{row_id}: {', '.join(record)}")

    def delete(self, table: str, row_id: int) -> None:
        """Delete one row by id; a missing row is not an error."""
        tbl = get_table(table)
        self.execute(f"DELETE FROM {tbl.name} WHERE id = %s", (row_id,))
        logger.info(f"Deleted {tbl.name} #{row_id}")

    def delete_all(self, table: str) -> int:
        """Delete every row of a table and return how many were removed."""
        tbl = get_table(table)
        count = self.execute(f"DELETE FROM {tbl.name}")
        logger.info(f"Deleted {count} row(s) from {tbl.name}")
        return count

    def close(self) -> None:
        """Close all connections in the pool."""
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            self._last_used.clear()
            logger.info("Database connection pool closed.")


_db: Optional[Database] = None


def init_pool(min_conn: int = DB_POOL_MIN, max_conn: int = DB_POOL_MAX) -> Database:
    """
    Initialize the process-wide Database.

    Args:
        min_conn: Minimum number of connections to keep open.
        max_conn: Maximum number of connections allowed.

    Raises:
        ConnectionFailure: If the database is unreachable.
    """
    global _db
    if _db is None:
        _db = Database(min_conn=min_conn, max_conn=max_conn)
    return _db


def get_database() -> Database:
    """
    Return the process-wide Database.

    Raises:
        RuntimeError: If the pool has not been initialized.
    """
    if _db is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    return _db


def close_pool() -> None:
    """Close the process-wide pool."""
    global _db
    if _db is not None:
        _db.close()
        _db = None
