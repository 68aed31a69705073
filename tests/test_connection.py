"""
Database client tests: connection scoping, error translation and the
generic CRUD helpers, against a fake pool.
"""

from contextlib import ExitStack

import psycopg2
import pytest

from db.connection import Database
from db.errors import ConnectionFailure, ConstraintViolation, InvalidIdentifier, QueryExecutionFailure
from tests.fakes import ClosingPool, FakeUniqueViolation


class TestConnectionScope:

    def test_execute_query_returns_rows_and_releases(self, db, fake_conn, fake_pool):
        fake_conn.respond(rows=[{"id": 1}, {"id": 2}])

        rows = db.execute_query("SELECT id FROM users")

        assert rows == [{"id": 1}, {"id": 2}]
        assert fake_conn.commits == 1
        assert fake_pool.checked_out == 0
        assert fake_pool.returned == [(fake_conn, False)]

    def test_statement_without_result_returns_empty_list(self, db, fake_conn):
        fake_conn.respond(rowcount=3)
        assert db.execute_query("DELETE FROM users") == []

    def test_failure_rolls_back_and_still_releases(self, db, fake_conn, fake_pool):
        fake_conn.respond(error=psycopg2.ProgrammingError('syntax error at or near "SELEC"'))

        with pytest.raises(QueryExecutionFailure, match="syntax error"):
            db.execute_query("SELEC 1")

        assert fake_conn.rollbacks == 1
        assert fake_conn.commits == 0
        assert fake_pool.checked_out == 0

    def test_driver_error_is_chained(self, db, fake_conn):
        original = psycopg2.DataError("invalid input syntax for type integer")
        fake_conn.respond(error=original)

        with pytest.raises(QueryExecutionFailure) as exc_info:
            db.execute_query("SELECT * FROM users WHERE id = %s", ("abc",))

        assert exc_info.value.__cause__ is original

    def test_unique_violation_identifies_field(self, db, fake_conn):
        fake_conn.respond(error=FakeUniqueViolation(field="email", value="a@b.c"))

        with pytest.raises(ConstraintViolation) as exc_info:
            db.create("users", {"fullname": "A", "email": "a@b.c", "phone": 1, "address": "x"})

        assert exc_info.value.field == "email"
        assert exc_info.value.value == "a@b.c"
        assert exc_info.value.is_unique_violation

    def test_pool_exhaustion_times_out(self, fake_pool):
        db = Database(conn_pool=fake_pool, max_conn=1, connect_timeout=0.01)

        with db.connection():
            with pytest.raises(ConnectionFailure, match="Timed out"):
                db.execute_query("SELECT 1")

        assert fake_pool.checked_out == 0

    def test_connect_error_marks_unhealthy(self, db, fake_pool):
        def refuse():
            raise psycopg2.OperationalError("could not connect to server")
        fake_pool.getconn = refuse

        with pytest.raises(ConnectionFailure):
            db.execute_query("SELECT 1")

        assert db.healthy is False
        assert "could not connect" in db.health()["error"]

    def test_broken_connection_is_discarded(self, db, fake_conn, fake_pool):
        with db.connection() as conn:
            conn.closed = 2

        assert fake_pool.returned == [(fake_conn, True)]
        assert db.healthy is False

    def test_closed_connections_are_not_tracked_as_idle(self):
        pool = ClosingPool(minconn=1)
        db = Database(conn_pool=pool, max_conn=5, connect_timeout=0.05, idle_timeout=50)

        for _ in range(50):
            with ExitStack() as stack:
                for _ in range(5):
                    stack.enter_context(db.connection())

        assert len(db._last_used) <= len(pool.idle) == 1
        assert pool.forced_closes == 0

    def test_ping_clears_recorded_failure(self, db, fake_conn):
        db._record_failure(ConnectionFailure("lost"))
        fake_conn.respond(rows=[{"ok": 1}])

        assert db.ping() is True
        assert db.healthy is True

    def test_closed_database_refuses_queries(self, db, fake_pool):
        db.close()

        assert fake_pool.closed_all
        with pytest.raises(ConnectionFailure):
            db.execute_query("SELECT 1")


class TestTransaction:

    def test_commits_once_on_success(self, db, fake_conn):
        with db.transaction() as cur:
            cur.execute("INSERT INTO brands (name) VALUES (%s)", ("A",))
            cur.execute("INSERT INTO brands (name) VALUES (%s)", ("B",))

        assert fake_conn.commits == 1
        assert fake_conn.rollbacks == 0

    def test_rolls_back_on_driver_error(self, db, fake_conn, fake_pool):
        fake_conn.respond(rows=[{"id": 1}]).respond(error=FakeUniqueViolation())

        with pytest.raises(ConstraintViolation):
            with db.transaction() as cur:
                cur.execute("INSERT 1")
                cur.execute("INSERT 2")

        assert fake_conn.commits == 0
        assert fake_conn.rollbacks == 1
        assert fake_pool.checked_out == 0

    def test_rollback_is_logged_with_statement_and_duration(self, db, fake_conn, caplog):
        fake_conn.respond(error=FakeUniqueViolation())

        with pytest.raises(ConstraintViolation):
            with db.transaction() as cur:
                cur.execute("INSERT INTO users (email)\n VALUES (%s)", ("a@b.c",))

        record = next(r for r in caplog.records if "rolled back" in r.getMessage())
        assert "INSERT INTO users (email)..." in record.getMessage()
        assert " ms]" in record.getMessage()

    def test_rolls_back_on_application_error(self, db, fake_conn):
        with pytest.raises(KeyError):
            with db.transaction():
                raise KeyError("boom")

        assert fake_conn.rollbacks == 1


class TestCrud:

    def test_create_builds_parameterized_insert(self, db, fake_conn):
        fake_conn.respond(rows=[{"id": 7}])

        new_id = db.create("users", {"fullname": "John", "email": "j@x.io", "phone": 1, "address": "A"})

        sql, params = fake_conn.executed[0]
        assert new_id == 7
        assert sql == (
            "INSERT INTO users (fullname, email, phone, address) "
            "VALUES (%s, %s, %s, %s) RETURNING id"
        )
        assert params == ["John", "j@x.io", 1, "A"]

    def test_create_rejects_unknown_column(self, db, fake_conn):
        with pytest.raises(InvalidIdentifier):
            db.create("users", {"fullname": "x", "is_admin; DROP TABLE users": True})
        assert fake_conn.executed == []

    def test_create_rejects_unknown_table(self, db):
        with pytest.raises(InvalidIdentifier):
            db.create("accounts", {"name": "x"})

    def test_read_by_id_returns_none_when_absent(self, db, fake_conn):
        fake_conn.respond(rows=[])
        assert db.read_by_id("users", 99) is None

    def test_read_all_orders_by_id(self, db, fake_conn):
        fake_conn.respond(rows=[])
        db.read_all("products")
        assert fake_conn.statements == ["SELECT * FROM products ORDER BY id ASC"]

    def test_update_sets_only_supplied_fields(self, db, fake_conn):
        db.update("users", 3, {"phone": 3987654321})

        sql, params = fake_conn.executed[0]
        assert sql == "UPDATE users SET phone = %s, updated_at = NOW() WHERE id = %s"
        assert params == [3987654321, 3]

    def test_update_without_updated_at_column(self, db, fake_conn):
        db.update("order_items", 5, {"quantity": 2})
        assert fake_conn.statements == ["UPDATE order_items SET quantity = %s WHERE id = %s"]

    def test_empty_update_is_a_no_op(self, db, fake_conn):
        db.update("users", 3, {})
        assert fake_conn.executed == []

    def test_update_cannot_touch_server_columns(self, db):
        with pytest.raises(InvalidIdentifier):
            db.update("users", 3, {"id": 4})

    def test_delete_by_id(self, db, fake_conn):
        fake_conn.respond(rowcount=0)
        db.delete("products", 42)
        assert fake_conn.executed == [("DELETE FROM products WHERE id = %s", (42,))]

    def test_delete_all_returns_count(self, db, fake_conn):
        fake_conn.respond(rowcount=4)
        assert db.delete_all("cart_items") == 4
