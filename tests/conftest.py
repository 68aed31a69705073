import sys
from pathlib import Path

import pytest

# Ensure project root on sys.path
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from db.connection import Database  # noqa: E402
from tests.fakes import FakeConnection, FakePool  # noqa: E402


@pytest.fixture()
def fake_conn():
    return FakeConnection()


@pytest.fixture()
def fake_pool(fake_conn):
    return FakePool(fake_conn)


@pytest.fixture()
def db(fake_pool):
    return Database(conn_pool=fake_pool, max_conn=2, connect_timeout=0.05)
