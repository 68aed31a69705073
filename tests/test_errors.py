import psycopg2
from psycopg2 import pool

from db.errors import (
    ConnectionFailure,
    ConstraintViolation,
    QueryExecutionFailure,
    translate_error,
)
from tests.fakes import FakeUniqueViolation


def test_operational_error_is_connection_failure():
    assert isinstance(translate_error(psycopg2.OperationalError("timeout expired")), ConnectionFailure)


def test_exhausted_pool_is_connection_failure():
    assert isinstance(translate_error(pool.PoolError("connection pool exhausted")), ConnectionFailure)


def test_unique_violation_details():
    error = translate_error(FakeUniqueViolation(field="sku", value="SKU123", constraint="products_sku_key"))

    assert isinstance(error, ConstraintViolation)
    assert (error.field, error.value, error.constraint) == ("sku", "SKU123", "products_sku_key")
    assert "products_sku_key" in str(error)


def test_other_errors_are_surfaced_verbatim():
    error = translate_error(psycopg2.ProgrammingError('relation "userz" does not exist'))

    assert isinstance(error, QueryExecutionFailure)
    assert str(error) == 'relation "userz" does not exist'
