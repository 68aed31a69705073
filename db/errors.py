"""
db/errors.py
------------
Exception hierarchy for the data-access layer.

Driver errors (psycopg2) never leak out of the db package directly: they are
translated into one of the classes below, with the original error chained as
``__cause__``. Missing rows are not errors; point lookups return ``None``.
"""

import re
from typing import Optional

import psycopg2
from psycopg2 import pool

# e.g. 'Key (email)=(john@example.com) already exists.'
_DETAIL_RE = re.compile(r"Key \((?P<field>[^)]+)\)=\((?P<value>.*)\)")


class DataAccessError(Exception):
    """Base class for every error raised by the data-access layer."""
    pass


class ConnectionFailure(DataAccessError):
    """Pool exhausted, acquisition timed out, or the server is unreachable."""
    pass


class ConstraintViolation(DataAccessError):
    """
    An integrity constraint rejected the statement.

    Attributes:
        constraint: Server-side constraint name (e.g. ``users_email_key``).
        field: Column that conflicted, when the server reports it.
        value: Conflicting value as reported by the server.
        pgcode: SQLSTATE code (``23505`` for unique violations).
    """

    def __init__(self, message: str, constraint: Optional[str] = None,
                 field: Optional[str] = None, value: Optional[str] = None,
                 pgcode: Optional[str] = None):
        super().__init__(message)
        self.constraint = constraint
        self.field = field
        self.value = value
        self.pgcode = pgcode

    @property
    def is_unique_violation(self) -> bool:
        return self.pgcode == "23505"


class QueryExecutionFailure(DataAccessError):
    """Malformed SQL, type mismatch or any other server-side failure."""

    def __init__(self, message: str, pgcode: Optional[str] = None):
        super().__init__(message)
        self.pgcode = pgcode


class InvalidIdentifier(DataAccessError, ValueError):
    """A table, column or sort field is not on the allow-list."""
    pass


class InvalidFilter(DataAccessError, ValueError):
    """Filter options are inconsistent (bad sort order, mixed paging modes...)."""
    pass


def translate_error(error: Exception) -> DataAccessError:
    """
    Map a psycopg2 exception onto the data-access taxonomy.

    Args:
        error: A ``psycopg2.Error`` raised by the driver or the pool.

    Returns:
        The matching DataAccessError (not raised; callers do ``raise ... from``).
    """
    if isinstance(error, DataAccessError):
        return error

    if isinstance(error, (psycopg2.OperationalError, psycopg2.InterfaceError, pool.PoolError)):
        return ConnectionFailure(str(error).strip())

    if isinstance(error, psycopg2.IntegrityError):
        diag = getattr(error, "diag", None)
        detail = getattr(diag, "message_detail", None) or ""
        constraint = getattr(diag, "constraint_name", None)
        field = getattr(diag, "column_name", None)
        value = None
        match = _DETAIL_RE.search(detail)
        if match:
            field = match.group("field")
            value = match.group("value")
        message = str(error).strip()
        return ConstraintViolation(
            message, constraint=constraint, field=field, value=value,
            pgcode=getattr(error, "pgcode", None),
        )

    return QueryExecutionFailure(str(error).strip(), pgcode=getattr(error, "pgcode", None))
