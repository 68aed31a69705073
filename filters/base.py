"""
filters/base.py
---------------
Shared machinery for the entity filters: option types, the WHERE-clause
accumulator, sorting, counting and pagination.
"""

import math
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any, NamedTuple, Optional, Sequence, Union

from db.connection import Database
from db.errors import InvalidFilter
from db.schema import get_table
from utils.logger import get_logger

logger = get_logger(__name__)

DateLike = Union[date, datetime, str]

SORT_ORDERS = ("asc", "desc")


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class Range:
    """Inclusive bounds for a BETWEEN condition."""
    min: Any
    max: Any


@dataclass
class BaseFilterOptions:
    """
    Options every entity filter understands.

    Paging is either ``page`` + ``page_size`` or ``limit`` (+ ``offset``),
    never both. With neither, every matching row is returned.
    """
    limit: Optional[int] = None
    offset: Optional[int] = None
    page: Optional[int] = None
    page_size: Optional[int] = None
    sort_by: Optional[str] = None
    sort_order: str = "asc"
    search: Optional[str] = None
    search_fields: list[str] = field(default_factory=list)


@dataclass
class FilterResult:
    """Rows of one page plus the total number of matching rows."""
    data: list
    total: int
    page: Optional[int] = None
    page_size: Optional[int] = None
    total_pages: Optional[int] = None
    has_next_page: Optional[bool] = None
    has_previous_page: Optional[bool] = None

    def to_dict(self) -> dict:
        """Plain dict; pagination keys are omitted unless page mode was used."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


class BuiltQuery(NamedTuple):
    sql: str
    params: list
    count_sql: str
    count_params: list


class WhereBuilder:
    """Accumulates AND-joined conditions and their bound parameters."""

    def __init__(self):
        self.conditions: list[str] = []
        self.params: list = []

    def add(self, condition: str, *params) -> None:
        self.conditions.append(condition)
        self.params.extend(params)

    def equals(self, column: str, value) -> None:
        if value is not None:
            self.add(f"{column} = %s", value)

    def contains(self, column: str, text: Optional[str]) -> None:
        if text is not None:
            self.add(f"{column} ILIKE %s", f"%{escape_like(text)}%")

    def at_least(self, column: str, value) -> None:
        if value is not None:
            self.add(f"{column} >= %s", value)

    def at_most(self, column: str, value) -> None:
        if value is not None:
            self.add(f"{column} <= %s", value)

    def between(self, column: str, bounds: Optional[Range]) -> None:
        if bounds is not None:
            self.add(f"{column} BETWEEN %s AND %s", bounds.min, bounds.max)

    def any_of(self, column: str, values: Optional[Sequence]) -> None:
        # An empty list means "no restriction", not "match nothing".
        if values:
            self.add(f"{column} = ANY(%s)", list(values))

    def date_range(self, column: str, after: Optional[DateLike], before: Optional[DateLike]) -> None:
        self.at_least(column, after)
        self.at_most(column, before)

    def clause(self) -> str:
        return " AND ".join(self.conditions)


class BaseFilter:
    """
    Filter one table by a dataclass of optional criteria.

    Subclasses set ``options_class`` and ``model`` and implement
    `build_where`.
    """

    options_class = BaseFilterOptions
    model = None

    def __init__(self, db: Database, table_name: str):
        self.db = db
        self.table = get_table(table_name)

    # ── QUERY BUILDING ────────────────────────────────────

    def build_where(self, options) -> WhereBuilder:
        raise NotImplementedError

    def _coerce(self, options, overrides: dict):
        if options is None:
            return self.options_class(**overrides)
        if isinstance(options, dict):
            return self.options_class(**{**options, **overrides})
        if overrides:
            raise InvalidFilter("Pass either an options object or keyword options, not both")
        return options

    @staticmethod
    def _validate_paging(options) -> None:
        page_mode = options.page is not None or options.page_size is not None
        if page_mode and (options.limit is not None or options.offset is not None):
            raise InvalidFilter("page/page_size and limit/offset are mutually exclusive")
        if page_mode:
            if options.page is None or options.page_size is None:
                raise InvalidFilter("page and page_size must be given together")
            if options.page < 1 or options.page_size < 1:
                raise InvalidFilter("page and page_size must be positive")
        if options.limit is not None and options.limit < 0:
            raise InvalidFilter("limit must not be negative")
        if options.offset is not None and options.offset < 0:
            raise InvalidFilter("offset must not be negative")

    def _order_by(self, options) -> str:
        if not options.sort_by:
            return " ORDER BY id ASC"
        column = self.table.check_column(options.sort_by)
        direction = (options.sort_order or "asc").lower()
        if direction not in SORT_ORDERS:
            raise InvalidFilter(f"sort_order must be 'asc' or 'desc', got '{options.sort_order}'")
        order = f" ORDER BY {column} {direction.upper()}"
        if column != "id":
            order += ", id ASC"
        return order

    def build_query(self, options=None, **kwargs) -> BuiltQuery:
        """
        Build the page query and its count query without running them.

        Returns:
            BuiltQuery with ``%s`` placeholder statements and parameter lists.

        Raises:
            InvalidFilter: On inconsistent paging or sort options.
            InvalidIdentifier: If a sort or search field is not a column.
        """
        options = self._coerce(options, kwargs)
        self._validate_paging(options)
        where = self.build_where(options)
        count_where = f" WHERE {where.clause()}" if where.conditions else ""
        count_sql = f"SELECT COUNT(*) AS total FROM {self.table.name}{count_where}"
        count_params = list(where.params)

        # The count covers the filter criteria only; search narrows the rows.
        if options.search and options.search_fields:
            columns = [self.table.check_column(f) for f in options.search_fields]
            pattern = f"%{escape_like(options.search)}%"
            where.add(
                "(" + " OR ".join(f"{c} ILIKE %s" for c in columns) + ")",
                *([pattern] * len(columns)),
            )

        where_sql = f" WHERE {where.clause()}" if where.conditions else ""
        sql = f"SELECT * FROM {self.table.name}{where_sql}{self._order_by(options)}"
        params = list(where.params)

        if options.page is not None:
            sql += " LIMIT %s OFFSET %s"
            params.extend([options.page_size, (options.page - 1) * options.page_size])
        else:
            if options.limit is not None:
                sql += " LIMIT %s"
                params.append(options.limit)
            if options.offset is not None:
                sql += " OFFSET %s"
                params.append(options.offset)

        return BuiltQuery(sql, params, count_sql, count_params)

    # ── EXECUTION ─────────────────────────────────────────

    def filter(self, options=None, **kwargs) -> FilterResult:
        """
        Run the filter and return one page of models plus pagination info.

        Options may be an options dataclass, a dict, or keyword arguments.
        """
        options = self._coerce(options, kwargs)
        query = self.build_query(options)

        total = int(self.db.execute_query(query.count_sql, query.count_params)[0]["total"])
        rows = self.db.execute_query(query.sql, query.params)
        data = [self.model.from_row(r) for r in rows] if self.model else rows
        logger.debug(f"{self.table.name} filter matched {total} row(s), returned {len(data)}")

        if options.page is None:
            return FilterResult(data=data, total=total)

        total_pages = math.ceil(total / options.page_size)
        return FilterResult(
            data=data,
            total=total,
            page=options.page,
            page_size=options.page_size,
            total_pages=total_pages,
            has_next_page=options.page < total_pages,
            has_previous_page=options.page > 1,
        )
