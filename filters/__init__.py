"""
filters/ - Filtering Layer
==========================
Turns structured filter options into one parameterized SELECT (plus its COUNT)
and runs it with pagination. Values are always bound parameters; column names
come from the schema allow-list.
"""

from filters.base import FilterResult, Range
from filters.product_filter import ProductFilter, ProductFilterOptions
from filters.user_filter import UserFilter, UserFilterOptions

__all__ = [
    "FilterResult",
    "ProductFilter",
    "ProductFilterOptions",
    "Range",
    "UserFilter",
    "UserFilterOptions",
]
