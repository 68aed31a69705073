"""
filters/user_filter.py
----------------------
Filtering for the `users` table.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from db.connection import Database
from filters.base import BaseFilter, BaseFilterOptions, DateLike, WhereBuilder, escape_like
from models.user import User


@dataclass
class UserFilterOptions(BaseFilterOptions):
    id: Optional[int] = None
    ids: list[int] = field(default_factory=list)
    fullname: Optional[str] = None
    fullname_contains: Optional[str] = None
    email: Optional[str] = None
    email_contains: Optional[str] = None
    email_domain: Optional[str] = None  # e.g. "gmail.com"
    phone: Optional[int] = None
    phone_starts_with: Optional[str] = None
    address_contains: Optional[str] = None
    created_after: Optional[DateLike] = None
    created_before: Optional[DateLike] = None
    updated_after: Optional[DateLike] = None
    updated_before: Optional[DateLike] = None


class UserFilter(BaseFilter):
    """Filter and paginate users."""

    options_class = UserFilterOptions
    model = User

    def __init__(self, db: Database):
        super().__init__(db, "users")

    def build_where(self, options: UserFilterOptions) -> WhereBuilder:
        where = WhereBuilder()
        where.equals("id", options.id)
        where.any_of("id", options.ids)

        where.equals("fullname", options.fullname)
        where.contains("fullname", options.fullname_contains)

        where.equals("email", options.email)
        where.contains("email", options.email_contains)
        if options.email_domain is not None:
            where.add("email ILIKE %s", f"%@{escape_like(options.email_domain)}")

        where.equals("phone", options.phone)
        if options.phone_starts_with is not None:
            where.add("CAST(phone AS TEXT) LIKE %s", f"{escape_like(str(options.phone_starts_with))}%")

        where.contains("address", options.address_contains)

        where.date_range("created_at", options.created_after, options.created_before)
        where.date_range("updated_at", options.updated_after, options.updated_before)
        return where

    # ── CONVENIENCE QUERIES ───────────────────────────────

    def get_users_by_email_domain(self, domain: str) -> list[User]:
        return self.filter(email_domain=domain).data

    def get_users_by_name_pattern(self, name_pattern: str) -> list[User]:
        return self.filter(fullname_contains=name_pattern).data

    def get_recent_users(self, days: int = 30) -> list[User]:
        """Users created in the last ``days`` days, newest first."""
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        return self.filter(created_after=cutoff, sort_by="created_at", sort_order="desc").data
