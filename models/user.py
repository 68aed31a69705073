"""
models/user.py
--------------
Domain model for customers.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models.base import Record


@dataclass
class User(Record):
    """
    Represents a customer account.

    Attributes:
        id: Database primary key (None for new records).
        fullname: Display name.
        email: Unique contact address.
        phone: Phone number stored as digits.
        address: Postal address.
        created_at: Timestamp when the record was created.
        updated_at: Timestamp of the last update.
    """
    TABLE = "users"

    fullname: str
    email: str
    phone: int
    address: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def email_domain(self) -> str:
        return self.email.rsplit("@", 1)[-1]

    def __str__(self) -> str:
        return f"#{self.id} {self.fullname} <{self.email}>"
