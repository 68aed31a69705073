"""
models/catalog.py
-----------------
Lookup entities products point at.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models.base import Record


@dataclass
class Category(Record):
    TABLE = "categories"

    name: str
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class Brand(Record):
    TABLE = "brands"

    name: str
    country: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
