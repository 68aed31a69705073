"""
models/base.py
--------------
Shared row ↔ dataclass conversion for the domain models.
"""

from dataclasses import fields
from typing import ClassVar

from db.schema import get_table


class Record:
    """
    Mixin for model dataclasses backed by one table.

    Subclasses set ``TABLE`` to the table name registered in `db.schema`.
    """

    TABLE: ClassVar[str] = ""

    @classmethod
    def from_row(cls, row: dict):
        """Build a model from a dict row, ignoring columns the model does not know."""
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in row.items() if k in names})

    def to_record(self) -> dict:
        """
        Writable column values for an INSERT.

        Server-generated columns (id, timestamps) and ``None`` values are left
        out so the column defaults apply.
        """
        writable = get_table(self.TABLE).writable
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name in writable and getattr(self, f.name) is not None
        }
