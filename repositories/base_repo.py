"""
repositories/base_repo.py
-------------------------
CRUD shared by every entity repository.
"""

from typing import Any, Optional

from db.connection import Database, build_insert
from db.errors import ConstraintViolation
from db.schema import get_table
from utils.logger import get_logger

logger = get_logger(__name__)


class BaseRepository:
    """
    Repository for one model class.

    Subclasses set ``model`` to a `models.base.Record` dataclass; the table
    comes from ``model.TABLE``.
    """

    model: Any = None

    def __init__(self, db: Database):
        self.db = db
        self.table = get_table(self.model.TABLE)

    # ── CREATE ────────────────────────────────────────────

    def add(self, entity):
        """
        Insert a new record.

        Args:
            entity: The model object to persist.

        Returns:
            The same object with its `id` populated.

        Raises:
            ConstraintViolation: If a unique column already holds the value.
        """
        try:
            entity.id = self.db.create(self.table.name, entity)
        except ConstraintViolation as e:
            logger.error(f"Failed to add {self.table.name}: {e.field or e.constraint} {e.value or ''} rejected")
            raise
        return entity

    def add_many(self, entities: list) -> list[int]:
        """
        Insert several records in one transaction.

        Either every record is stored or, if any insert fails, none is.

        Returns:
            Generated ids in input order.
        """
        ids = []
        with self.db.transaction() as cur:
            for entity in entities:
                sql, params = build_insert(self.table, entity.to_record())
                cur.execute(sql, params)
                ids.append(cur.fetchone()["id"])
        for entity, new_id in zip(entities, ids):
            entity.id = new_id
        logger.info(f"{len(ids)} {self.table.name} inserted successfully")
        return ids

    # ── READ ──────────────────────────────────────────────

    def get_all(self) -> list:
        rows = self.db.read_all(self.table.name)
        logger.info(f"Retrieved {len(rows)} {self.table.name}")
        return [self.model.from_row(r) for r in rows]

    def get_by_id(self, entity_id: int):
        """Fetch one record by primary key, or None if it does not exist."""
        row = self.db.read_by_id(self.table.name, entity_id)
        return self.model.from_row(row) if row else None

    def _get_by(self, column: str, value) -> Optional[Any]:
        column = self.table.check_column(column)
        rows = self.db.execute_query(f"SELECT * FROM {self.table.name} WHERE {column} = %s", (value,))
        return self.model.from_row(rows[0]) if rows else None

    # ── UPDATE ────────────────────────────────────────────

    def update(self, entity_id: int, **fields) -> None:
        """Set only the given fields, e.g. ``repo.update(3, phone=3987654321)``."""
        self.db.update(self.table.name, entity_id, fields)

    # ── DELETE ────────────────────────────────────────────

    def delete(self, entity_id: int) -> None:
        self.db.delete(self.table.name, entity_id)

    def delete_all(self) -> int:
        return self.db.delete_all(self.table.name)
