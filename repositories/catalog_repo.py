"""
repositories/catalog_repo.py
-----------------------------
Categories and brands. Both are looked up by their unique name.
"""

from typing import Optional

from models.catalog import Brand, Category
from repositories.base_repo import BaseRepository


class CategoryRepository(BaseRepository):
    model = Category

    def get_by_name(self, name: str) -> Optional[Category]:
        return self._get_by("name", name)


class BrandRepository(BaseRepository):
    model = Brand

    def get_by_name(self, name: str) -> Optional[Brand]:
        return self._get_by("name", name)
