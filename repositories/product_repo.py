"""
repositories/product_repo.py
-----------------------------
Data access layer for catalogue products.
"""

from typing import Optional

from models.product import Product
from repositories.base_repo import BaseRepository


class ProductRepository(BaseRepository):
    """Repository for CRUD operations on the products table."""

    model = Product

    def get_by_sku(self, sku: str) -> Optional[Product]:
        return self._get_by("sku", sku)
