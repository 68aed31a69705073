"""
models/product.py
-----------------
Domain model for catalogue products.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models.base import Record


@dataclass
class Product(Record):
    """
    Represents a product in the catalogue.

    Attributes:
        id: Database primary key (None for new records).
        product_name: Display name.
        price: Unit price.
        stock_quantity: Units on hand.
        description: Optional long text.
        category_id: Optional reference to categories.
        brand_id: Optional reference to brands.
        sku: Unique stock keeping unit, when known.
        image_url: Optional picture location.
        is_active: Whether the product is listed.
    """
    TABLE = "products"

    product_name: str
    price: float
    stock_quantity: int
    description: Optional[str] = None
    category_id: Optional[int] = None
    brand_id: Optional[int] = None
    sku: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: dict) -> "Product":
        product = super().from_row(row)
        if product.price is not None:
            product.price = float(product.price)
        return product

    def has_image(self) -> bool:
        """Returns True if an image URL is set and not blank."""
        return bool(self.image_url)

    def __str__(self) -> str:
        return f"#{self.id} {self.product_name} ({self.sku or 'no SKU'}) {self.price:.2f}"
