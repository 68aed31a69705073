"""
filters/product_filter.py
-------------------------
Filtering for the `products` table.
"""

from dataclasses import dataclass, field
from typing import Optional

from db.connection import Database
from filters.base import BaseFilter, BaseFilterOptions, DateLike, Range, WhereBuilder
from models.product import Product


@dataclass
class ProductFilterOptions(BaseFilterOptions):
    id: Optional[int] = None
    ids: list[int] = field(default_factory=list)
    product_name: Optional[str] = None
    product_name_contains: Optional[str] = None
    description_contains: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    price_range: Optional[Range] = None
    min_stock: Optional[int] = None
    max_stock: Optional[int] = None
    stock_range: Optional[Range] = None
    category_id: Optional[int] = None
    category_ids: list[int] = field(default_factory=list)
    brand_id: Optional[int] = None
    brand_ids: list[int] = field(default_factory=list)
    sku: Optional[str] = None
    sku_contains: Optional[str] = None
    has_image: Optional[bool] = None
    is_active: Optional[bool] = None
    created_after: Optional[DateLike] = None
    created_before: Optional[DateLike] = None
    updated_after: Optional[DateLike] = None
    updated_before: Optional[DateLike] = None

    def __post_init__(self):
        # Ranges may arrive as {"min": .., "max": ..} from dict options.
        if isinstance(self.price_range, dict):
            self.price_range = Range(**self.price_range)
        if isinstance(self.stock_range, dict):
            self.stock_range = Range(**self.stock_range)


class ProductFilter(BaseFilter):
    """
    Filter and paginate products.

    Range options stack: ``min_stock`` together with ``stock_range`` yields
    both conditions, AND-joined.
    """

    options_class = ProductFilterOptions
    model = Product

    def __init__(self, db: Database):
        super().__init__(db, "products")

    def build_where(self, options: ProductFilterOptions) -> WhereBuilder:
        where = WhereBuilder()
        where.equals("id", options.id)
        where.any_of("id", options.ids)

        where.equals("product_name", options.product_name)
        where.contains("product_name", options.product_name_contains)
        where.contains("description", options.description_contains)

        where.at_least("price", options.min_price)
        where.at_most("price", options.max_price)
        where.between("price", options.price_range)

        where.at_least("stock_quantity", options.min_stock)
        where.at_most("stock_quantity", options.max_stock)
        where.between("stock_quantity", options.stock_range)

        where.equals("category_id", options.category_id)
        where.any_of("category_id", options.category_ids)
        where.equals("brand_id", options.brand_id)
        where.any_of("brand_id", options.brand_ids)

        where.equals("sku", options.sku)
        where.contains("sku", options.sku_contains)

        if options.has_image is True:
            where.add("image_url IS NOT NULL AND image_url <> ''")
        elif options.has_image is False:
            where.add("(image_url IS NULL OR image_url = '')")

        where.equals("is_active", options.is_active)

        where.date_range("created_at", options.created_after, options.created_before)
        where.date_range("updated_at", options.updated_after, options.updated_before)
        return where

    # ── CONVENIENCE QUERIES ───────────────────────────────

    def get_products_by_category(self, category_id: int) -> list[Product]:
        return self.filter(category_id=category_id, is_active=True).data

    def get_products_by_brand(self, brand_id: int) -> list[Product]:
        return self.filter(brand_id=brand_id, is_active=True).data

    def get_products_in_price_range(self, min_price: float, max_price: float) -> list[Product]:
        """Active products priced within [min_price, max_price], cheapest first."""
        return self.filter(
            price_range=Range(min_price, max_price),
            is_active=True,
            sort_by="price",
        ).data

    def get_low_stock_products(self, threshold: int = 10) -> list[Product]:
        return self.filter(
            max_stock=threshold,
            is_active=True,
            sort_by="stock_quantity",
        ).data

    def search_products(self, term: str) -> list[Product]:
        """Active products whose name or description contains ``term``."""
        return self.filter(
            search=term,
            search_fields=["product_name", "description"],
            is_active=True,
            sort_by="product_name",
        ).data

    def get_newest_products(self, limit: int = 10) -> list[Product]:
        return self.filter(
            is_active=True,
            sort_by="created_at",
            sort_order="desc",
            limit=limit,
        ).data
