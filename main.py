"""
main.py
-------
Entry point for the shopdata demo.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Walk through user and product CRUD, filtering, orders and the reports.
    - Report pool health to the caller via the exit status.
"""

import sys
from pprint import pformat

from db.connection import Database, close_pool, init_pool
from db.errors import ConstraintViolation, DataAccessError
from db.init_db import create_tables
from filters import ProductFilter, Range, UserFilter
from models.catalog import Brand, Category
from models.order import Order, OrderItem, Payment
from models.product import Product
from models.user import User
from queries import analytics, joins, set_operations
from repositories.catalog_repo import BrandRepository, CategoryRepository
from repositories.order_repo import OrderRepository
from repositories.product_repo import ProductRepository
from repositories.user_repo import UserRepository
from utils.logger import get_logger

logger = get_logger(__name__)


def run_user_operations(db: Database) -> None:
    users = UserRepository(db)
    user = users.get_by_email("john.doe@example.com") or users.add(User(
        fullname="John Doe",
        email="john.doe@example.com",
        phone=1234567890,
        address="123 Main St",
    ))
    logger.info(f"User: {user}")

    try:
        users.add(User(fullname="John Again", email=user.email, phone=1, address="-"))
    except ConstraintViolation as e:
        logger.warning(f"Duplicate rejected as expected: {e.field}={e.value}")

    users.update(user.id, phone=3987654321)
    logger.info(f"After update: {users.get_by_id(user.id)}")
    logger.info(f"All users: {len(users.get_all())}")


def run_product_operations(db: Database) -> Product:
    category = CategoryRepository(db).get_by_name("Electronics") or CategoryRepository(db).add(
        Category(name="Electronics")
    )
    brand = BrandRepository(db).get_by_name("Acme") or BrandRepository(db).add(
        Brand(name="Acme", country="US")
    )

    products = ProductRepository(db)
    product = products.get_by_sku("SKU123") or products.add(Product(
        product_name="Sample Product",
        description="This is a sample product",
        price=19.99,
        stock_quantity=100,
        category_id=category.id,
        brand_id=brand.id,
        sku="SKU123",
        image_url="http://example.com/image.jpg",
    ))
    products.update(product.id, price=17.99)
    product = products.get_by_id(product.id)
    logger.info(f"After update: {product}")
    return product


def run_filters(db: Database) -> None:
    user_filter = UserFilter(db)
    page = user_filter.filter(email_domain="example.com", page=1, page_size=10,
                              sort_by="created_at", sort_order="desc")
    logger.info(f"example.com users: {pformat(page.to_dict())}")

    product_filter = ProductFilter(db)
    page = product_filter.filter(price_range=Range(10, 500), is_active=True,
                                 sort_by="price", sort_order="desc", page=1, page_size=20)
    logger.info(f"Products 10..500: {page.total} match, {page.total_pages} page(s)")
    logger.info(f"Low stock: {product_filter.get_low_stock_products(5)}")
    logger.info(f"Search 'sample': {product_filter.search_products('sample')}")


def run_orders(db: Database, product: Product) -> None:
    user = UserRepository(db).get_by_email("john.doe@example.com")
    orders = OrderRepository(db)
    order = orders.place_order(
        Order(user_id=user.id),
        [OrderItem(product_id=product.id, quantity=2, price=product.price)],
    )
    orders.record_payment(Payment(order_id=order.id, amount=order.total_amount, method="card"))


def run_reports(db: Database) -> None:
    reports = {
        "Orders with users": joins.get_orders_with_users,
        "Users with orders": joins.get_users_with_orders,
        "Order lines": joins.get_user_order_product_details,
        "Order details": analytics.get_order_details,
        "Sales by category": analytics.get_sales_by_category,
        "Sales rollup": analytics.get_sales_rollup,
        "Sales cube": analytics.get_sales_cube,
        "Users and products": set_operations.get_users_and_products,
        "Above-average products": set_operations.get_expensive_products,
    }
    for title, report in reports.items():
        logger.info(f"{title}:\n{pformat(report(db))}")


def main() -> int:
    """Run the demo; returns the process exit status."""
    try:
        db = init_pool()
    except DataAccessError as e:
        logger.critical(f"Cannot start: {e}")
        return 2

    status = 0
    try:
        create_tables(db)
        run_user_operations(db)
        product = run_product_operations(db)
        run_filters(db)
        run_orders(db, product)
        run_reports(db)
    except DataAccessError as e:
        logger.error(f"Demo failed: {e}")
        status = 1
    finally:
        health = db.health()
        close_pool()

    if not health["healthy"]:
        logger.critical(f"Database unhealthy: {health['error']}")
        return 1
    return status


if __name__ == "__main__":
    sys.exit(main())
