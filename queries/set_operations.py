"""
queries/set_operations.py
-------------------------
Set operators, correlated subqueries and common table expressions.
"""

from db.connection import Database

USERS_AND_PRODUCTS_SQL = """
    SELECT fullname AS name, email AS identifier, 'user' AS kind FROM users
    UNION ALL
    SELECT product_name AS name, sku AS identifier, 'product' AS kind FROM products;
"""

# Correlated: the inner query is re-evaluated for every user row.
USERS_WITH_MOST_PRODUCTS_SQL = """
    SELECT u.* FROM users u
    WHERE (
        SELECT COUNT(DISTINCT oi.product_id)
        FROM orders o
        JOIN order_items oi ON oi.order_id = o.id
        WHERE o.user_id = u.id
    ) > %s
    ORDER BY u.id;
"""

EXPENSIVE_PRODUCTS_SQL = """
    WITH avg_price AS (
        SELECT AVG(price) AS average_price FROM products
    )
    SELECT * FROM products
    WHERE price > (SELECT average_price FROM avg_price)
    ORDER BY price DESC, id;
"""


def get_users_and_products(db: Database) -> list[dict]:
    """Users and products as one name/identifier list (UNION ALL)."""
    return db.execute_query(USERS_AND_PRODUCTS_SQL)


def get_users_with_most_products(db: Database, min_products: int = 5) -> list[dict]:
    """Users who have ordered more than ``min_products`` distinct products."""
    return db.execute_query(USERS_WITH_MOST_PRODUCTS_SQL, (min_products,))


def get_expensive_products(db: Database) -> list[dict]:
    """Products priced above the catalogue average (CTE)."""
    return db.execute_query(EXPENSIVE_PRODUCTS_SQL)
