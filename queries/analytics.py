"""
queries/analytics.py
--------------------
Sales reports: a detailed order view and category/brand aggregations
(GROUP BY, ROLLUP, CUBE).

In ROLLUP and CUBE results a NULL category or brand marks a subtotal row;
the grand total has both NULL.
"""

from db.connection import Database

ORDER_DETAILS_SQL = """
    SELECT
        o.id AS order_id,
        u.fullname,
        p.product_name,
        c.name AS category,
        b.name AS brand,
        oi.quantity,
        oi.price,
        (oi.quantity * oi.price) AS total_item_cost,
        o.total_amount AS order_total
    FROM orders o
    JOIN users u ON o.user_id = u.id
    JOIN order_items oi ON o.id = oi.order_id
    JOIN products p ON oi.product_id = p.id
    LEFT JOIN categories c ON p.category_id = c.id
    LEFT JOIN brands b ON p.brand_id = b.id
    ORDER BY o.id, oi.id;
"""

SALES_BY_CATEGORY_SQL = """
    SELECT
        c.name AS category,
        SUM(oi.quantity * oi.price) AS total_sales
    FROM order_items oi
    JOIN products p ON oi.product_id = p.id
    JOIN categories c ON p.category_id = c.id
    GROUP BY c.name
    ORDER BY total_sales DESC;
"""

SALES_ROLLUP_SQL = """
    SELECT
        c.name AS category,
        b.name AS brand,
        SUM(oi.quantity * oi.price) AS total_sales
    FROM order_items oi
    JOIN products p ON oi.product_id = p.id
    LEFT JOIN categories c ON p.category_id = c.id
    LEFT JOIN brands b ON p.brand_id = b.id
    GROUP BY ROLLUP (c.name, b.name)
    ORDER BY c.name, b.name;
"""

SALES_CUBE_SQL = """
    SELECT
        c.name AS category,
        b.name AS brand,
        SUM(oi.quantity * oi.price) AS total_sales
    FROM order_items oi
    JOIN products p ON oi.product_id = p.id
    LEFT JOIN categories c ON p.category_id = c.id
    LEFT JOIN brands b ON p.brand_id = b.id
    GROUP BY CUBE (c.name, b.name)
    ORDER BY category, brand;
"""


def get_order_details(db: Database) -> list[dict]:
    """
    Every order line with user, product, category and brand.

    Returns:
        Rows with keys: order_id, fullname, product_name, category, brand,
        quantity, price, total_item_cost, order_total.
    """
    return db.execute_query(ORDER_DETAILS_SQL)


def get_sales_by_category(db: Database) -> list[dict]:
    """Total sales per category, best selling first."""
    return db.execute_query(SALES_BY_CATEGORY_SQL)


def get_sales_rollup(db: Database) -> list[dict]:
    """Sales per (category, brand) with per-category subtotals and a grand total."""
    return db.execute_query(SALES_ROLLUP_SQL)


def get_sales_cube(db: Database) -> list[dict]:
    """Sales for every combination of category and brand, including all subtotals."""
    return db.execute_query(SALES_CUBE_SQL)
