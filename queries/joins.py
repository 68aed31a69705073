"""
queries/joins.py
----------------
Fixed join queries between users, orders, order items and products.
None of them takes caller input; each returns rows as dicts.
"""

from db.connection import Database

ORDERS_WITH_USERS_SQL = """
    SELECT
        o.id AS order_id,
        o.order_date,
        o.total_amount,
        u.id AS user_id,
        u.fullname
    FROM orders o
    INNER JOIN users u ON o.user_id = u.id
    ORDER BY o.id;
"""

USERS_WITH_ORDERS_SQL = """
    SELECT
        u.id AS user_id,
        u.fullname,
        o.id AS order_id,
        o.order_date,
        o.total_amount
    FROM users u
    LEFT JOIN orders o ON u.id = o.user_id
    ORDER BY u.id, o.id;
"""

ORDERS_WITH_USERS_RIGHT_SQL = """
    SELECT
        u.id AS user_id,
        u.fullname,
        o.id AS order_id,
        o.order_date,
        o.total_amount
    FROM users u
    RIGHT JOIN orders o ON u.id = o.user_id
    ORDER BY o.id;
"""

USERS_AND_ORDERS_FULL_SQL = """
    SELECT
        u.id AS user_id,
        u.fullname,
        o.id AS order_id,
        o.order_date,
        o.total_amount
    FROM users u
    FULL OUTER JOIN orders o ON u.id = o.user_id
    ORDER BY u.id NULLS LAST, o.id NULLS LAST;
"""

ORDERS_WITH_ITEMS_SQL = """
    SELECT
        o.id AS order_id,
        o.order_date,
        o.total_amount,
        p.id AS product_id,
        p.product_name,
        oi.quantity,
        oi.price
    FROM orders o
    INNER JOIN order_items oi ON o.id = oi.order_id
    INNER JOIN products p ON oi.product_id = p.id
    ORDER BY o.id, oi.id;
"""

USER_ORDER_PRODUCT_SQL = """
    SELECT
        u.id AS user_id,
        u.fullname,
        o.id AS order_id,
        o.order_date,
        o.total_amount,
        p.id AS product_id,
        p.product_name,
        oi.quantity,
        oi.price
    FROM users u
    INNER JOIN orders o ON u.id = o.user_id
    INNER JOIN order_items oi ON o.id = oi.order_id
    INNER JOIN products p ON oi.product_id = p.id
    ORDER BY u.id, o.id, oi.id;
"""


def get_orders_with_users(db: Database) -> list[dict]:
    """Every order with the user who placed it (INNER JOIN)."""
    return db.execute_query(ORDERS_WITH_USERS_SQL)


def get_users_with_orders(db: Database) -> list[dict]:
    """Every user with their orders; users without orders get NULL order columns (LEFT JOIN)."""
    return db.execute_query(USERS_WITH_ORDERS_SQL)


def get_orders_with_users_right_join(db: Database) -> list[dict]:
    """Every order, with NULL user columns where the user is missing (RIGHT JOIN)."""
    return db.execute_query(ORDERS_WITH_USERS_RIGHT_SQL)


def get_users_and_orders_full_join(db: Database) -> list[dict]:
    """All users and all orders, matched where possible (FULL OUTER JOIN)."""
    return db.execute_query(USERS_AND_ORDERS_FULL_SQL)


def get_orders_with_items(db: Database) -> list[dict]:
    """One row per order line with its product."""
    return db.execute_query(ORDERS_WITH_ITEMS_SQL)


def get_user_order_product_details(db: Database) -> list[dict]:
    """User, order and product for every order line."""
    return db.execute_query(USER_ORDER_PRODUCT_SQL)
