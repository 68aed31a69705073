"""
db/schema.py
------------
Canonical table definitions.

Each table has its DDL text and a declarative description of its columns.
The descriptions double as the identifier allow-list: every table or column
name that ends up inside SQL text is checked against ``TABLES`` first, since
identifiers cannot be passed as bound parameters.
"""

from dataclasses import dataclass

from db.errors import InvalidIdentifier


@dataclass(frozen=True)
class Table:
    """
    Declarative description of a table.

    Attributes:
        name: Table name.
        columns: Every column, in DDL order (``id`` first).
        writable: Columns a caller may supply on insert/update.
        touch_on_update: Whether updates refresh ``updated_at``.
    """
    name: str
    columns: tuple
    writable: tuple
    touch_on_update: bool = False

    def check_column(self, column: str) -> str:
        """Return ``column`` if it exists on this table, else raise InvalidIdentifier."""
        if column not in self.columns:
            raise InvalidIdentifier(f"Unknown column '{column}' for table '{self.name}'")
        return column

    def check_writable(self, column: str) -> str:
        """Return ``column`` if callers may write it, else raise InvalidIdentifier."""
        if column not in self.writable:
            raise InvalidIdentifier(f"Column '{column}' of '{self.name}' is not writable")
        return column


CATEGORIES_SQL = """
-- Categories: product grouping used by the sales reports
CREATE TABLE IF NOT EXISTS categories (
    id              SERIAL PRIMARY KEY,
    name            VARCHAR(100) UNIQUE NOT NULL,
    description     TEXT,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);
"""

BRANDS_SQL = """
CREATE TABLE IF NOT EXISTS brands (
    id              SERIAL PRIMARY KEY,
    name            VARCHAR(100) UNIQUE NOT NULL,
    country         VARCHAR(100),
    created_at      TIMESTAMPTZ DEFAULT NOW()
);
"""

USERS_SQL = """
-- Users: customers, identified by a unique email
CREATE TABLE IF NOT EXISTS users (
    id              SERIAL PRIMARY KEY,
    fullname        VARCHAR(100) NOT NULL,
    email           VARCHAR(100) UNIQUE NOT NULL,
    phone           BIGINT NOT NULL,
    address         TEXT NOT NULL,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    updated_at      TIMESTAMPTZ DEFAULT NOW()
);
"""

PRODUCTS_SQL = """
-- Products: catalogue entries, identified by a unique SKU
CREATE TABLE IF NOT EXISTS products (
    id              SERIAL PRIMARY KEY,
    product_name    VARCHAR(100) NOT NULL,
    description     TEXT,
    price           NUMERIC(10,2) NOT NULL,
    stock_quantity  INT NOT NULL,
    category_id     INT REFERENCES categories(id) ON DELETE SET NULL,
    brand_id        INT REFERENCES brands(id) ON DELETE SET NULL,
    sku             VARCHAR(50) UNIQUE,
    image_url       VARCHAR(255),
    is_active       BOOLEAN DEFAULT TRUE,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    updated_at      TIMESTAMPTZ DEFAULT NOW()
);
"""

ORDERS_SQL = """
CREATE TABLE IF NOT EXISTS orders (
    id              SERIAL PRIMARY KEY,
    user_id         INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    order_date      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    status          VARCHAR(20) NOT NULL DEFAULT 'pending',
    total_amount    NUMERIC(12,2) NOT NULL DEFAULT 0,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    updated_at      TIMESTAMPTZ DEFAULT NOW()
);
"""

ORDER_ITEMS_SQL = """
CREATE TABLE IF NOT EXISTS order_items (
    id              SERIAL PRIMARY KEY,
    order_id        INT NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
    product_id      INT NOT NULL REFERENCES products(id),
    quantity        INT NOT NULL CHECK (quantity > 0),
    price           NUMERIC(10,2) NOT NULL
);
"""

CART_ITEMS_SQL = """
CREATE TABLE IF NOT EXISTS cart_items (
    id              SERIAL PRIMARY KEY,
    user_id         INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    product_id      INT NOT NULL REFERENCES products(id) ON DELETE CASCADE,
    quantity        INT NOT NULL DEFAULT 1 CHECK (quantity > 0),
    added_at        TIMESTAMPTZ DEFAULT NOW(),
    UNIQUE(user_id, product_id)
);
"""

PAYMENTS_SQL = """
CREATE TABLE IF NOT EXISTS payments (
    id              SERIAL PRIMARY KEY,
    order_id        INT NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
    amount          NUMERIC(12,2) NOT NULL,
    method          VARCHAR(30) NOT NULL,
    status          VARCHAR(20) NOT NULL DEFAULT 'pending',
    paid_at         TIMESTAMPTZ
);
"""

INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_products_category ON products(category_id);
CREATE INDEX IF NOT EXISTS idx_products_brand ON products(brand_id);
CREATE INDEX IF NOT EXISTS idx_orders_user ON orders(user_id);
CREATE INDEX IF NOT EXISTS idx_order_items_order ON order_items(order_id);
CREATE INDEX IF NOT EXISTS idx_payments_order ON payments(order_id);
"""

# Creation order respects foreign keys.
DDL: list[tuple[str, str]] = [
    ("categories", CATEGORIES_SQL),
    ("brands", BRANDS_SQL),
    ("users", USERS_SQL),
    ("products", PRODUCTS_SQL),
    ("orders", ORDERS_SQL),
    ("order_items", ORDER_ITEMS_SQL),
    ("cart_items", CART_ITEMS_SQL),
    ("payments", PAYMENTS_SQL),
]


TABLES: dict[str, Table] = {
    t.name: t for t in (
        Table(
            name="categories",
            columns=("id", "name", "description", "created_at"),
            writable=("name", "description"),
        ),
        Table(
            name="brands",
            columns=("id", "name", "country", "created_at"),
            writable=("name", "country"),
        ),
        Table(
            name="users",
            columns=("id", "fullname", "email", "phone", "address", "created_at", "updated_at"),
            writable=("fullname", "email", "phone", "address"),
            touch_on_update=True,
        ),
        Table(
            name="products",
            columns=(
                "id", "product_name", "description", "price", "stock_quantity",
                "category_id", "brand_id", "sku", "image_url", "is_active",
                "created_at", "updated_at",
            ),
            writable=(
                "product_name", "description", "price", "stock_quantity",
                "category_id", "brand_id", "sku", "image_url", "is_active",
            ),
            touch_on_update=True,
        ),
        Table(
            name="orders",
            columns=("id", "user_id", "order_date", "status", "total_amount", "created_at", "updated_at"),
            writable=("user_id", "order_date", "status", "total_amount"),
            touch_on_update=True,
        ),
        Table(
            name="order_items",
            columns=("id", "order_id", "product_id", "quantity", "price"),
            writable=("order_id", "product_id", "quantity", "price"),
        ),
        Table(
            name="cart_items",
            columns=("id", "user_id", "product_id", "quantity", "added_at"),
            writable=("user_id", "product_id", "quantity"),
        ),
        Table(
            name="payments",
            columns=("id", "order_id", "amount", "method", "status", "paid_at"),
            writable=("order_id", "amount", "method", "status", "paid_at"),
        ),
    )
}


def get_table(name: str) -> Table:
    """
    Look up a table description by name.

    Raises:
        InvalidIdentifier: If the table is not part of the schema.
    """
    try:
        return TABLES[name]
    except KeyError:
        raise InvalidIdentifier(f"Unknown table '{name}'") from None
