"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import Database
from db.schema import DDL, INDEXES_SQL
from utils.logger import get_logger

logger = get_logger(__name__)

# Older databases were created with users.phone as INT, too small for real
# phone numbers.
_PHONE_TYPE_SQL = """
    SELECT data_type FROM information_schema.columns
    WHERE table_schema = current_schema() AND table_name = 'users' AND column_name = 'phone';
"""
_WIDEN_PHONE_SQL = "ALTER TABLE users ALTER COLUMN phone TYPE BIGINT;"


def create_tables(db: Database) -> None:
    """
    Execute the schema SQL to create all tables, then apply migrations.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    with db.transaction() as cur:
        for name, ddl in DDL:
            cur.execute(ddl)
            logger.info(f"Table '{name}' initialized or already exists.")
        cur.execute(INDEXES_SQL)
    widen_phone_column(db)
    logger.info("Database schema initialized successfully.")


def widen_phone_column(db: Database) -> bool:
    """
    Widen ``users.phone`` to BIGINT when it is still INT.

    Returns:
        True if the column was altered, False if it was already wide enough.
    """
    rows = db.execute_query(_PHONE_TYPE_SQL)
    if not rows or rows[0]["data_type"] != "integer":
        return False
    db.execute(_WIDEN_PHONE_SQL)
    logger.info("Altered users table: phone column to BIGINT")
    return True


if __name__ == "__main__":
    from db.connection import init_pool, close_pool
    create_tables(init_pool())
    close_pool()
    print("Database schema created successfully.")
