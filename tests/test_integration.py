"""
End-to-end tests against a real PostgreSQL server.

Skipped unless TEST_DB_NAME points at a disposable database; the other
connection settings come from the usual DB_* variables. Every test starts
from empty tables.
"""

import os

import pytest

from db.connection import Database
from db.errors import ConstraintViolation
from db.init_db import create_tables
from filters import ProductFilter, Range, UserFilter
from models.product import Product
from models.user import User
from queries import analytics
from repositories.product_repo import ProductRepository
from repositories.user_repo import UserRepository

pytestmark = pytest.mark.skipif(
    not os.getenv("TEST_DB_NAME"), reason="TEST_DB_NAME not set; no PostgreSQL to test against"
)


@pytest.fixture(scope="module")
def pg():
    database = Database(dbname=os.environ["TEST_DB_NAME"], max_conn=4)
    create_tables(database)
    yield database
    database.close()


@pytest.fixture(autouse=True)
def clean(pg):
    pg.execute(
        "TRUNCATE payments, cart_items, order_items, orders, products, brands, categories, users "
        "RESTART IDENTITY CASCADE"
    )


def _user(n):
    return User(fullname=f"User {n:02d}", email=f"user{n}@example.com", phone=5550000 + n, address=f"{n} Main St")


def test_create_then_read_back(pg):
    new_id = pg.create("users", {"fullname": "John Doe", "email": "john@example.com",
                                 "phone": 3987654321, "address": "123 Main St"})

    row = pg.read_by_id("users", new_id)

    assert row["fullname"] == "John Doe"
    assert row["email"] == "john@example.com"
    assert row["phone"] == 3987654321
    assert row["created_at"] is not None


def test_update_changes_only_that_field(pg):
    repo = UserRepository(pg)
    user = repo.add(_user(1))
    before = pg.read_by_id("users", user.id)

    repo.update(user.id, address="221B Baker St")

    after = pg.read_by_id("users", user.id)
    assert after["address"] == "221B Baker St"
    for column in ("fullname", "email", "phone", "created_at"):
        assert after[column] == before[column]
    assert after["updated_at"] >= before["updated_at"]


def test_duplicate_email_keeps_first_row(pg):
    repo = UserRepository(pg)
    first = repo.add(_user(1))

    with pytest.raises(ConstraintViolation) as exc_info:
        repo.add(User(fullname="Someone Else", email=first.email, phone=1, address="x"))

    assert exc_info.value.field == "email"
    assert repo.get_by_id(first.id).fullname == "User 01"
    assert len(repo.get_all()) == 1


def test_duplicate_sku_rejected(pg):
    repo = ProductRepository(pg)
    repo.add(Product(product_name="A", price=1, stock_quantity=1, sku="SKU-1"))

    with pytest.raises(ConstraintViolation) as exc_info:
        repo.add(Product(product_name="B", price=2, stock_quantity=2, sku="SKU-1"))

    assert exc_info.value.field == "sku"


def test_bulk_insert_is_all_or_nothing(pg):
    repo = UserRepository(pg)
    batch = [_user(1), _user(2), _user(1)]

    with pytest.raises(ConstraintViolation):
        repo.add_many(batch)

    assert repo.get_all() == []


def test_missing_row_reads_as_none_and_delete_is_silent(pg):
    assert pg.read_by_id("users", 12345) is None
    pg.delete("users", 12345)


def test_empty_filter_returns_everything_by_id(pg):
    UserRepository(pg).add_many([_user(n) for n in (3, 1, 2)])

    result = UserFilter(pg).filter()

    assert result.total == 3
    assert [u.id for u in result.data] == [1, 2, 3]


def test_pagination_over_25_rows(pg):
    UserRepository(pg).add_many([_user(n) for n in range(1, 26)])
    user_filter = UserFilter(pg)

    first = user_filter.filter(page=1, page_size=10)
    last = user_filter.filter(page=3, page_size=10)

    assert (first.has_next_page, first.has_previous_page, first.total_pages) == (True, False, 3)
    assert last.has_next_page is False
    assert len(last.data) == 5


def test_price_range_is_inclusive(pg):
    repo = ProductRepository(pg)
    for i, price in enumerate([5, 10, 15, 20, 25]):
        repo.add(Product(product_name=f"P{i}", price=price, stock_quantity=1, sku=f"P{i}"))

    result = ProductFilter(pg).filter(price_range=Range(10, 20))

    assert sorted(p.price for p in result.data) == [10.0, 15.0, 20.0]


def test_quote_characters_are_data(pg):
    UserRepository(pg).add(User(fullname="O'Brien -- admin", email="ob@example.com", phone=1, address="x"))

    result = UserFilter(pg).filter(fullname_contains="O'Brien --")

    assert [u.email for u in result.data] == ["ob@example.com"]
    assert len(pg.read_all("users")) == 1


def test_rollup_on_empty_tables_has_grand_total_only(pg):
    rows = analytics.get_sales_rollup(pg)
    assert rows == [{"category": None, "brand": None, "total_sales": None}]
