"""
models/order.py
---------------
Domain models for orders, their line items, shopping carts and payments.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models.base import Record


@dataclass
class Order(Record):
    """
    A placed order.

    Attributes:
        user_id: Customer who placed the order.
        status: 'pending', 'paid', 'shipped', ...
        total_amount: Order total as stored (not recomputed from items).
    """
    TABLE = "orders"

    user_id: int
    status: str = "pending"
    total_amount: float = 0.0
    order_date: Optional[datetime] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class OrderItem(Record):
    """One product line of an order, with the unit price charged."""
    TABLE = "order_items"

    product_id: int
    quantity: int
    price: float
    order_id: Optional[int] = None
    id: Optional[int] = None

    @property
    def line_total(self) -> float:
        return self.quantity * float(self.price)


@dataclass
class CartItem(Record):
    TABLE = "cart_items"

    user_id: int
    product_id: int
    quantity: int = 1
    id: Optional[int] = None
    added_at: Optional[datetime] = None


@dataclass
class Payment(Record):
    TABLE = "payments"

    order_id: int
    amount: float
    method: str
    status: str = "pending"
    paid_at: Optional[datetime] = None
    id: Optional[int] = None
