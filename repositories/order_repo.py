"""
repositories/order_repo.py
---------------------------
Data access layer for orders, their line items and payments.
Placing an order and paying for it are multi-statement, so both run in a
single transaction.
"""

from db.connection import build_insert
from db.schema import get_table
from models.order import Order, OrderItem, Payment
from repositories.base_repo import BaseRepository
from utils.logger import get_logger

logger = get_logger(__name__)

_ORDER_ITEMS = get_table("order_items")


class OrderRepository(BaseRepository):
    """Repository for the orders table and its children."""

    model = Order

    def place_order(self, order: Order, items: list[OrderItem]) -> Order:
        """
        Insert an order with its items and store the computed total.

        Args:
            order: The order header (``total_amount`` is overwritten).
            items: Line items; their ``order_id`` is filled in.

        Returns:
            The order with `id` and `total_amount` populated.
        """
        order.total_amount = round(sum(i.line_total for i in items), 2)
        with self.db.transaction() as cur:
            sql, params = build_insert(self.table, order.to_record())
            cur.execute(sql, params)
            order.id = cur.fetchone()["id"]
            for item in items:
                item.order_id = order.id
                sql, params = build_insert(_ORDER_ITEMS, item.to_record())
                cur.execute(sql, params)
                item.id = cur.fetchone()["id"]
        logger.info(f"Placed order #{order.id} for user {order.user_id} ({len(items)} item(s), {order.total_amount:.2f})")
        return order

    def get_items(self, order_id: int) -> list[OrderItem]:
        sql = "SELECT * FROM order_items WHERE order_id = %s ORDER BY id;"
        return [OrderItem.from_row(r) for r in self.db.execute_query(sql, (order_id,))]

    def record_payment(self, payment: Payment) -> Payment:
        """
        Store a completed payment and mark its order as paid, atomically.
        """
        with self.db.transaction() as cur:
            cur.execute(
                """
                INSERT INTO payments (order_id, amount, method, status, paid_at)
                VALUES (%s, %s, %s, %s, NOW())
                RETURNING id, paid_at;
                """,
                (payment.order_id, payment.amount, payment.method, "completed"),
            )
            row = cur.fetchone()
            cur.execute(
                "UPDATE orders SET status = 'paid', updated_at = NOW() WHERE id = %s;",
                (payment.order_id,),
            )
        payment.id = row["id"]
        payment.paid_at = row["paid_at"]
        payment.status = "completed"
        logger.info(f"Recorded payment #{payment.id} for order #{payment.order_id}")
        return payment
