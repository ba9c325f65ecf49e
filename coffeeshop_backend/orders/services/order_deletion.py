# orders/services/order_deletion.py

"""
ADMINISTRATIVE ORDER DELETION

Purpose:
- Hard-delete an order with its items and history.
- Give the customer's loyalty balance back what this order did to it.

Rules:
- Deletable when the order has no items, or is Cancelled / Completed.
- Loyalty reversal runs only when the order has items, a customer, and is
  not Cancelled (cancellation already took the redeemed points back):
      balance = max(0, balance + used - earned)
      used    = max(0, used - used_by_order)
- Inventory is NOT restored here. Completed orders were consumed, and
  Cancelled orders released their stock on cancellation.
- Storage errors roll everything back and surface as PersistenceFailureError.
"""

from __future__ import annotations

import logging

from django.db import DatabaseError, transaction

from customers.services.loyalty import reverse_points
from orders.models import Order, OrderHistoryEntry, OrderItem
from orders.services.exceptions import (
    OrderNotDeletableError,
    OrderNotFoundError,
    PersistenceFailureError,
)

logger = logging.getLogger(__name__)

DELETABLE_STATES = frozenset({Order.STATUS_CANCELLED, Order.STATUS_COMPLETED})


@transaction.atomic
def _delete_order(*, order_id) -> Order:
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise OrderNotFoundError(f"Order {order_id} not found", details={"order_id": order_id})

    has_items = order.items.exists()

    if has_items and order.status not in DELETABLE_STATES:
        raise OrderNotDeletableError(
            f"Only cancelled or completed orders can be deleted (current: {order.status})",
            details={"status": order.status},
        )

    if has_items and order.status != Order.STATUS_CANCELLED and order.customer_id:
        used = int(order.loyalty_points_used or 0)
        # Snapshot of floor(total / LOYALTY_POINTS_PER_UNIT) taken at order entry.
        earned = int(order.loyalty_points_earned or 0)
        reverse_points(
            user_id=order.customer_id,
            balance_delta=used - earned,
            used_delta=used,
        )

    OrderItem.objects.filter(order_id=order.pk).delete()
    OrderHistoryEntry.objects.filter(order_id=order.pk).delete()
    order.delete()
    return order


def delete_order(*, order_id, actor_id=None) -> None:
    try:
        order = _delete_order(order_id=order_id)
    except DatabaseError as exc:
        logger.exception("Order deletion failed", extra={"order_id": order_id})
        raise PersistenceFailureError() from exc

    logger.info(
        "Order deleted (inventory not restored)",
        extra={
            "order_id": order_id,
            "order_number": order.order_number,
            "status": order.status,
            "actor_id": str(actor_id) if actor_id else None,
        },
    )
