# orders/services/status_service.py

"""
======================================================
PATH: orders/services/status_service.py
======================================================
ORDER STATUS SERVICE

Purpose:
- Apply one state-machine edge to one order, with its side effects,
  in one transaction.

Steps (all inside transaction.atomic):
1. Lock the order row (select_for_update).
2. Validate the edge against order_lifecycle.
3. Cancellation only: release every line back to inventory and take back
   the redeemed points (balance and lifetime-used, each floored at 0).
4. Compare-and-swap the status (UPDATE ... WHERE status = <read status>).
5. Append the history entry.

Concurrency:
- Two operators (or an operator and the sweeper) racing on one order:
  the row lock serializes them and the loser sees a status that no longer
  admits its edge -> InvalidTransitionError. The CAS in step 4 is the
  backstop on databases that ignore FOR UPDATE (sqlite).

Failures:
- Storage errors (and a stock counter that vanished) roll the whole step
  back and surface as PersistenceFailureError with a generic message.
"""

from __future__ import annotations

import logging

from django.db import DatabaseError, transaction

from customers.services.loyalty import reverse_points
from orders.models import Order, OrderHistoryEntry
from orders.services.exceptions import (
    InvalidTransitionError,
    OrderNotFoundError,
    PersistenceFailureError,
)
from orders.services.order_lifecycle import validate_transition
from products.services.inventory import StockReleaseError, release_stock

logger = logging.getLogger(__name__)


def _release_inventory(order: Order) -> None:
    for item in order.items.all():
        release_stock(product_id=item.product_id, size=item.size, quantity=item.quantity)


def _take_back_redeemed_points(order: Order) -> None:
    used = int(order.loyalty_points_used or 0)
    if used <= 0 or order.customer_id is None:
        return
    reverse_points(user_id=order.customer_id, balance_delta=-used, used_delta=used)


@transaction.atomic
def _apply_transition(*, order_id, target_status: str, note: str, actor_id) -> Order:
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise OrderNotFoundError(f"Order {order_id} not found", details={"order_id": order_id})

    validate_transition(order=order, target_status=target_status)

    previous_status = order.status

    if target_status == Order.STATUS_CANCELLED:
        _release_inventory(order)
        _take_back_redeemed_points(order)

    updated = Order.objects.filter(pk=order.pk, status=previous_status).update(
        status=target_status
    )
    if updated != 1:
        raise InvalidTransitionError(
            f"Order {order.order_number} changed status concurrently",
            details={"from": previous_status, "to": target_status},
        )

    OrderHistoryEntry.objects.create(
        order=order,
        status=target_status,
        notes=(note or "").strip(),
        actor_id=actor_id,
    )

    logger.info(
        "Order status changed",
        extra={
            "order_id": order.pk,
            "order_number": order.order_number,
            "from_status": previous_status,
            "to_status": target_status,
            "actor_id": str(actor_id) if actor_id else None,
        },
    )

    order.refresh_from_db()
    return order


def apply_transition(*, order_id, target_status: str, note: str = "", actor_id=None) -> Order:
    """
    Move an order to `target_status`.

    Raises:
    - OrderValidationError    unknown status string
    - OrderNotFoundError      no such order
    - InvalidTransitionError  edge not allowed (or lost a race)
    - PersistenceFailureError the store rejected a write (rolled back, logged)
    """
    try:
        return _apply_transition(
            order_id=order_id,
            target_status=target_status,
            note=note,
            actor_id=actor_id,
        )
    except (DatabaseError, StockReleaseError) as exc:
        logger.exception(
            "Order status change failed",
            extra={"order_id": order_id, "to_status": target_status},
        )
        raise PersistenceFailureError() from exc
