# orders/services/expiry_sweeper.py

"""
PENDING ORDER AUTO-CONFIRMATION SWEEP

Purpose:
- Promote Pending orders older than ORDER_PENDING_EXPIRY_MINUTES to Confirmed.

Rules:
- Every order goes through status_service.apply_transition (own transaction,
  system actor = NULL, fixed note).
- One failing order never stops the batch; it is reported by order number
  only (the cause goes to the log).
- Re-running is harmless: promoted orders are no longer Pending, and an order
  another actor moved meanwhile is reported as skipped, not failed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from orders.models import Order
from orders.services.exceptions import InvalidTransitionError, OrderNotFoundError
from orders.services.status_service import apply_transition

logger = logging.getLogger(__name__)

AUTO_CONFIRM_NOTE = "Order automatically confirmed after {minutes} minutes of pending status"


@dataclass
class SweepResult:
    promoted_count: int = 0
    failures: list = field(default_factory=list)
    skipped: list = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "promoted_count": self.promoted_count,
            "failures": list(self.failures),
            "skipped": list(self.skipped),
        }


def expiry_minutes() -> int:
    return int(getattr(settings, "ORDER_PENDING_EXPIRY_MINUTES", 30))


def expired_pending_orders(*, now=None):
    now = now or timezone.now()
    cutoff = now - timedelta(minutes=expiry_minutes())
    return Order.objects.filter(
        status=Order.STATUS_PENDING,
        created_at__lte=cutoff,
    ).order_by("created_at", "id")


def sweep_expired_pending_orders(*, now=None) -> SweepResult:
    result = SweepResult()
    note = AUTO_CONFIRM_NOTE.format(minutes=expiry_minutes())

    candidates = list(expired_pending_orders(now=now).values_list("id", "order_number"))

    for order_id, order_number in candidates:
        try:
            apply_transition(
                order_id=order_id,
                target_status=Order.STATUS_CONFIRMED,
                note=note,
                actor_id=None,
            )
        except (InvalidTransitionError, OrderNotFoundError) as exc:
            logger.info(
                "Sweep skipped order",
                extra={"order_id": order_id, "order_number": order_number, "reason": exc.code},
            )
            result.skipped.append(order_number)
            continue
        except Exception:
            logger.exception(
                "Sweep failed to confirm order",
                extra={"order_id": order_id, "order_number": order_number},
            )
            result.failures.append(f"Failed to update order {order_number}")
            continue

        result.promoted_count += 1

    if candidates:
        logger.info(
            "Pending sweep finished",
            extra={
                "promoted_count": result.promoted_count,
                "failed_count": len(result.failures),
                "skipped_count": len(result.skipped),
            },
        )

    return result
