"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed status transitions
for Order entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth (status_service and the API both ask here)
"""

from orders.models import Order
from orders.services.exceptions import InvalidTransitionError, OrderValidationError

# ============================================================
# STATE DEFINITIONS
# ============================================================

INITIAL_STATE = Order.STATUS_PENDING

TERMINAL_STATES = frozenset({
    Order.STATUS_COMPLETED,
    Order.STATUS_CANCELLED,
})

ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: {
        Order.STATUS_CONFIRMED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_CONFIRMED: {
        Order.STATUS_PROCESSING,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_PROCESSING: {
        Order.STATUS_READY_FOR_PICKUP,
        Order.STATUS_READY_FOR_DELIVERY,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_READY_FOR_PICKUP: {
        Order.STATUS_COMPLETED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_READY_FOR_DELIVERY: {
        Order.STATUS_OUT_FOR_DELIVERY,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_OUT_FOR_DELIVERY: {
        Order.STATUS_DELIVERED,
        Order.STATUS_FAILED_DELIVERY,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_DELIVERED: {
        Order.STATUS_COMPLETED,
        Order.STATUS_RETURNED,
    },
    Order.STATUS_REFUND: {
        Order.STATUS_COMPLETED,
    },
    Order.STATUS_FAILED_DELIVERY: {
        Order.STATUS_OUT_FOR_DELIVERY,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_RETURNED: {
        Order.STATUS_REFUND,
        Order.STATUS_COMPLETED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def is_known_status(status: str) -> bool:
    return status in Order.STATUS_VALUES


def allowed_targets(from_status: str) -> frozenset:
    if from_status in TERMINAL_STATES:
        return frozenset()
    return frozenset(ALLOWED_TRANSITIONS.get(from_status, ()))


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status == to_status:
        return False
    return to_status in allowed_targets(from_status)


def validate_transition(*, order: Order, target_status: str):
    if not is_known_status(target_status):
        raise OrderValidationError(
            f"Unknown order status '{target_status}'",
            code="INVALID_STATUS",
        )

    if not can_transition(from_status=order.status, to_status=target_status):
        raise InvalidTransitionError(
            f"Order {order.order_number} cannot transition from "
            f"'{order.status}' to '{target_status}'",
            details={"from": order.status, "to": target_status},
        )
