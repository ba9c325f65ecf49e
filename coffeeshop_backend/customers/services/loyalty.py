# customers/services/loyalty.py

"""
======================================================
PATH: customers/services/loyalty.py
======================================================
LOYALTY LEDGER SERVICES

Purpose:
- Earn: 1 point per LOYALTY_POINTS_PER_UNIT of order total (floor).
- Redeem: spend exactly LOYALTY_REDEMPTION_POINTS for one free coffee.
- Reverse: compensating adjustments on cancellation / deletion.

Rules:
- One CustomerProfile per customer user (created lazily on first credit).
- Every write is a single UPDATE built on F() expressions; redemption is
  conditional on the balance at decrement time (points_balance >= cost).
- Reversals are floored at zero with Greatest(), never negative.
- Callers own the transaction.
"""

from __future__ import annotations

import logging
from decimal import ROUND_FLOOR, Decimal

from django.conf import settings
from django.db.models import F
from django.db.models.functions import Greatest

from customers.models import CustomerProfile

logger = logging.getLogger(__name__)


class LoyaltyError(Exception):
    """Base loyalty ledger error."""


class InsufficientPointsError(LoyaltyError):
    def __init__(self, *, user_id, required: int):
        self.user_id = user_id
        self.required = required
        super().__init__(f"Customer needs at least {required} loyalty points to redeem")


def redemption_cost() -> int:
    return int(getattr(settings, "LOYALTY_REDEMPTION_POINTS", 100))


def points_for_total(total) -> int:
    """
    floor(total / LOYALTY_POINTS_PER_UNIT). 245.50 -> 24, 9.99 -> 0.
    """
    per_unit = Decimal(int(getattr(settings, "LOYALTY_POINTS_PER_UNIT", 10)))
    amount = Decimal(str(total or "0"))
    if amount <= 0:
        return 0
    return int((amount / per_unit).to_integral_value(rounding=ROUND_FLOOR))


def get_or_create_profile(*, user_id) -> CustomerProfile:
    profile, _ = CustomerProfile.objects.get_or_create(user_id=user_id)
    return profile


def get_balance(*, user_id) -> int:
    balance = (
        CustomerProfile.objects.filter(user_id=user_id)
        .values_list("points_balance", flat=True)
        .first()
    )
    return int(balance or 0)


def credit_points(*, user_id, points: int) -> int:
    """
    balance += points. Returns the new balance.
    """
    points = int(points)
    if points < 0:
        raise ValueError("points must be >= 0")

    get_or_create_profile(user_id=user_id)

    if points:
        CustomerProfile.objects.filter(user_id=user_id).update(
            points_balance=F("points_balance") + points
        )

    return get_balance(user_id=user_id)


def redeem_points(*, user_id, earned: int) -> int:
    """
    Redeem one free coffee while crediting this order's earned points.

    UPDATE ... SET balance = balance + earned - cost, used = used + cost
    WHERE user = u AND balance >= cost

    Returns the new balance.
    """
    earned = int(earned)
    cost = redemption_cost()

    updated = CustomerProfile.objects.filter(
        user_id=user_id,
        points_balance__gte=cost,
    ).update(
        points_balance=F("points_balance") + earned - cost,
        points_used_lifetime=F("points_used_lifetime") + cost,
    )

    if updated != 1:
        raise InsufficientPointsError(user_id=user_id, required=cost)

    return get_balance(user_id=user_id)


def reverse_points(*, user_id, balance_delta: int, used_delta: int) -> bool:
    """
    Compensating adjustment:
        balance = max(0, balance + balance_delta)
        used    = max(0, used - used_delta)

    Returns False when the customer has no profile (nothing to reverse).
    """
    updated = CustomerProfile.objects.filter(user_id=user_id).update(
        points_balance=Greatest(F("points_balance") + int(balance_delta), 0),
        points_used_lifetime=Greatest(F("points_used_lifetime") - int(used_delta), 0),
    )

    if not updated:
        logger.warning(
            "Loyalty reversal skipped: no profile",
            extra={"user_id": str(user_id), "balance_delta": balance_delta, "used_delta": used_delta},
        )
        return False

    return True
