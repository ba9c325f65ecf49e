# orders/services/order_queries.py

"""
ORDER RETRIEVAL (READ-ONLY)

Purpose:
- Single order, paginated order list with free-text search, per-order
  history (newest first), order items, a customer's current order and
  the cross-order history feed queryset.

Rules:
- No writes.
- page >= 1, 1 <= limit <= MAX_LIMIT, offset = (page - 1) * limit.
- search is trimmed and capped at MAX_SEARCH_LENGTH characters.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from django.db.models import Prefetch, Q

from orders.models import Order, OrderHistoryEntry, OrderItem
from orders.services.exceptions import OrderNotFoundError, OrderValidationError

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MAX_SEARCH_LENGTH = 100

OPEN_EXCLUDED_STATES = (Order.STATUS_COMPLETED, Order.STATUS_CANCELLED)


@dataclass(frozen=True)
class OrderPage:
    orders: list
    total_count: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit) if self.total_count else 0


def _order_queryset():
    return Order.objects.select_related("customer").prefetch_related(
        Prefetch("items", queryset=OrderItem.objects.select_related("product"))
    )


def _positive_int(value, *, field_name: str, default: int) -> int:
    if value in (None, ""):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise OrderValidationError(
            f"{field_name} must be an integer",
            code="INVALID_PAGINATION",
            details={"field": field_name},
        )
    if number < 1:
        raise OrderValidationError(
            f"{field_name} must be at least 1",
            code="INVALID_PAGINATION",
            details={"field": field_name},
        )
    return number


def get_order(*, order_id) -> Order:
    order = _order_queryset().filter(pk=order_id).first()
    if order is None:
        raise OrderNotFoundError(f"Order {order_id} not found", details={"order_id": order_id})
    return order


def search_filter(term: str) -> Q:
    return (
        Q(order_number__icontains=term)
        | Q(delivery_first_name__icontains=term)
        | Q(delivery_last_name__icontains=term)
        | Q(delivery_phone__icontains=term)
        | Q(delivery_email__icontains=term)
        | Q(delivery_address__icontains=term)
        | Q(delivery_city__icontains=term)
        | Q(delivery_zipcode__icontains=term)
        | Q(status__icontains=term)
        | Q(payment_method__icontains=term)
        | Q(payment_reference__icontains=term)
        | Q(promo_code__icontains=term)
        | Q(items__product__name__icontains=term)
        | Q(history__notes__icontains=term)
        | Q(customer__email__icontains=term)
        | Q(customer__username__icontains=term)
    )


def list_orders(*, page=1, limit=DEFAULT_LIMIT, search: str = "") -> OrderPage:
    page = _positive_int(page, field_name="page", default=1)
    limit = min(_positive_int(limit, field_name="limit", default=DEFAULT_LIMIT), MAX_LIMIT)
    term = (search or "").strip()[:MAX_SEARCH_LENGTH]

    qs = Order.objects.all()
    if term:
        # Joins through items/history multiply rows; collapse to ids first.
        qs = Order.objects.filter(pk__in=Order.objects.filter(search_filter(term)).values("pk"))

    total_count = qs.count()
    offset = (page - 1) * limit

    orders = list(
        _order_queryset()
        .filter(pk__in=qs.values("pk"))
        .order_by("-created_at", "-id")[offset : offset + limit]
    )

    return OrderPage(orders=orders, total_count=total_count, page=page, limit=limit)


def get_order_history(*, order_id) -> list:
    if not Order.objects.filter(pk=order_id).exists():
        raise OrderNotFoundError(f"Order {order_id} not found", details={"order_id": order_id})
    return list(
        OrderHistoryEntry.objects.filter(order_id=order_id)
        .select_related("actor")
        .order_by("-created_at", "-id")
    )


def list_order_items(*, order_id) -> list:
    if not Order.objects.filter(pk=order_id).exists():
        raise OrderNotFoundError(f"Order {order_id} not found", details={"order_id": order_id})
    return list(
        OrderItem.objects.filter(order_id=order_id)
        .select_related("product")
        .order_by("id")
    )


def get_current_order(*, customer_id) -> Order | None:
    """
    The customer's most recent order that is still in flight.
    """
    return (
        _order_queryset()
        .filter(customer_id=customer_id)
        .exclude(status__in=OPEN_EXCLUDED_STATES)
        .order_by("-created_at", "-id")
        .first()
    )


def history_feed_queryset():
    """
    All history entries across orders, newest first (staff activity feed).
    """
    return (
        OrderHistoryEntry.objects.select_related("order", "actor")
        .order_by("-created_at", "-id")
    )
