# products/services/inventory.py

"""
======================================================
PATH: products/services/inventory.py
======================================================
INVENTORY LEDGER SERVICES

Purpose:
- Reserve stock for an order line (decrement one size counter).
- Release stock back when an order is cancelled.
- Read a counter for pre-commit validation.

Rules:
- Counters live on ProductVariant.quantity (one per product + size).
- Quantities are integer units > 0.
- Writers are single-statement conditional UPDATEs built on F() expressions.
  There is no read-modify-write window, so two concurrent orders can never
  drive a counter below zero: the loser matches zero rows and is rejected.
- Callers own the transaction. Inside an outer atomic block a rejection
  raised here rolls back everything the caller already wrote.
"""

from __future__ import annotations

import logging

from django.db.models import F

from products.models import ProductVariant

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """Base inventory ledger error."""


class StockReservationError(InventoryError):
    """
    Raised when a counter is missing or cannot cover the requested quantity.
    """

    def __init__(self, *, product_id, size: str, requested: int):
        self.product_id = product_id
        self.size = size
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_id} ({size}): requested {requested}"
        )


class StockReleaseError(InventoryError):
    pass


def _require_positive_int(value, *, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be an integer")
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be an integer")
    if v <= 0:
        raise ValueError(f"{field_name} must be greater than zero")
    return v


def available_quantity(*, product_id, size: str) -> int | None:
    """
    Current counter for (product, size), or None when the variant does not exist.
    """
    return (
        ProductVariant.objects.filter(product_id=product_id, size=size)
        .values_list("quantity", flat=True)
        .first()
    )


def reserve_stock(*, product_id, size: str, quantity: int) -> int:
    """
    Atomically decrement one size counter.

    UPDATE ... SET quantity = quantity - n WHERE product = p AND size = s AND quantity >= n

    Returns the remaining quantity after the decrement.
    """
    qty = _require_positive_int(quantity, field_name="quantity")

    updated = ProductVariant.objects.filter(
        product_id=product_id,
        size=size,
        quantity__gte=qty,
    ).update(quantity=F("quantity") - qty)

    if updated != 1:
        logger.info(
            "Stock reservation rejected",
            extra={"product_id": product_id, "size": size, "requested": qty},
        )
        raise StockReservationError(product_id=product_id, size=size, requested=qty)

    return available_quantity(product_id=product_id, size=size)


def release_stock(*, product_id, size: str, quantity: int) -> int:
    """
    Atomically increment one size counter (cancellation compensation).

    Returns the quantity after the increment.
    """
    qty = _require_positive_int(quantity, field_name="quantity")

    updated = ProductVariant.objects.filter(
        product_id=product_id,
        size=size,
    ).update(quantity=F("quantity") + qty)

    if updated != 1:
        raise StockReleaseError(
            f"Cannot release stock: no {size} variant for product {product_id}"
        )

    return available_quantity(product_id=product_id, size=size)
