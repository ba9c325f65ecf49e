# orders/services/exceptions.py

"""
ORDER SERVICE ERRORS

Centralized domain errors for the order engine.

Each error carries the API contract it maps to:
- code:        stable machine-readable string
- http_status: status the HTTP layer answers with
- details:     structured context (never internal/DB detail)
"""

from __future__ import annotations


class OrderServiceError(Exception):
    """Base exception for all order engine failures."""

    code = "ORDER_ERROR"
    http_status = 400

    def __init__(self, message: str = "", *, code: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details or {}


class OrderValidationError(OrderServiceError):
    """Malformed or semantically invalid input. Raised before any write."""

    code = "VALIDATION_ERROR"
    http_status = 400


class InsufficientStockError(OrderServiceError):
    """A (product, size) counter cannot cover the requested quantity."""

    code = "INSUFFICIENT_STOCK"
    http_status = 400

    def __init__(self, *, product_id, size: str, requested: int | None = None, available: int | None = None):
        self.product_id = product_id
        self.size = size
        super().__init__(
            f"Insufficient stock for product {product_id} ({size})",
            details={
                "product_id": product_id,
                "size": size,
                "requested": requested,
                "available": available,
            },
        )


class InsufficientLoyaltyPointsError(OrderServiceError):
    """Redemption requested with a balance below the redemption cost."""

    code = "INSUFFICIENT_LOYALTY_POINTS"
    http_status = 400


class InvalidDiscountError(OrderServiceError):
    """Discount does not match the promo code."""

    code = "INVALID_DISCOUNT"
    http_status = 400


class OrderNotFoundError(OrderServiceError):
    code = "ORDER_NOT_FOUND"
    http_status = 404


class InvalidTransitionError(OrderServiceError):
    """Requested status change is not an edge of the state machine."""

    code = "INVALID_TRANSITION"
    http_status = 409


class OrderNotDeletableError(OrderServiceError):
    code = "ORDER_NOT_DELETABLE"
    http_status = 409


class PersistenceFailureError(OrderServiceError):
    """The store rejected a write. The API message stays generic; the cause is logged."""

    code = "PERSISTENCE_FAILURE"
    http_status = 500

    def __init__(self, message: str = "The order could not be saved. Please try again."):
        super().__init__(message)
