"""
Order engine services export surface.
"""

from .exceptions import (
    InsufficientLoyaltyPointsError,
    InsufficientStockError,
    InvalidDiscountError,
    InvalidTransitionError,
    OrderNotDeletableError,
    OrderNotFoundError,
    OrderServiceError,
    OrderValidationError,
    PersistenceFailureError,
)

__all__ = [
    "InsufficientLoyaltyPointsError",
    "InsufficientStockError",
    "InvalidDiscountError",
    "InvalidTransitionError",
    "OrderNotDeletableError",
    "OrderNotFoundError",
    "OrderServiceError",
    "OrderValidationError",
    "PersistenceFailureError",
]
