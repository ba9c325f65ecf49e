from .classification import COFFEE_KEYWORDS, is_coffee_type
from .inventory import (
    InventoryError,
    StockReleaseError,
    StockReservationError,
    available_quantity,
    release_stock,
    reserve_stock,
)

__all__ = [
    "COFFEE_KEYWORDS",
    "is_coffee_type",
    "InventoryError",
    "StockReleaseError",
    "StockReservationError",
    "available_quantity",
    "release_stock",
    "reserve_stock",
]
