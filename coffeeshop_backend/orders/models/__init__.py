from .order import Order
from .order_item import OrderItem
from .history import OrderHistoryEntry

__all__ = [
    "Order",
    "OrderItem",
    "OrderHistoryEntry",
]
