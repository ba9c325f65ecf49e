from .order import OrderHistoryEntrySerializer, OrderItemSerializer, OrderSerializer
from .order_command import (
    CartLineInputSerializer,
    CreateOrderSerializer,
    OrderCreatedSerializer,
    SweepResultSerializer,
    UpdateOrderStatusSerializer,
)

__all__ = [
    "OrderSerializer",
    "OrderItemSerializer",
    "OrderHistoryEntrySerializer",
    "CartLineInputSerializer",
    "CreateOrderSerializer",
    "OrderCreatedSerializer",
    "SweepResultSerializer",
    "UpdateOrderStatusSerializer",
]
