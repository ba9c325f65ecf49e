from .history import OrderHistoryViewSet
from .order import OrderViewSet

__all__ = ["OrderViewSet", "OrderHistoryViewSet"]
