# orders/urls.py

"""
ORDERS API URLS

Mounted under /api/ by backend/urls.py.

Provides:
- Storefront checkout:
    POST /api/orders/

- Staff order board:
    GET    /api/orders/?page=1&limit=10&search=...
    POST   /api/orders/<id>/status/
    DELETE /api/orders/<id>/
    POST   /api/orders/sweep-expired/
    GET    /api/order-history/

- Customer order page (owner or staff):
    GET /api/orders/<id>/
    GET /api/orders/<id>/history/
    GET /api/orders/<id>/items/
    GET /api/orders/current/

NOTE:
- SimpleRouter (no API root view) because /api/ already serves api_root.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from orders.views import OrderHistoryViewSet, OrderViewSet

router = SimpleRouter()
router.register(r"orders", OrderViewSet, basename="orders")
router.register(r"order-history", OrderHistoryViewSet, basename="order-history")

urlpatterns = [
    path("", include(router.urls)),
]
