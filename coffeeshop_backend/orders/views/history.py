# orders/views/history.py

"""
ORDER HISTORY FEED (STAFF)

GET /api/order-history/?status=Cancelled&order_number=...&created_after=...&page=2&page_size=50

Cross-order activity feed, newest first. Read-only; entries are append-only.
"""

from __future__ import annotations

import django_filters
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, viewsets
from rest_framework.filters import SearchFilter
from rest_framework.pagination import PageNumberPagination

from orders.models import Order, OrderHistoryEntry
from orders.serializers import OrderHistoryEntrySerializer
from orders.services.order_queries import history_feed_queryset
from users.permissions import IsStaff


class HistoryFeedPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


class OrderHistoryFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Order.STATUS_CHOICES)
    order_number = django_filters.CharFilter(field_name="order__order_number")
    created_after = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = OrderHistoryEntry
        fields = ["status", "order", "actor"]


class OrderHistoryViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = OrderHistoryEntrySerializer
    permission_classes = [IsStaff]
    pagination_class = HistoryFeedPagination
    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = OrderHistoryFilter
    search_fields = ["notes", "order__order_number", "actor__email"]

    def get_queryset(self):
        return history_feed_queryset()
