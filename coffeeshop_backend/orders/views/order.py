# orders/views/order.py

"""
======================================================
PATH: orders/views/order.py
======================================================
ORDER VIEWSET

Purpose:
- Storefront checkout (guest or signed-in customer).
- Staff order board: list/search, status changes, deletion, sweep.
- Customer order page: own order, its items + history, current order.

Security:
- create:            AllowAny (scoped throttle "order_create")
- retrieve/history/items: staff, or the customer who owns the order
- current:           any authenticated user (their own latest open order)
- list/destroy/status/sweep-expired: staff only

Identity:
- The caller's identity comes from the JWT only. A signed-in customer always
  orders on their own account; staff may order on behalf of user_id; a guest
  cannot attach an account.
======================================================
"""

from __future__ import annotations

from dataclasses import asdict

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.throttling import ScopedRateThrottle

from orders.models import Order
from orders.serializers import (
    CreateOrderSerializer,
    OrderCreatedSerializer,
    OrderHistoryEntrySerializer,
    OrderItemSerializer,
    OrderSerializer,
    SweepResultSerializer,
    UpdateOrderStatusSerializer,
)
from orders.services.exceptions import OrderServiceError
from orders.services.expiry_sweeper import sweep_expired_pending_orders
from orders.services.order_deletion import delete_order
from orders.services.order_entry import create_order
from orders.services.order_queries import (
    get_current_order,
    get_order,
    get_order_history,
    list_order_items,
    list_orders,
)
from orders.services.status_service import apply_transition
from orders.views.errors import error_response, invalid_payload_response, service_error_response
from users.permissions import IsStaff, IsStaffOrOrderOwner


def _actor_id(request):
    user = request.user
    return user.id if user and user.is_authenticated else None


class OrderViewSet(viewsets.GenericViewSet):
    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filter_backends = []
    pagination_class = None
    lookup_value_regex = r"\d+"
    throttle_scope = "order_create"

    def get_permissions(self):
        if self.action == "create":
            return [AllowAny()]
        if self.action in {"retrieve", "history", "items"}:
            return [IsStaffOrOrderOwner()]
        if self.action == "current":
            return [IsAuthenticated()]
        return [IsStaff()]

    def get_throttles(self):
        if self.action == "create" and api_settings.DEFAULT_THROTTLE_CLASSES:
            return [ScopedRateThrottle()]
        return super().get_throttles()

    def _get_visible_order(self, request, pk):
        order = get_order(order_id=pk)
        self.check_object_permissions(request, order)
        return order

    # ======================================================
    # CREATE (STOREFRONT CHECKOUT)
    # ======================================================

    @extend_schema(
        request=CreateOrderSerializer,
        responses={201: OrderCreatedSerializer},
        description="Place an order: reserves stock and settles loyalty points atomically.",
    )
    def create(self, request):
        ser = CreateOrderSerializer(data=request.data)
        if not ser.is_valid():
            return invalid_payload_response(ser.errors)

        user = request.user if request.user and request.user.is_authenticated else None
        requested_customer = ser.validated_data.get("user_id")

        if user is None:
            if requested_customer:
                return error_response(
                    code="AUTHENTICATION_REQUIRED",
                    message="Sign in to place an order on a customer account.",
                    http_status=status.HTTP_401_UNAUTHORIZED,
                )
            customer_id = None
        elif getattr(user, "is_shop_staff", False):
            customer_id = requested_customer
        else:
            if requested_customer and requested_customer != user.id:
                return error_response(
                    code="FORBIDDEN",
                    message="You can only place orders on your own account.",
                    http_status=status.HTTP_403_FORBIDDEN,
                )
            customer_id = user.id

        try:
            result = create_order(
                ser.to_submission(customer_id=customer_id),
                actor_id=_actor_id(request),
            )
        except OrderServiceError as exc:
            return service_error_response(exc)

        return Response(
            OrderCreatedSerializer(asdict(result)).data,
            status=status.HTTP_201_CREATED,
        )

    # ======================================================
    # LIST / SEARCH (STAFF)
    # ======================================================

    @extend_schema(
        parameters=[
            OpenApiParameter("page", int, description="1-based page number"),
            OpenApiParameter("limit", int, description="Page size (default 10, max 100)"),
            OpenApiParameter("search", str, description="Free text, max 100 characters"),
        ],
        responses={200: OrderSerializer(many=True)},
    )
    def list(self, request):
        params = request.query_params
        try:
            page = list_orders(
                page=params.get("page"),
                limit=params.get("limit"),
                search=params.get("search") or "",
            )
        except OrderServiceError as exc:
            return service_error_response(exc)

        return Response(
            {
                "orders": OrderSerializer(page.orders, many=True).data,
                "total_count": page.total_count,
                "page": page.page,
                "limit": page.limit,
                "total_pages": page.total_pages,
            }
        )

    # ======================================================
    # RETRIEVE
    # ======================================================

    @extend_schema(responses={200: OrderSerializer})
    def retrieve(self, request, pk=None):
        try:
            order = self._get_visible_order(request, pk)
        except OrderServiceError as exc:
            return service_error_response(exc)
        return Response(OrderSerializer(order).data)

    # ======================================================
    # DELETE (STAFF)
    # ======================================================

    @extend_schema(responses={204: None})
    def destroy(self, request, pk=None):
        try:
            delete_order(order_id=pk, actor_id=_actor_id(request))
        except OrderServiceError as exc:
            return service_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ======================================================
    # STATUS CHANGE (STAFF)
    # POST /api/orders/:id/status/
    # ======================================================

    @extend_schema(
        request=UpdateOrderStatusSerializer,
        responses={200: OrderSerializer},
    )
    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request, pk=None):
        ser = UpdateOrderStatusSerializer(data=request.data)
        if not ser.is_valid():
            return invalid_payload_response(ser.errors)

        try:
            order = apply_transition(
                order_id=pk,
                target_status=ser.validated_data["status"].strip(),
                note=ser.validated_data.get("notes", ""),
                actor_id=_actor_id(request),
            )
        except OrderServiceError as exc:
            return service_error_response(exc)

        return Response(OrderSerializer(get_order(order_id=order.pk)).data)

    # ======================================================
    # HISTORY / ITEMS
    # ======================================================

    @extend_schema(responses={200: OrderHistoryEntrySerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="history")
    def history(self, request, pk=None):
        try:
            self._get_visible_order(request, pk)
            entries = get_order_history(order_id=pk)
        except OrderServiceError as exc:
            return service_error_response(exc)
        return Response(OrderHistoryEntrySerializer(entries, many=True).data)

    @extend_schema(responses={200: OrderItemSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="items")
    def items(self, request, pk=None):
        try:
            self._get_visible_order(request, pk)
            items = list_order_items(order_id=pk)
        except OrderServiceError as exc:
            return service_error_response(exc)
        return Response(OrderItemSerializer(items, many=True).data)

    # ======================================================
    # CURRENT ORDER (CUSTOMER)
    # ======================================================

    @extend_schema(responses={200: OrderSerializer})
    @action(detail=False, methods=["get"], url_path="current")
    def current(self, request):
        order = get_current_order(customer_id=request.user.id)
        return Response({"order": OrderSerializer(order).data if order else None})

    # ======================================================
    # AUTO-CONFIRM SWEEP (STAFF / CRON)
    # ======================================================

    @extend_schema(request=None, responses={200: SweepResultSerializer})
    @action(detail=False, methods=["post"], url_path="sweep-expired")
    def sweep_expired(self, request):
        result = sweep_expired_pending_orders()
        return Response(SweepResultSerializer(result.as_dict()).data)
