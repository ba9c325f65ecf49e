# orders/serializers/order.py

"""
ORDER READ SERIALIZERS

Read-only representations for staff screens and the customer's order page.
Nothing here writes; writes go through orders.services.
"""

from rest_framework import serializers

from orders.models import Order, OrderHistoryEntry, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "size",
            "quantity",
            "unit_price",
            "line_total",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    customer_id = serializers.UUIDField(read_only=True, allow_null=True)
    customer_email = serializers.EmailField(source="customer.email", read_only=True, default=None)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "customer_email",
            "status",
            "total_amount",
            "discount_amount",
            "promo_code",
            "payment_method",
            "payment_reference",
            "delivery_first_name",
            "delivery_last_name",
            "delivery_phone",
            "delivery_email",
            "delivery_address",
            "delivery_city",
            "delivery_zipcode",
            "loyalty_points_used",
            "loyalty_points_earned",
            "created_at",
            "items",
        ]
        read_only_fields = fields


class OrderHistoryEntrySerializer(serializers.ModelSerializer):
    order_id = serializers.IntegerField(read_only=True)
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    actor_id = serializers.UUIDField(read_only=True, allow_null=True)
    actor_email = serializers.EmailField(source="actor.email", read_only=True, default=None)

    class Meta:
        model = OrderHistoryEntry
        fields = [
            "id",
            "order_id",
            "order_number",
            "status",
            "notes",
            "actor_id",
            "actor_email",
            "created_at",
        ]
        read_only_fields = fields
