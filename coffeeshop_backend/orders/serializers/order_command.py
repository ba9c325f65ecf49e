# orders/serializers/order_command.py

"""
ORDER COMMAND SERIALIZERS (INPUT ONLY)

These serializers do NOT touch the database. They shape the storefront
payload into the service input records; business validation (service
area, discount, loyalty, stock) lives in orders.services.order_entry.

Field names follow the storefront checkout payload
(delivery_firstname, items[].price, use_loyalty_points, ...).
"""

from rest_framework import serializers

from orders.services.order_entry import CartLine, CartSubmission


class CartLineInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    size = serializers.CharField(max_length=20)
    quantity = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)


class CreateOrderSerializer(serializers.Serializer):
    user_id = serializers.UUIDField(required=False, allow_null=True)
    order_number = serializers.CharField(max_length=64)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.CharField(max_length=16)
    payment_reference = serializers.CharField(
        max_length=64, required=False, allow_blank=True, allow_null=True, default=""
    )

    delivery_firstname = serializers.CharField(max_length=100)
    delivery_lastname = serializers.CharField(max_length=100)
    delivery_phone = serializers.CharField(max_length=32)
    delivery_email = serializers.EmailField()
    delivery_address = serializers.CharField(max_length=255)
    delivery_city = serializers.CharField(
        max_length=100, required=False, allow_blank=True, default=""
    )
    delivery_zipcode = serializers.CharField(max_length=16)

    promo_code = serializers.CharField(
        max_length=64, required=False, allow_blank=True, allow_null=True, default=""
    )
    discount_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, default=None
    )
    use_loyalty_points = serializers.BooleanField(required=False, default=False)

    items = CartLineInputSerializer(many=True, allow_empty=False)

    def to_submission(self, *, customer_id) -> CartSubmission:
        data = self.validated_data
        return CartSubmission(
            customer_id=customer_id,
            order_number=data["order_number"],
            total_amount=data["total_amount"],
            payment_method=data["payment_method"],
            payment_reference=data.get("payment_reference") or "",
            delivery_first_name=data["delivery_firstname"],
            delivery_last_name=data["delivery_lastname"],
            delivery_phone=data["delivery_phone"],
            delivery_email=data["delivery_email"],
            delivery_address=data["delivery_address"],
            delivery_city=data.get("delivery_city") or "",
            delivery_zipcode=data["delivery_zipcode"],
            promo_code=data.get("promo_code") or "",
            discount_amount=data.get("discount_amount"),
            use_loyalty_points=bool(data.get("use_loyalty_points")),
            items=[
                CartLine(
                    product_id=line["product_id"],
                    size=line["size"],
                    quantity=line["quantity"],
                    unit_price=line["price"],
                )
                for line in data["items"]
            ],
        )


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=32)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class FreeItemSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    name = serializers.CharField()
    size = serializers.CharField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)


class OrderCreatedSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    order_number = serializers.CharField()
    points_earned = serializers.IntegerField()
    points_balance = serializers.IntegerField(allow_null=True)
    low_stock_product_ids = serializers.ListField(child=serializers.IntegerField())
    loyalty_points_redeemed = serializers.IntegerField()
    free_item = FreeItemSerializer(allow_null=True)


class SweepResultSerializer(serializers.Serializer):
    promoted_count = serializers.IntegerField()
    failures = serializers.ListField(child=serializers.CharField())
    skipped = serializers.ListField(child=serializers.CharField())
