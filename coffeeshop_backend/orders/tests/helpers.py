# orders/tests/helpers.py

from decimal import Decimal

from django.contrib.auth import get_user_model

from customers.models import CustomerProfile
from orders.models import Order, OrderHistoryEntry, OrderItem
from orders.services.order_entry import CartLine, CartSubmission
from products.models import Category, Product, ProductVariant

User = get_user_model()


def make_variant(name="Cafe Latte", *, size="medium", price="120.00", quantity=10, category=None, **product_fields):
    category_obj = None
    if category:
        category_obj, _ = Category.objects.get_or_create(name=category)
    product = Product.objects.create(name=name, category=category_obj, **product_fields)
    return ProductVariant.objects.create(
        product=product,
        size=size,
        unit_price=Decimal(price),
        quantity=quantity,
    )


def make_customer(email="customer@example.com", *, points=0, used=0):
    user = User.objects.create_user(email=email, password="pass", role="customer")
    if points or used:
        CustomerProfile.objects.create(user=user, points_balance=points, points_used_lifetime=used)
    return user


def make_staff(email="barista@example.com", role="barista"):
    return User.objects.create_user(email=email, password="pass", role=role)


def line(variant, quantity=1, price=None):
    return CartLine(
        product_id=variant.product_id,
        size=variant.size,
        quantity=quantity,
        unit_price=price if price is not None else variant.unit_price,
    )


def submission(*lines, **overrides):
    data = {
        "order_number": "ORD-1001",
        "total_amount": Decimal("240.00"),
        "payment_method": "Pickup",
        "delivery_first_name": "Maria",
        "delivery_last_name": "Santos",
        "delivery_phone": "09171234567",
        "delivery_email": "maria@example.com",
        "delivery_address": "12 Rizal St",
        "delivery_city": "Carcar",
        "delivery_zipcode": "6019",
        "items": list(lines),
    }
    data.update(overrides)
    return CartSubmission(**data)


def place_raw_order(*, order_number="ORD-RAW", status=Order.STATUS_PENDING, customer=None,
                    items=(), used=0, earned=0, total="100.00", **fields):
    """
    Insert an order directly, bypassing order entry (no stock or points side effects).
    items: iterable of (variant, quantity).
    """
    order = Order.objects.create(
        customer=customer,
        order_number=order_number,
        total_amount=Decimal(total),
        payment_method=Order.PAYMENT_PICKUP,
        delivery_first_name="Juan",
        delivery_last_name="Cruz",
        delivery_phone="09170000000",
        delivery_email="juan@example.com",
        delivery_address="1 Luna St",
        delivery_city="Carcar",
        delivery_zipcode="6019",
        loyalty_points_used=used,
        loyalty_points_earned=earned,
        status=status,
        **fields,
    )
    for variant, quantity in items:
        OrderItem.objects.create(
            order=order,
            product_id=variant.product_id,
            size=variant.size,
            quantity=quantity,
            unit_price=variant.unit_price,
        )
    OrderHistoryEntry.objects.create(order=order, status=status, notes="seeded")
    return order
