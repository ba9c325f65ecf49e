# orders/tests/test_order_entry.py

from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase, override_settings

from customers.models import CustomerProfile
from orders.models import Order, OrderHistoryEntry, OrderItem
from orders.services.exceptions import (
    InsufficientLoyaltyPointsError,
    InsufficientStockError,
    InvalidDiscountError,
    OrderValidationError,
    PersistenceFailureError,
)
from orders.services.order_entry import create_order
from orders.tests.helpers import line, make_customer, make_staff, make_variant, submission
from products.models import ProductVariant


class OrderEntryTests(TestCase):
    """
    GUARANTEES:
    - A valid cart becomes one Pending order with items and one history entry
    - Stock is reserved per (product, size) in the same transaction
    - Customers earn floor(total / 10) points
    - Guests earn nothing and get no balance
    """

    def setUp(self):
        self.latte = make_variant("Cafe Latte", quantity=10)
        self.customer = make_customer()

    def _stock(self, variant):
        return ProductVariant.objects.get(pk=variant.pk).quantity

    def test_customer_order_reserves_stock_and_earns_points(self):
        result = create_order(
            submission(line(self.latte, 2), customer_id=self.customer.id, total_amount="240.00")
        )

        order = Order.objects.get(pk=result.order_id)
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.order_number, "ORD-1001")
        self.assertEqual(order.total_amount, Decimal("240.00"))
        self.assertEqual(order.loyalty_points_earned, 24)
        self.assertEqual(order.loyalty_points_used, 0)
        self.assertEqual(order.items.count(), 1)

        self.assertEqual(result.points_earned, 24)
        self.assertEqual(result.points_balance, 24)
        self.assertEqual(result.loyalty_points_redeemed, 0)
        self.assertIsNone(result.free_item)
        self.assertEqual(result.low_stock_product_ids, [])

        self.assertEqual(self._stock(self.latte), 8)
        self.assertEqual(CustomerProfile.objects.get(user=self.customer).points_balance, 24)

        history = list(OrderHistoryEntry.objects.filter(order=order))
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].status, Order.STATUS_PENDING)
        self.assertEqual(
            history[0].notes,
            "Order placed with 24 loyalty points earned (1 point per ₱10 of total order)",
        )
        self.assertEqual(history[0].actor_id, self.customer.id)

    def test_points_are_floored(self):
        result = create_order(
            submission(line(self.latte, 2), customer_id=self.customer.id, total_amount="245.50")
        )
        self.assertEqual(result.points_earned, 24)

    def test_guest_order_earns_no_points(self):
        result = create_order(submission(line(self.latte, 1), total_amount="120.00"))

        order = Order.objects.get(pk=result.order_id)
        self.assertIsNone(order.customer_id)
        self.assertEqual(result.points_earned, 0)
        self.assertIsNone(result.points_balance)
        self.assertIsNone(order.history.get().actor_id)

    def test_staff_actor_is_recorded_on_history(self):
        barista = make_staff()
        result = create_order(
            submission(line(self.latte, 1), customer_id=self.customer.id),
            actor_id=barista.id,
        )
        self.assertEqual(OrderHistoryEntry.objects.get(order_id=result.order_id).actor_id, barista.id)

    def test_repeated_lines_are_summed_per_size(self):
        create_order(submission(line(self.latte, 3), line(self.latte, 4)))

        self.assertEqual(self._stock(self.latte), 3)
        self.assertEqual(OrderItem.objects.count(), 2)

    def test_low_stock_products_are_reported(self):
        result = create_order(submission(line(self.latte, 6)))

        self.assertEqual(self._stock(self.latte), 4)
        self.assertEqual(result.low_stock_product_ids, [self.latte.product_id])

    def test_caller_price_is_kept_on_the_item(self):
        create_order(submission(line(self.latte, 1, price="99.50")))
        self.assertEqual(OrderItem.objects.get().unit_price, Decimal("99.50"))

    def test_payment_method_and_city_are_canonicalized(self):
        result = create_order(
            submission(
                line(self.latte, 1),
                payment_method="gcash",
                payment_reference="1234567890123",
                delivery_city="carcar",
            )
        )
        order = Order.objects.get(pk=result.order_id)
        self.assertEqual(order.payment_method, Order.PAYMENT_GCASH)
        self.assertEqual(order.payment_reference, "1234567890123")
        self.assertEqual(order.delivery_city, "Carcar")

    def test_blank_city_defaults_to_service_area(self):
        result = create_order(submission(line(self.latte, 1), delivery_city=""))
        self.assertEqual(Order.objects.get(pk=result.order_id).delivery_city, "Carcar")

    def test_pickup_has_no_payment_reference(self):
        result = create_order(submission(line(self.latte, 1), payment_reference="999"))
        self.assertIsNone(Order.objects.get(pk=result.order_id).payment_reference)

    def test_discount_with_promo_code_is_accepted(self):
        result = create_order(
            submission(line(self.latte, 2), promo_code="WELCOME10", discount_amount="24.00", total_amount="216.00")
        )
        order = Order.objects.get(pk=result.order_id)
        self.assertEqual(order.discount_amount, Decimal("24.00"))
        self.assertEqual(order.promo_code, "WELCOME10")


class OrderEntryValidationTests(TestCase):
    """
    GUARANTEES:
    - The first failing rule is reported with a stable code
    - A rejected submission writes nothing
    """

    def setUp(self):
        self.latte = make_variant("Cafe Latte", quantity=10)

    def assertRejected(self, sub, exc_class=OrderValidationError, code=None):
        with self.assertRaises(exc_class) as ctx:
            create_order(sub)
        if code:
            self.assertEqual(ctx.exception.code, code)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderHistoryEntry.objects.count(), 0)
        self.assertEqual(ProductVariant.objects.get(pk=self.latte.pk).quantity, 10)
        return ctx.exception

    def test_missing_required_field(self):
        exc = self.assertRejected(submission(line(self.latte), delivery_phone="  "), code="MISSING_FIELD")
        self.assertEqual(exc.details["field"], "delivery_phone")

    def test_empty_cart(self):
        self.assertRejected(submission(), code="MISSING_FIELD")

    def test_invalid_total(self):
        self.assertRejected(submission(line(self.latte), total_amount="abc"), code="INVALID_NUMBER")

    def test_unknown_payment_method(self):
        self.assertRejected(submission(line(self.latte), payment_method="Card"), code="INVALID_PAYMENT_METHOD")

    def test_gcash_requires_reference(self):
        self.assertRejected(
            submission(line(self.latte), payment_method="GCash"),
            code="MISSING_PAYMENT_REFERENCE",
        )

    def test_gcash_reference_must_be_thirteen_digits(self):
        self.assertRejected(
            submission(line(self.latte), payment_method="GCash", payment_reference="123456789012"),
            code="INVALID_PAYMENT_REFERENCE",
        )

    def test_city_outside_service_area(self):
        self.assertRejected(submission(line(self.latte), delivery_city="Cebu City"), code="OUTSIDE_SERVICE_AREA")

    @override_settings(ORDER_SERVICE_AREA_CITIES=["Carcar", "Sibonga"])
    def test_service_area_is_configurable(self):
        result = create_order(submission(line(self.latte), delivery_city="Sibonga"))
        self.assertEqual(Order.objects.get(pk=result.order_id).delivery_city, "Sibonga")

    def test_duplicate_order_number(self):
        create_order(submission(line(self.latte, 1)))

        with self.assertRaises(OrderValidationError) as ctx:
            create_order(submission(line(self.latte, 1)))

        self.assertEqual(ctx.exception.code, "DUPLICATE_ORDER_NUMBER")
        self.assertEqual(Order.objects.count(), 1)
        self.assertEqual(ProductVariant.objects.get(pk=self.latte.pk).quantity, 9)

    def test_unknown_customer(self):
        self.assertRejected(
            submission(line(self.latte), customer_id="7f8f1a52-4d55-4f43-9a43-0d9f0c7b1c11"),
            code="UNKNOWN_CUSTOMER",
        )

    def test_invalid_size(self):
        bad = line(self.latte)
        bad = bad.__class__(product_id=bad.product_id, size="XL", quantity=1, unit_price="120.00")
        self.assertRejected(submission(bad), code="INVALID_SIZE")

    def test_zero_quantity(self):
        self.assertRejected(submission(line(self.latte, 0)), code="INVALID_QUANTITY")

    def test_fractional_quantity(self):
        self.assertRejected(submission(line(self.latte, "1.5")), code="INVALID_QUANTITY")

    def test_non_positive_price(self):
        self.assertRejected(submission(line(self.latte, 1, price="0")), code="INVALID_PRICE")

    def test_size_not_stocked(self):
        large = line(self.latte)
        large = large.__class__(product_id=large.product_id, size="large", quantity=1, unit_price="150.00")
        self.assertRejected(submission(large), code="UNKNOWN_PRODUCT")

    def test_inactive_product(self):
        self.latte.product.is_active = False
        self.latte.product.save()
        self.assertRejected(submission(line(self.latte)), code="UNKNOWN_PRODUCT")

    def test_discount_without_promo_code(self):
        self.assertRejected(
            submission(line(self.latte), discount_amount="20.00"),
            exc_class=InvalidDiscountError,
        )

    def test_discount_within_tolerance_is_accepted(self):
        create_order(submission(line(self.latte), discount_amount="0.01"))
        self.assertEqual(Order.objects.count(), 1)

    def test_insufficient_stock(self):
        exc = self.assertRejected(
            submission(line(self.latte, 6), line(self.latte, 5)),
            exc_class=InsufficientStockError,
        )
        self.assertEqual(exc.details["product_id"], self.latte.product_id)
        self.assertEqual(exc.details["requested"], 11)


class LoyaltyRedemptionTests(TestCase):
    """
    GUARANTEES:
    - Redemption costs exactly 100 points and still credits earned points
    - The cheapest coffee line is the free item
    - Redemption needs an account, enough points and a coffee line
    """

    def setUp(self):
        self.latte = make_variant("Cafe Latte", price="120.00", quantity=10)
        self.americano = make_variant("Americano", price="90.00", quantity=10, category="Hot Coffee")
        self.muffin = make_variant("Blueberry Muffin", price="75.00", quantity=10, category="Pastries")

    def test_redemption_adjusts_balance_and_lifetime_usage(self):
        customer = make_customer(points=150)

        result = create_order(
            submission(
                line(self.latte, 1),
                line(self.americano, 1),
                customer_id=customer.id,
                total_amount="210.00",
                use_loyalty_points=True,
            )
        )

        profile = CustomerProfile.objects.get(user=customer)
        self.assertEqual(profile.points_balance, 150 + 21 - 100)
        self.assertEqual(profile.points_used_lifetime, 100)

        self.assertEqual(result.points_earned, 21)
        self.assertEqual(result.points_balance, 71)
        self.assertEqual(result.loyalty_points_redeemed, 100)
        self.assertEqual(result.free_item.name, "Americano")
        self.assertEqual(result.free_item.unit_price, Decimal("90.00"))

        order = Order.objects.get(pk=result.order_id)
        self.assertEqual(order.loyalty_points_used, 100)
        self.assertEqual(order.discount_amount, Decimal("0.00"))
        self.assertEqual(
            order.history.get().notes,
            "Order placed with loyalty points redemption (100 points, 1 free coffee: Americano)",
        )

    def test_explicit_coffee_flag_overrides_keywords(self):
        customer = make_customer(points=100)
        self.muffin.product.is_coffee = True
        self.muffin.product.save()

        result = create_order(
            submission(line(self.muffin, 1), customer_id=customer.id, total_amount="75.00", use_loyalty_points=True)
        )
        self.assertEqual(result.free_item.product_id, self.muffin.product_id)

    def test_redemption_requires_enough_points(self):
        customer = make_customer(points=99)

        with self.assertRaises(InsufficientLoyaltyPointsError):
            create_order(
                submission(line(self.latte, 1), customer_id=customer.id, use_loyalty_points=True)
            )

        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(CustomerProfile.objects.get(user=customer).points_balance, 99)

    def test_redemption_requires_an_account(self):
        with self.assertRaises(OrderValidationError) as ctx:
            create_order(submission(line(self.latte, 1), use_loyalty_points=True))
        self.assertEqual(ctx.exception.code, "LOYALTY_REQUIRES_ACCOUNT")

    def test_redemption_requires_a_coffee_line(self):
        customer = make_customer(points=200)

        with self.assertRaises(OrderValidationError) as ctx:
            create_order(
                submission(line(self.muffin, 1), customer_id=customer.id, use_loyalty_points=True)
            )

        self.assertEqual(ctx.exception.code, "NO_COFFEE_ITEM")
        self.assertEqual(CustomerProfile.objects.get(user=customer).points_balance, 200)

    def test_balance_spent_between_validation_and_commit_is_rejected(self):
        customer = make_customer(points=100)

        with patch("orders.services.order_entry.get_balance", return_value=100):
            CustomerProfile.objects.filter(user=customer).update(points_balance=40)
            with self.assertRaises(InsufficientLoyaltyPointsError):
                create_order(
                    submission(line(self.latte, 1), customer_id=customer.id, use_loyalty_points=True)
                )

        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(ProductVariant.objects.get(pk=self.latte.pk).quantity, 10)
        self.assertEqual(CustomerProfile.objects.get(user=customer).points_balance, 40)


class OrderEntryAtomicityTests(TestCase):
    """
    GUARANTEES:
    - A failure at any commit step leaves no order, item, history, stock
      or points change behind
    - Stock is re-checked at write time
    """

    def setUp(self):
        self.latte = make_variant("Cafe Latte", quantity=5)
        self.customer = make_customer(points=10)

    def _assert_nothing_persisted(self):
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)
        self.assertEqual(OrderHistoryEntry.objects.count(), 0)
        self.assertEqual(ProductVariant.objects.get(pk=self.latte.pk).quantity, 5)
        self.assertEqual(CustomerProfile.objects.get(user=self.customer).points_balance, 10)

    def test_storage_failure_rolls_back_everything(self):
        with patch("orders.services.order_entry.reserve_stock", side_effect=DatabaseError("disk full")):
            with self.assertRaises(PersistenceFailureError) as ctx:
                create_order(submission(line(self.latte, 2), customer_id=self.customer.id))

        self.assertEqual(ctx.exception.http_status, 500)
        self.assertNotIn("disk full", ctx.exception.message)
        self._assert_nothing_persisted()

    def test_loyalty_failure_rolls_back_stock(self):
        with patch("orders.services.order_entry.credit_points", side_effect=DatabaseError("locked")):
            with self.assertRaises(PersistenceFailureError):
                create_order(submission(line(self.latte, 2), customer_id=self.customer.id))

        self._assert_nothing_persisted()

    def test_stock_taken_between_validation_and_commit_is_rejected(self):
        key = (self.latte.product_id, self.latte.size)
        with patch("orders.services.order_entry._validate_stock", return_value={key: 6}):
            with self.assertRaises(InsufficientStockError):
                create_order(submission(line(self.latte, 6), customer_id=self.customer.id))

        self._assert_nothing_persisted()

    def test_sequential_orders_stop_at_zero(self):
        create_order(submission(line(self.latte, 2), order_number="A-1"))
        create_order(submission(line(self.latte, 2), order_number="A-2"))

        with self.assertRaises(InsufficientStockError):
            create_order(submission(line(self.latte, 2), order_number="A-3"))

        create_order(submission(line(self.latte, 1), order_number="A-4"))

        self.assertEqual(ProductVariant.objects.get(pk=self.latte.pk).quantity, 0)
        self.assertEqual(Order.objects.count(), 3)
