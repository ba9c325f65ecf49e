# orders/tests/test_queries.py

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from orders.models import Order, OrderHistoryEntry
from orders.services.exceptions import OrderNotFoundError, OrderValidationError
from orders.services.order_queries import (
    MAX_LIMIT,
    get_current_order,
    get_order,
    get_order_history,
    list_order_items,
    list_orders,
)
from orders.tests.helpers import make_customer, make_variant, place_raw_order


class OrderQueryTests(TestCase):
    def setUp(self):
        self.latte = make_variant("Cafe Latte")
        self.mocha = make_variant("Mocha Frappe", price="150.00")
        now = timezone.now()
        for i in range(12):
            place_raw_order(
                order_number=f"ORD-{i:03d}",
                created_at=now - timedelta(minutes=i),
                items=[(self.latte, 1)],
            )

    def test_first_page_is_newest_first(self):
        page = list_orders(page=1, limit=5)

        self.assertEqual(page.total_count, 12)
        self.assertEqual(page.total_pages, 3)
        self.assertEqual(
            [o.order_number for o in page.orders],
            ["ORD-000", "ORD-001", "ORD-002", "ORD-003", "ORD-004"],
        )

    def test_last_page_is_partial(self):
        page = list_orders(page=3, limit=5)
        self.assertEqual([o.order_number for o in page.orders], ["ORD-010", "ORD-011"])

    def test_page_past_the_end_is_empty(self):
        page = list_orders(page=9, limit=5)
        self.assertEqual(page.orders, [])
        self.assertEqual(page.total_count, 12)

    def test_defaults_and_limit_cap(self):
        self.assertEqual(list_orders().limit, 10)
        self.assertEqual(list_orders(limit=1000).limit, MAX_LIMIT)

    def test_invalid_pagination(self):
        for kwargs in ({"page": 0}, {"page": "x"}, {"limit": -1}):
            with self.assertRaises(OrderValidationError) as ctx:
                list_orders(**kwargs)
            self.assertEqual(ctx.exception.code, "INVALID_PAGINATION")

    def test_search_matches_product_names_once_per_order(self):
        place_raw_order(order_number="MOCHA-1", items=[(self.mocha, 1), (self.mocha, 2)])

        page = list_orders(search="  mocha ")

        self.assertEqual(page.total_count, 1)
        self.assertEqual(page.orders[0].order_number, "MOCHA-1")

    def test_search_matches_history_notes(self):
        order = Order.objects.get(order_number="ORD-005")
        OrderHistoryEntry.objects.create(order=order, status=order.status, notes="gate code 4411")

        page = list_orders(search="4411")
        self.assertEqual([o.order_number for o in page.orders], ["ORD-005"])

    def test_get_order_and_items(self):
        order = Order.objects.get(order_number="ORD-000")

        self.assertEqual(get_order(order_id=order.pk).pk, order.pk)
        items = list_order_items(order_id=order.pk)
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].product.name, "Cafe Latte")

    def test_history_is_newest_first(self):
        order = Order.objects.get(order_number="ORD-000")
        OrderHistoryEntry.objects.create(order=order, status=Order.STATUS_CONFIRMED, notes="second")

        history = get_order_history(order_id=order.pk)
        self.assertEqual([h.notes for h in history], ["second", "seeded"])

    def test_missing_order(self):
        with self.assertRaises(OrderNotFoundError):
            get_order(order_id=987654)
        with self.assertRaises(OrderNotFoundError):
            get_order_history(order_id=987654)
        with self.assertRaises(OrderNotFoundError):
            list_order_items(order_id=987654)

    def test_current_order_skips_closed_orders(self):
        customer = make_customer()
        now = timezone.now()
        place_raw_order(order_number="C-OPEN", customer=customer, status=Order.STATUS_PROCESSING,
                        created_at=now - timedelta(hours=2))
        place_raw_order(order_number="C-DONE", customer=customer, status=Order.STATUS_COMPLETED,
                        created_at=now - timedelta(hours=1))

        current = get_current_order(customer_id=customer.id)
        self.assertEqual(current.order_number, "C-OPEN")

    def test_current_order_none(self):
        customer = make_customer()
        self.assertIsNone(get_current_order(customer_id=customer.id))
