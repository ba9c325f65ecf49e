# products/tests/test_inventory.py

from decimal import Decimal

from django.test import TestCase

from products.models import Product, ProductVariant
from products.services.inventory import (
    StockReleaseError,
    StockReservationError,
    available_quantity,
    release_stock,
    reserve_stock,
)


class InventoryLedgerTests(TestCase):
    """
    GUARANTEES:
    - Reservations never drive a counter below zero
    - Rejected reservations leave the counter untouched
    - Releases are additive
    """

    def setUp(self):
        self.product = Product.objects.create(name="Cafe Latte")
        self.variant = ProductVariant.objects.create(
            product=self.product,
            size=ProductVariant.Size.MEDIUM,
            unit_price=Decimal("120.00"),
            quantity=5,
        )

    def test_reserve_decrements_and_returns_remaining(self):
        remaining = reserve_stock(product_id=self.product.id, size="medium", quantity=2)

        self.assertEqual(remaining, 3)
        self.variant.refresh_from_db()
        self.assertEqual(self.variant.quantity, 3)

    def test_reserve_exact_quantity_reaches_zero(self):
        remaining = reserve_stock(product_id=self.product.id, size="medium", quantity=5)
        self.assertEqual(remaining, 0)

    def test_reserve_more_than_available_is_rejected(self):
        with self.assertRaises(StockReservationError) as ctx:
            reserve_stock(product_id=self.product.id, size="medium", quantity=6)

        self.assertEqual(ctx.exception.product_id, self.product.id)
        self.assertEqual(ctx.exception.size, "medium")
        self.variant.refresh_from_db()
        self.assertEqual(self.variant.quantity, 5)

    def test_reserve_missing_size_is_rejected(self):
        with self.assertRaises(StockReservationError):
            reserve_stock(product_id=self.product.id, size="large", quantity=1)

    def test_sequential_reservations_stop_at_zero(self):
        reserve_stock(product_id=self.product.id, size="medium", quantity=3)
        reserve_stock(product_id=self.product.id, size="medium", quantity=2)

        with self.assertRaises(StockReservationError):
            reserve_stock(product_id=self.product.id, size="medium", quantity=1)

        self.assertEqual(available_quantity(product_id=self.product.id, size="medium"), 0)

    def test_non_positive_quantity_is_invalid(self):
        with self.assertRaises(ValueError):
            reserve_stock(product_id=self.product.id, size="medium", quantity=0)
        with self.assertRaises(ValueError):
            release_stock(product_id=self.product.id, size="medium", quantity=-1)

    def test_release_increments(self):
        reserve_stock(product_id=self.product.id, size="medium", quantity=4)
        after = release_stock(product_id=self.product.id, size="medium", quantity=4)

        self.assertEqual(after, 5)

    def test_release_missing_variant_raises(self):
        with self.assertRaises(StockReleaseError):
            release_stock(product_id=self.product.id, size="small", quantity=1)

    def test_available_quantity_unknown_variant_is_none(self):
        self.assertIsNone(available_quantity(product_id=self.product.id, size="small"))
