# products/tests/test_seed_products.py

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from products.management.commands.seed_products import MENU
from products.models import Product, ProductVariant


class SeedProductsCommandTests(TestCase):
    def test_seed_creates_menu_with_three_sizes(self):
        call_command("seed_products", "--stock", "12", stdout=StringIO())

        self.assertEqual(Product.objects.count(), len(MENU))
        self.assertEqual(ProductVariant.objects.count(), len(MENU) * 3)
        self.assertFalse(ProductVariant.objects.exclude(quantity=12).exists())

    def test_seed_is_idempotent(self):
        call_command("seed_products", stdout=StringIO())
        ProductVariant.objects.update(quantity=3)

        out = StringIO()
        call_command("seed_products", stdout=out)

        self.assertEqual(Product.objects.count(), len(MENU))
        self.assertFalse(ProductVariant.objects.exclude(quantity=3).exists())
        self.assertIn("0 new size variants", out.getvalue())
