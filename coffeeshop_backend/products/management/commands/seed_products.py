from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from products.models import Category, Product, ProductVariant

MENU = [
    # (name, category, is_coffee, {size: price})
    ("Cafe Latte", "Hot Coffee", None, {"small": "95.00", "medium": "120.00", "large": "145.00"}),
    ("Cappuccino", "Hot Coffee", None, {"small": "95.00", "medium": "120.00", "large": "145.00"}),
    ("Americano", "Hot Coffee", None, {"small": "80.00", "medium": "100.00", "large": "120.00"}),
    ("Iced Espresso", "Iced Coffee", None, {"small": "90.00", "medium": "115.00", "large": "140.00"}),
    ("Spanish Latte", "Iced Coffee", None, {"small": "110.00", "medium": "135.00", "large": "160.00"}),
    ("Matcha Frappe", "Frappe", False, {"small": "120.00", "medium": "145.00", "large": "170.00"}),
    ("Chocolate Milkshake", "Non-Coffee", False, {"small": "100.00", "medium": "125.00", "large": "150.00"}),
    ("Ensaymada", "Pastries", False, {"small": "45.00", "medium": "60.00", "large": "75.00"}),
]


class Command(BaseCommand):
    help = "Seed the coffee menu: categories, products and per-size variants"

    def add_arguments(self, parser):
        parser.add_argument(
            "--stock",
            type=int,
            default=50,
            help="Initial quantity for every newly created size variant (default 50).",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        stock = max(0, int(options["stock"]))
        self.stdout.write(self.style.WARNING("Seeding coffee menu..."))

        created_variants = 0

        for name, category_name, is_coffee, prices in MENU:
            category, _ = Category.objects.get_or_create(name=category_name)
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={"category": category, "is_coffee": is_coffee},
            )

            for size, price in prices.items():
                _, created = ProductVariant.objects.get_or_create(
                    product=product,
                    size=size,
                    defaults={"unit_price": Decimal(price), "quantity": stock},
                )
                created_variants += int(created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Menu seeded: {len(MENU)} products, {created_variants} new size variants."
            )
        )
