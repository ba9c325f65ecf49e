# products/models/variant.py

"""
SIZE VARIANT (PRICE + INVENTORY COUNTER)

One row per (product, size).

GUARANTEES:
- quantity is a non-negative integer (PositiveIntegerField + conditional
  UPDATE in products.services.inventory)
- unit_price is the current selling price; orders snapshot it per line
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class ProductVariant(models.Model):
    class Size(models.TextChoices):
        SMALL = "small", "Small"
        MEDIUM = "medium", "Medium"
        LARGE = "large", "Large"

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="variants",
    )

    size = models.CharField(max_length=10, choices=Size.choices)

    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    quantity = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["product_id", "size"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "size"],
                name="uniq_variant_product_size",
            ),
        ]

    def __str__(self):
        return f"{self.product.name} ({self.size}) x{self.quantity}"

    def clean(self):
        if self.unit_price is None or Decimal(self.unit_price) <= Decimal("0.00"):
            raise ValidationError("Unit price must be greater than zero")

    @property
    def is_low_stock(self) -> bool:
        return int(self.quantity) <= int(self.product.low_stock_threshold or 0)

    @classmethod
    def normalize_size(cls, value) -> str:
        """
        Accept "Medium", " medium ", "MEDIUM" from clients.
        Returns "" for anything that is not one of the three serving sizes.
        """
        size = str(value or "").strip().lower()
        return size if size in cls.Size.values else ""
