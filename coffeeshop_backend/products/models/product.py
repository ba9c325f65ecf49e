# products/models/product.py

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Sum

from .category import Category


class Product(models.Model):
    """
    Represents a sellable menu item.

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock or price
    - Each serving size lives in ProductVariant (own price + own counter)
    - Counters are only mutated through products.services.inventory

    COFFEE CLASSIFICATION:
    - is_coffee=True/False is authoritative when set
    - NULL falls back to keyword matching (products.services.classification)
    """

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    name = models.CharField(max_length=255, db_index=True)

    is_coffee = models.BooleanField(
        null=True,
        blank=True,
        help_text="Explicit loyalty-redemption eligibility. Leave empty to infer from name/category.",
    )

    low_stock_threshold = models.PositiveIntegerField(default=5)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError("name is required")

    @property
    def category_name(self) -> str:
        return self.category.name if self.category_id else ""

    @property
    def total_stock_db(self) -> int:
        return self.variants.aggregate(total=Sum("quantity")).get("total") or 0
