# orders/models/order_item.py

from decimal import Decimal

from django.db import models

from products.models import Product, ProductVariant

from .order import Order


class OrderItem(models.Model):
    """
    One line of an order: (product, size, quantity, unit price snapshot).

    Created with its order in one transaction; never edited afterwards.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="order_items",
    )

    size = models.CharField(max_length=10, choices=ProductVariant.Size.choices)
    quantity = models.PositiveIntegerField()

    # Snapshot at order time
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            raise RuntimeError("Order items are immutable once created.")
        super().save(*args, **kwargs)

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.unit_price) * int(self.quantity)

    def __str__(self):
        return f"{self.product_id} ({self.size}) x{self.quantity}"
