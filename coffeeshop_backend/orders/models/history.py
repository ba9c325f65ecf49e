# orders/models/history.py

"""
ORDER HISTORY TRAIL (APPEND-ONLY)

Purpose:
- One row per status an order entered (creation included).
- Who did it (actor, NULL = system or guest) and why (notes).

Rules:
- Created once. Instance updates and instance deletes raise.
- Rows disappear only when the administrative order delete removes
  the whole order (queryset delete, see orders.services.order_deletion).
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

from .order import Order

User = settings.AUTH_USER_MODEL


class OrderHistoryEntry(models.Model):
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="history",
    )

    status = models.CharField(max_length=32, choices=Order.STATUS_CHOICES)

    notes = models.TextField(blank=True, default="")

    actor = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_history_entries",
    )

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "order history entries"
        indexes = [
            models.Index(fields=["order", "created_at"], name="order_history_order_idx"),
            models.Index(fields=["status"], name="order_history_status_idx"),
        ]

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            raise RuntimeError("Order history entries are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("Order history entries cannot be deleted individually.")

    def __str__(self):
        return f"{self.order_id} -> {self.status} @ {self.created_at:%Y-%m-%d %H:%M}"
