# customers/models/profile.py

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class CustomerProfile(models.Model):
    """
    Loyalty balance for one customer account.

    GUARANTEES:
    - points_balance and points_used_lifetime are never negative
      (PositiveIntegerField + floored writes in customers.services.loyalty)
    - Only customers.services.loyalty mutates the counters
    """

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="customer_profile",
    )

    phone = models.CharField(max_length=32, blank=True)

    points_balance = models.PositiveIntegerField(default=0)
    points_used_lifetime = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.user} | {self.points_balance} pts"
