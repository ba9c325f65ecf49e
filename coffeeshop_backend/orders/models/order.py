# orders/models/order.py

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Order(models.Model):
    """
    Storefront order (delivery or pickup).

    GUARANTEES:
    - Immutable after creation except `status`
    - `status` moves only through orders.services.status_service
      (row lock + compare-and-swap UPDATE, never Model.save)
    - Hard-deleted only by orders.services.order_deletion
    """

    STATUS_PENDING = "Pending"
    STATUS_CONFIRMED = "Confirmed"
    STATUS_PROCESSING = "Processing"
    STATUS_READY_FOR_PICKUP = "Ready for Pickup"
    STATUS_READY_FOR_DELIVERY = "Ready for Delivery"
    STATUS_OUT_FOR_DELIVERY = "Out for Delivery"
    STATUS_DELIVERED = "Delivered"
    STATUS_COMPLETED = "Completed"
    STATUS_REFUND = "Refund"
    STATUS_CANCELLED = "Cancelled"
    STATUS_FAILED_DELIVERY = "Failed Delivery"
    STATUS_RETURNED = "Returned"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_READY_FOR_PICKUP, "Ready for Pickup"),
        (STATUS_READY_FOR_DELIVERY, "Ready for Delivery"),
        (STATUS_OUT_FOR_DELIVERY, "Out for Delivery"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_REFUND, "Refund"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_FAILED_DELIVERY, "Failed Delivery"),
        (STATUS_RETURNED, "Returned"),
    ]

    STATUS_VALUES = frozenset(value for value, _ in STATUS_CHOICES)

    PAYMENT_GCASH = "GCash"
    PAYMENT_PICKUP = "Pickup"

    PAYMENT_CHOICES = [
        (PAYMENT_GCASH, "GCash"),
        (PAYMENT_PICKUP, "Pay on Pickup"),
    ]

    customer = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
        help_text="Empty for guest checkout",
    )

    order_number = models.CharField(
        max_length=64,
        unique=True,
        help_text="Client-supplied order number",
    )

    # Money fields (caller computed; discount validated at entry)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    promo_code = models.CharField(max_length=64, blank=True, default="")

    payment_method = models.CharField(max_length=16, choices=PAYMENT_CHOICES)
    payment_reference = models.CharField(max_length=64, null=True, blank=True)

    # Delivery contact
    delivery_first_name = models.CharField(max_length=100)
    delivery_last_name = models.CharField(max_length=100)
    delivery_phone = models.CharField(max_length=32)
    delivery_email = models.EmailField()
    delivery_address = models.CharField(max_length=255)
    delivery_city = models.CharField(max_length=100)
    delivery_zipcode = models.CharField(max_length=16)

    # Loyalty snapshot (what this order did to the customer's balance)
    loyalty_points_used = models.PositiveIntegerField(default=0)
    loyalty_points_earned = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
            models.Index(fields=["created_at"], name="order_created_idx"),
        ]

    _IMMUTABLE_FIELDS = (
        "customer_id",
        "order_number",
        "total_amount",
        "discount_amount",
        "promo_code",
        "payment_method",
        "payment_reference",
        "delivery_first_name",
        "delivery_last_name",
        "delivery_phone",
        "delivery_email",
        "delivery_address",
        "delivery_city",
        "delivery_zipcode",
        "loyalty_points_used",
        "loyalty_points_earned",
        "created_at",
    )

    def _validate_immutable(self, previous: "Order"):
        for field in self._IMMUTABLE_FIELDS:
            if getattr(self, field) != getattr(previous, field):
                raise ValueError(
                    f"Order {previous.order_number} is immutable. "
                    f"Field '{field}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Order.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.order_number} | {self.status} | {self.total_amount}"
