# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderHistoryEntry, OrderItem


# ======================================================
# INLINES (READ-ONLY)
# ======================================================


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "size", "quantity", "unit_price")

    def has_add_permission(self, request, obj=None):
        return False


class OrderHistoryInline(admin.TabularInline):
    model = OrderHistoryEntry
    extra = 0
    can_delete = False
    readonly_fields = ("status", "notes", "actor", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


# ======================================================
# ORDER ADMIN
# ======================================================


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Inspection only. Status changes and deletions go through the API so
    that stock and loyalty stay in step with the order.
    """

    list_display = (
        "order_number",
        "status",
        "total_amount",
        "payment_method",
        "customer",
        "loyalty_points_used",
        "loyalty_points_earned",
        "created_at",
    )
    list_filter = ("status", "payment_method", "created_at")
    search_fields = (
        "order_number",
        "delivery_first_name",
        "delivery_last_name",
        "delivery_email",
        "delivery_phone",
    )
    inlines = (OrderItemInline, OrderHistoryInline)

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
