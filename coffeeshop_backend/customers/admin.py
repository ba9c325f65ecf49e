# customers/admin.py

from django.contrib import admin

from customers.models import CustomerProfile


@admin.register(CustomerProfile)
class CustomerProfileAdmin(admin.ModelAdmin):
    """
    Read-only loyalty view. Balances move only through order entry,
    cancellation and deletion.
    """

    list_display = ("user", "phone", "points_balance", "points_used_lifetime", "updated_at")
    search_fields = ("user__email", "user__username", "phone")
    ordering = ("-updated_at",)
    list_select_related = ("user",)
    readonly_fields = ("user", "points_balance", "points_used_lifetime", "created_at", "updated_at")

    def has_add_permission(self, request):
        return False
