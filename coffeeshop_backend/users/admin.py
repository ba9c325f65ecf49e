# users/admin.py

"""
ACCOUNTS ADMIN

- Staff accounts (admin, manager, barista, cashier) are created here.
- Customer accounts show their loyalty profile read-only; balances are
  only moved by the order engine.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from customers.models import CustomerProfile
from users.models import User


class CustomerProfileInline(admin.StackedInline):
    model = CustomerProfile
    can_delete = False
    extra = 0
    max_num = 1
    fields = ("phone", "points_balance", "points_used_lifetime", "updated_at")
    readonly_fields = ("points_balance", "points_used_lifetime", "updated_at")


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    ordering = ("-created_at",)
    list_display = ("email", "role", "loyalty_points", "is_active", "created_at")
    list_filter = ("role", "is_active")
    search_fields = ("email", "username", "first_name", "last_name", "customer_profile__phone")
    list_select_related = ("customer_profile",)
    readonly_fields = ("created_at", "updated_at", "last_login")
    inlines = (CustomerProfileInline,)

    fieldsets = (
        ("Account", {"fields": ("email", "username", "password", "role")}),
        ("Name", {"fields": ("first_name", "last_name")}),
        ("Access", {"fields": ("is_active", "is_staff", "is_superuser", "groups")}),
        ("Timestamps", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "role", "password1", "password2"),
            },
        ),
    )

    @admin.display(description="Points")
    def loyalty_points(self, obj):
        profile = getattr(obj, "customer_profile", None)
        return profile.points_balance if profile else "-"
