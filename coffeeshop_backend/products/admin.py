# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (menu + counters):

- Product is created once; each serving size is an inline ProductVariant.
- Variant counters are editable here for restocking. Order entry and
  cancellation never go through the admin; they use
  products.services.inventory (conditional UPDATEs).
- A product cannot have two rows for the same size (DB constraint).
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Category, Product, ProductVariant
from products.services.classification import is_coffee_type


# =====================================================
# CATEGORY
# =====================================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name",)
    search_fields = ("name",)
    ordering = ("name",)


# =====================================================
# VARIANT INLINE
# =====================================================

class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    max_num = len(ProductVariant.Size.choices)
    fields = ("size", "unit_price", "quantity", "updated_at")
    readonly_fields = ("updated_at",)


# =====================================================
# PRODUCT
# =====================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "category",
        "coffee_type",
        "total_stock_db",
        "low_stock_threshold",
        "is_active",
    )
    list_filter = ("is_active", "category")
    search_fields = ("name", "category__name")
    ordering = ("name",)
    readonly_fields = ("created_at", "updated_at")

    inlines = [ProductVariantInline]

    @admin.display(boolean=True, description="Coffee")
    def coffee_type(self, obj):
        return is_coffee_type(obj)


# =====================================================
# VARIANT (STOCK OVERVIEW)
# =====================================================

@admin.register(ProductVariant)
class ProductVariantAdmin(admin.ModelAdmin):
    list_display = ("product", "size", "unit_price", "quantity", "low_stock")
    list_filter = ("size",)
    search_fields = ("product__name",)
    ordering = ("product__name", "size")
    list_select_related = ("product",)

    @admin.display(boolean=True, description="Low stock")
    def low_stock(self, obj):
        return obj.is_low_stock
