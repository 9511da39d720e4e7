"""
Django admin configuration for catalog models.
"""

from django.contrib import admin

from catalog.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "seller",
        "product_type",
        "price",
        "delivery_fee",
        "quantity",
        "active",
        "out_of_stock",
    )
    list_filter = ("product_type", "active", "out_of_stock")
    search_fields = ("name", "seller__email")
    raw_id_fields = ("seller",)
    readonly_fields = ("id", "created_at", "updated_at")
