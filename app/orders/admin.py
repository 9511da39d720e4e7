"""
Django admin configuration for order models.

Status columns are read-only here: every state change must go through
OrderLifecycleService so escrow and notifications stay consistent.
"""

from django.contrib import admin

from orders.models import Escrow, Order


class EscrowInline(admin.StackedInline):
    model = Escrow
    can_delete = False
    extra = 0
    readonly_fields = (
        "amount",
        "currency",
        "status",
        "gateway_transaction_id",
        "released_at",
        "created_at",
    )


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "reference",
        "product",
        "buyer",
        "seller",
        "status",
        "price",
        "delivery_fee",
        "created_at",
    )
    list_filter = ("status", "satisfied")
    search_fields = ("reference", "buyer__email", "seller__email")
    raw_id_fields = ("product", "buyer", "seller")
    readonly_fields = (
        "id",
        "reference",
        "status",
        "satisfied",
        "received_at",
        "paid_at",
        "completed_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    )
    inlines = [EscrowInline]


@admin.register(Escrow)
class EscrowAdmin(admin.ModelAdmin):
    list_display = ("order", "amount", "currency", "status", "released_at")
    list_filter = ("status", "currency")
    search_fields = ("order__reference", "gateway_transaction_id")
    raw_id_fields = ("order",)
    readonly_fields = ("id", "status", "released_at", "created_at", "updated_at")
