"""
Serializers for the orders API.

Serializer Hierarchy:
    EscrowSerializer: Read-only escrow snapshot
    OrderSerializer: Order with product summary, totals and escrow
    OrderCreateSerializer: Place an order for a product
    OrderStatusUpdateSerializer: Seller advance request

Design Decisions:
    - Read and write serializers are separate
    - Write serializers only validate shape; lifecycle rules live in
      OrderLifecycleService
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from orders.models import Escrow, Order
from orders.states import OrderStatus


class EscrowSerializer(serializers.ModelSerializer):
    class Meta:
        model = Escrow
        fields = [
            "id",
            "amount",
            "currency",
            "status",
            "released_at",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Full order representation returned by every order endpoint."""

    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    buyer_id = serializers.IntegerField(read_only=True)
    seller_id = serializers.IntegerField(read_only=True)
    total_amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        read_only=True,
    )
    escrow = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "reference",
            "product_id",
            "product_name",
            "buyer_id",
            "seller_id",
            "price",
            "delivery_fee",
            "total_amount",
            "status",
            "satisfied",
            "paid_at",
            "received_at",
            "completed_at",
            "cancelled_at",
            "escrow",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    @extend_schema_field(EscrowSerializer(allow_null=True))
    def get_escrow(self, obj: Order) -> dict | None:
        try:
            escrow = obj.escrow
        except Escrow.DoesNotExist:
            return None
        return EscrowSerializer(escrow).data


class OrderCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()


class OrderStatusUpdateSerializer(serializers.Serializer):
    """
    Seller advance request.

    Any known status is accepted here; whether the move is allowed is
    decided by the lifecycle service (409 for targets other than
    processing or shipped).
    """

    status = serializers.ChoiceField(choices=OrderStatus.choices)
