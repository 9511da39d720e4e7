"""
DRF serializers for the payments API.

Serializer Hierarchy:
    InitializePaymentSerializer: Checkout request
    PaymentCheckoutSerializer: Hosted checkout details
    PaymentVerificationSerializer: Verification outcome with the order
"""

from __future__ import annotations

from rest_framework import serializers

from orders.serializers import OrderSerializer


class InitializePaymentSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    callback_url = serializers.URLField(required=False, allow_blank=True)


class PaymentCheckoutSerializer(serializers.Serializer):
    """
    Returned after initialize; the client redirects to authorization_url.
    """

    authorization_url = serializers.URLField()
    access_code = serializers.CharField()
    reference = serializers.CharField()
    order_id = serializers.UUIDField(source="order.pk")


class PaymentVerificationSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    status = serializers.CharField()
    order = OrderSerializer()
