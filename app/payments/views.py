"""
Views for the payments API.

URL Structure:
    /api/v1/payments/initialize/              POST
    /api/v1/payments/verify/{reference}/      GET
    /api/v1/payments/webhook/                 POST (see payments.webhooks)

Domain errors propagate to core.exception_handlers; a GatewayError is
answered with 502.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from payments.serializers import (
    InitializePaymentSerializer,
    PaymentCheckoutSerializer,
    PaymentVerificationSerializer,
)
from payments.services import PaymentService


class InitializePaymentView(APIView):
    """
    POST /api/v1/payments/initialize/

    Creates a pending order for the product and opens a Paystack
    transaction for its total.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="initialize_payment",
        summary="Initialize payment",
        request=InitializePaymentSerializer,
        responses={
            201: PaymentCheckoutSerializer,
            404: OpenApiResponse(description="Product not found"),
            409: OpenApiResponse(description="Product unavailable"),
            502: OpenApiResponse(description="Payment gateway error"),
        },
        tags=["Payments"],
    )
    def post(self, request):
        serializer = InitializePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        checkout = PaymentService.initialize_payment(
            buyer=request.user,
            product_id=serializer.validated_data["product_id"],
            callback_url=serializer.validated_data.get("callback_url") or None,
        )
        return Response(
            PaymentCheckoutSerializer(checkout).data,
            status=status.HTTP_201_CREATED,
        )


class VerifyPaymentView(APIView):
    """
    GET /api/v1/payments/verify/{reference}/

    Safe to poll: repeated calls after success are no-ops.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="verify_payment",
        summary="Verify payment",
        responses={
            200: PaymentVerificationSerializer,
            403: OpenApiResponse(description="Not a participant"),
            404: OpenApiResponse(description="Unknown reference"),
            409: OpenApiResponse(description="Order was cancelled"),
            502: OpenApiResponse(description="Payment gateway error"),
        },
        tags=["Payments"],
    )
    def get(self, request, reference):
        verification = PaymentService.verify_payment(reference, user=request.user)
        return Response(PaymentVerificationSerializer(verification).data)
