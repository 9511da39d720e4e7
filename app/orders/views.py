"""
Views for the orders API.

URL Structure:
    /api/v1/orders/                           GET (own), POST (create)
    /api/v1/orders/all/                       GET (staff)
    /api/v1/orders/{id}/                      GET
    /api/v1/orders/{id}/status/               PATCH (seller advance)
    /api/v1/orders/{id}/confirm-received/     POST (buyer)
    /api/v1/orders/{id}/confirm-satisfied/    POST (buyer)

Design Decisions:
    - Views are thin: validation via serializers, rules in
      OrderLifecycleService
    - Domain errors propagate and are rendered by
      core.exception_handlers (404/403/409)
    - Idempotent repeats answer 200 with the current order
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.pagination import OrderPagination
from orders.serializers import (
    OrderCreateSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
)
from orders.services import OrderLifecycleService


class OrderListCreateView(generics.ListAPIView):
    """
    GET /api/v1/orders/
        Orders where the current user is the buyer or the seller.

    POST /api/v1/orders/
        Place a PENDING order for a product.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer
    pagination_class = OrderPagination

    def get_queryset(self):
        return OrderLifecycleService.list_for_user(self.request.user)

    @extend_schema(
        operation_id="list_my_orders",
        summary="List my orders",
        tags=["Orders"],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        operation_id="create_order",
        summary="Create order",
        description=(
            "Create a pending order for a product. Price and delivery fee are "
            "copied from the product at creation time. Payment is started "
            "separately via /payments/initialize/."
        ),
        request=OrderCreateSerializer,
        responses={
            201: OrderSerializer,
            404: OpenApiResponse(description="Product not found"),
            409: OpenApiResponse(description="Product unavailable or own product"),
        },
        tags=["Orders"],
    )
    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderLifecycleService.create_order(
            buyer=request.user,
            product_id=serializer.validated_data["product_id"],
        )
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


@extend_schema(
    operation_id="list_all_orders",
    summary="List all orders (staff)",
    tags=["Orders - Admin"],
)
class AdminOrderListView(generics.ListAPIView):
    permission_classes = [IsAdminUser]
    serializer_class = OrderSerializer
    pagination_class = OrderPagination

    def get_queryset(self):
        return OrderLifecycleService.list_all()


class OrderDetailView(APIView):
    """GET /api/v1/orders/{id}/ for the buyer, the seller or staff."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_order",
        summary="Get order",
        responses={
            200: OrderSerializer,
            403: OpenApiResponse(description="Not a participant"),
            404: OpenApiResponse(description="Order not found"),
        },
        tags=["Orders"],
    )
    def get(self, request, order_id):
        order = OrderLifecycleService.get_order_for_user(order_id, request.user)
        return Response(OrderSerializer(order).data)


class OrderStatusView(APIView):
    """PATCH /api/v1/orders/{id}/status/: seller moves to processing/shipped."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="advance_order",
        summary="Advance order (seller)",
        description=(
            "Move a paid order to processing or shipped. Repeating the "
            "current status is a no-op."
        ),
        request=OrderStatusUpdateSerializer,
        responses={
            200: OrderSerializer,
            403: OpenApiResponse(description="Not the seller"),
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Transition not allowed"),
        },
        tags=["Orders"],
    )
    def patch(self, request, order_id):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = OrderLifecycleService.advance(
            order_id,
            actor=request.user,
            target=serializer.validated_data["status"],
        )
        return Response(OrderSerializer(result.order).data)


class ConfirmReceivedView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="confirm_order_received",
        summary="Confirm receipt (buyer)",
        request=None,
        responses={
            200: OrderSerializer,
            403: OpenApiResponse(description="Not the buyer"),
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Order not shipped"),
        },
        tags=["Orders"],
    )
    def post(self, request, order_id):
        result = OrderLifecycleService.confirm_received(order_id, actor=request.user)
        return Response(OrderSerializer(result.order).data)


class ConfirmSatisfiedView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="confirm_order_satisfied",
        summary="Confirm satisfaction (buyer)",
        description="Complete a delivered order and release its escrow.",
        request=None,
        responses={
            200: OrderSerializer,
            403: OpenApiResponse(description="Not the buyer"),
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Order not delivered"),
        },
        tags=["Orders"],
    )
    def post(self, request, order_id):
        result = OrderLifecycleService.confirm_satisfied(order_id, actor=request.user)
        return Response(OrderSerializer(result.order).data)
