"""
URL configuration for orders API.

All URLs are prefixed with /api/v1/orders/ in the main URL configuration.
"""

from django.urls import path

from orders.views import (
    AdminOrderListView,
    ConfirmReceivedView,
    ConfirmSatisfiedView,
    OrderDetailView,
    OrderListCreateView,
    OrderStatusView,
)

app_name = "orders"

urlpatterns = [
    path("", OrderListCreateView.as_view(), name="order-list"),
    path("all/", AdminOrderListView.as_view(), name="order-list-all"),
    path("<uuid:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("<uuid:order_id>/status/", OrderStatusView.as_view(), name="order-status"),
    path(
        "<uuid:order_id>/confirm-received/",
        ConfirmReceivedView.as_view(),
        name="order-confirm-received",
    ),
    path(
        "<uuid:order_id>/confirm-satisfied/",
        ConfirmSatisfiedView.as_view(),
        name="order-confirm-satisfied",
    ),
]
