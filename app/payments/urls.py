"""
URL configuration for payments API.

All URLs are prefixed with /api/v1/payments/ in the main URL configuration.
"""

from django.urls import path

from payments.views import InitializePaymentView, VerifyPaymentView
from payments.webhooks.views import paystack_webhook

app_name = "payments"

urlpatterns = [
    path("initialize/", InitializePaymentView.as_view(), name="initialize"),
    path("verify/<str:reference>/", VerifyPaymentView.as_view(), name="verify"),
    path("webhook/", paystack_webhook, name="paystack-webhook"),
]
