"""
Webhook handling for payment events from Paystack.

Usage:
    # In urls.py
    from payments.webhooks.views import paystack_webhook

    urlpatterns = [
        path("webhook/", paystack_webhook, name="paystack-webhook"),
    ]
"""
