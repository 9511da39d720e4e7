"""
Payments app for Paystack integration.

This app handles:
- Paystack transaction initialization and verification
- Webhook authentication and processing

It owns no models: payment state lives on orders.Order and orders.Escrow
and is changed only through OrderLifecycleService.mark_paid.

Usage:
    from payments.services import PaymentService

    checkout = PaymentService.initialize_payment(buyer, product_id)
"""
