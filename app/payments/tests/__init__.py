"""
Tests for payments app.

This package contains test modules for:
- test_adapters.py: PaystackAdapter requests, errors and signatures
- test_services.py: PaymentService initialize/verify/webhook
- test_webhooks.py: Webhook endpoint responses
- test_views.py: API endpoint tests

Usage:
    pytest payments/tests/
    pytest payments/tests/test_services.py
"""
