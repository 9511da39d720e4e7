"""
Pytest fixtures for payment tests.

The Paystack HTTP boundary is requests.request inside the adapter module;
paystack_http patches it so no test talks to the network.

Usage:
    def test_verify(paystack_http, paystack_response, pending_order):
        paystack_http.return_value = paystack_response(
            data={"status": "success", "reference": pending_order.reference, "amount": 120000}
        )
"""

import hashlib
import hmac
import json
from unittest.mock import MagicMock, patch

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory
from catalog.tests.factories import ProductFactory
from orders.tests.factories import OrderFactory

TEST_SECRET = "sk_test_secret"


@pytest.fixture
def seller(db):
    return UserFactory()


@pytest.fixture
def buyer(db):
    return UserFactory(email="buyer@example.com")


@pytest.fixture
def product(db, seller):
    return ProductFactory(seller=seller)


@pytest.fixture
def pending_order(db, product, buyer):
    """PENDING order totalling 1200.00 (120000 kobo)."""
    return OrderFactory(product=product, buyer=buyer)


@pytest.fixture
def buyer_client(buyer):
    client = APIClient()
    client.force_authenticate(user=buyer)
    return client


@pytest.fixture
def paystack_http():
    with patch("payments.adapters.paystack_adapter.requests.request") as request:
        yield request


@pytest.fixture
def paystack_response():
    """Build a fake requests.Response carrying a Paystack envelope."""

    def build(data=None, status_code=200, status=True, message="OK"):
        response = MagicMock()
        response.status_code = status_code
        payload = {"status": status, "message": message, "data": data or {}}
        response.content = json.dumps(payload).encode()
        response.json.return_value = payload
        return response

    return build


@pytest.fixture
def verified_charge(paystack_response):
    """Successful verify response for an order."""

    def build(order, amount=None, status="success"):
        return paystack_response(
            data={
                "status": status,
                "reference": order.reference,
                "amount": amount if amount is not None else 120000,
                "gateway_response": "Approved",
                "paid_at": "2026-03-01T12:00:00.000Z",
                "metadata": {"order_id": str(order.pk)},
            }
        )

    return build


@pytest.fixture
def sign():
    """HMAC-SHA512 signature as Paystack computes it."""

    def build(body: bytes, secret: str = TEST_SECRET) -> str:
        return hmac.new(secret.encode(), body, hashlib.sha512).hexdigest()

    return build
