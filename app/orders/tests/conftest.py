"""
Pytest fixtures for order tests.

Usage:
    def test_confirm_received(shipped_order, notifications):
        OrderLifecycleService.confirm_received(shipped_order.id, shipped_order.buyer)
        notifications.notify_order.assert_called_once()
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory
from catalog.tests.factories import ProductFactory
from orders.states import OrderStatus
from orders.tests.factories import OrderFactory, delivered_order, paid_order


# =============================================================================
# Users and Products
# =============================================================================


@pytest.fixture
def seller(db):
    return UserFactory()


@pytest.fixture
def buyer(db):
    return UserFactory()


@pytest.fixture
def staff_user(db):
    return UserFactory(is_staff=True)


@pytest.fixture
def product(db, seller):
    """Single-unit product priced 1000 with a 200 delivery fee."""
    return ProductFactory(seller=seller)


# =============================================================================
# Orders in each state
# =============================================================================


@pytest.fixture
def pending_order(db, product, buyer):
    return OrderFactory(product=product, buyer=buyer)


@pytest.fixture
def paid(db, product, buyer):
    return paid_order(product=product, buyer=buyer)


@pytest.fixture
def shipped_order(db, product, buyer):
    return paid_order(product=product, buyer=buyer, status=OrderStatus.SHIPPED)


@pytest.fixture
def delivered(db, product, buyer):
    return delivered_order(product=product, buyer=buyer)


# =============================================================================
# Notifications
# =============================================================================


@pytest.fixture
def notifications():
    """
    Replace the notification sink with mocks.

    Callbacks are scheduled with on_commit; combine with
    django_capture_on_commit_callbacks(execute=True) to run them.
    """
    with (
        patch("orders.services.NotificationService.notify_order") as notify_order,
        patch("orders.services.NotificationService.notify_admins") as notify_admins,
    ):
        notify_order.return_value = True
        notify_admins.return_value = True
        yield SimpleNamespace(
            notify_order=notify_order,
            notify_admins=notify_admins,
        )


# =============================================================================
# API clients
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def buyer_client(buyer):
    client = APIClient()
    client.force_authenticate(user=buyer)
    return client


@pytest.fixture
def seller_client(seller):
    client = APIClient()
    client.force_authenticate(user=seller)
    return client


@pytest.fixture
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


# =============================================================================
# Redis
# =============================================================================


@pytest.fixture
def mock_redis():
    """
    Mock the Redis connection behind SweepLock.

    Defaults to a free lock: set succeeds and the release script deletes.
    """
    with patch("orders.locks.get_redis_connection") as mock_get_conn:
        redis_instance = MagicMock()
        redis_instance.set.return_value = True
        redis_instance.eval.return_value = 1
        mock_get_conn.return_value = redis_instance
        yield redis_instance
