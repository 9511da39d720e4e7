"""
Tests for the reconciliation sweeps in orders.tasks.

Tasks are called directly (synchronously); time is pinned either with an
explicit now argument or with freezegun.
"""

from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from unittest.mock import patch

import pytest
import redis
from freezegun import freeze_time

from orders.events import OrderEventType
from orders.models import Escrow, Order
from orders.services import OrderLifecycleService
from orders.states import EscrowStatus, OrderStatus
from orders.tasks import (
    AUTO_CANCEL_LOCK_KEY,
    AUTO_RELEASE_LOCK_KEY,
    auto_cancel_stale_orders,
    auto_release_delivered_orders,
)
from orders.tests.factories import OrderFactory, delivered_order, paid_order

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=dt_timezone.utc)


@pytest.fixture(autouse=True)
def sweep_redis(mock_redis):
    return mock_redis


def status_of(order):
    return Order.objects.get(pk=order.pk).status


def pending_created_at(created_at, **kwargs):
    order = OrderFactory(**kwargs)
    Order.objects.filter(pk=order.pk).update(created_at=created_at)
    return order


class TestAutoReleaseSweep:
    def test_releases_orders_past_the_window(self, db):
        due = delivered_order(received_at=NOW - timedelta(minutes=4320))
        early = delivered_order(received_at=NOW - timedelta(minutes=4319))

        result = auto_release_delivered_orders(now=NOW)

        assert result == {
            "status": "completed",
            "selected": 1,
            "applied": 1,
            "skipped": 0,
            "failed": 0,
        }
        assert status_of(due) == OrderStatus.COMPLETED
        assert status_of(early) == OrderStatus.DELIVERED
        assert Escrow.objects.get(order=due).status == EscrowStatus.RELEASED
        assert Escrow.objects.get(order=early).status == EscrowStatus.HELD

    def test_ignores_other_states(self, db):
        old = NOW - timedelta(days=10)
        shipped = paid_order(status=OrderStatus.SHIPPED)
        completed = paid_order(
            status=OrderStatus.COMPLETED,
            received_at=old,
            satisfied=True,
        )

        result = auto_release_delivered_orders(now=NOW)

        assert result["selected"] == 0
        assert status_of(shipped) == OrderStatus.SHIPPED
        assert status_of(completed) == OrderStatus.COMPLETED

    def test_announces_auto_satisfied(
        self, db, notifications, django_capture_on_commit_callbacks
    ):
        order = delivered_order(received_at=NOW - timedelta(days=4))

        with django_capture_on_commit_callbacks(execute=True):
            auto_release_delivered_orders(now=NOW)

        notifications.notify_order.assert_called_once()
        order_id, event = notifications.notify_order.call_args.args
        assert order_id == order.pk
        assert event["type"] == OrderEventType.AUTO_SATISFIED
        assert event["status"] == OrderStatus.COMPLETED

    def test_accepts_iso_timestamp(self, db):
        order = delivered_order(received_at=NOW - timedelta(days=4))

        result = auto_release_delivered_orders(now=NOW.isoformat())

        assert result["applied"] == 1
        assert status_of(order) == OrderStatus.COMPLETED

    def test_defaults_to_current_time(self, db):
        with freeze_time(NOW):
            order = delivered_order(received_at=NOW - timedelta(days=3, minutes=1))
            result = auto_release_delivered_orders()

        assert result["applied"] == 1
        assert status_of(order) == OrderStatus.COMPLETED

    def test_second_run_is_a_noop(self, db):
        order = delivered_order(received_at=NOW - timedelta(days=4))

        auto_release_delivered_orders(now=NOW)
        result = auto_release_delivered_orders(now=NOW)

        assert result["selected"] == 0
        assert status_of(order) == OrderStatus.COMPLETED

    def test_failure_is_isolated_per_order(self, db):
        broken = delivered_order(received_at=NOW - timedelta(days=5))
        healthy = delivered_order(received_at=NOW - timedelta(days=4))
        real_auto_release = OrderLifecycleService.auto_release

        def flaky(order_id, now=None):
            if order_id == broken.pk:
                raise RuntimeError("database hiccup")
            return real_auto_release(order_id, now=now)

        with patch.object(OrderLifecycleService, "auto_release", side_effect=flaky):
            result = auto_release_delivered_orders(now=NOW)

        assert result["selected"] == 2
        assert result["applied"] == 1
        assert result["failed"] == 1
        assert status_of(broken) == OrderStatus.DELIVERED
        assert status_of(healthy) == OrderStatus.COMPLETED

    def test_skips_when_another_run_holds_lock(self, db, sweep_redis):
        order = delivered_order(received_at=NOW - timedelta(days=4))
        sweep_redis.set.return_value = None

        result = auto_release_delivered_orders(now=NOW)

        assert result == {"status": "already_running"}
        assert status_of(order) == OrderStatus.DELIVERED

    def test_releases_lock_after_run(self, db, sweep_redis):
        auto_release_delivered_orders(now=NOW)

        sweep_redis.set.assert_called_once()
        assert sweep_redis.set.call_args.args[0] == f"lock:{AUTO_RELEASE_LOCK_KEY}"
        sweep_redis.eval.assert_called_once()
        assert sweep_redis.eval.call_args.args[2] == f"lock:{AUTO_RELEASE_LOCK_KEY}"

    def test_redis_outage_fails_the_run(self, db, sweep_redis):
        sweep_redis.set.side_effect = redis.ConnectionError("redis down")

        with pytest.raises(redis.ConnectionError):
            auto_release_delivered_orders(now=NOW)


class TestAutoCancelSweep:
    def test_cancels_pending_orders_at_twelve_hours(self, db):
        stale = pending_created_at(NOW - timedelta(minutes=720))
        fresh = pending_created_at(NOW - timedelta(minutes=719))

        result = auto_cancel_stale_orders(now=NOW)

        assert result["selected"] == 1
        assert result["applied"] == 1
        assert status_of(stale) == OrderStatus.CANCELLED
        assert status_of(fresh) == OrderStatus.PENDING

    def test_never_touches_paid_orders(self, db):
        order = paid_order()
        Order.objects.filter(pk=order.pk).update(created_at=NOW - timedelta(days=2))

        result = auto_cancel_stale_orders(now=NOW)

        assert result["selected"] == 0
        assert status_of(order) == OrderStatus.PAID

    def test_order_paid_after_selection_is_skipped(self, db):
        order = pending_created_at(NOW - timedelta(hours=13))
        real_auto_cancel = OrderLifecycleService.auto_cancel

        def pay_first(order_id, now=None):
            OrderLifecycleService.mark_paid(order.reference)
            return real_auto_cancel(order_id, now=now)

        with patch.object(OrderLifecycleService, "auto_cancel", side_effect=pay_first):
            result = auto_cancel_stale_orders(now=NOW)

        assert result["skipped"] == 1
        assert result["applied"] == 0
        assert status_of(order) == OrderStatus.PAID

    def test_announces_cancellation(
        self, db, notifications, django_capture_on_commit_callbacks
    ):
        pending_created_at(NOW - timedelta(hours=13))

        with django_capture_on_commit_callbacks(execute=True):
            auto_cancel_stale_orders(now=NOW)

        event = notifications.notify_order.call_args.args[1]
        assert event["type"] == OrderEventType.ORDER_CANCELLED
        assert event["message"] == "Order cancelled due to payment timeout (12 hours)"

    def test_skips_when_another_run_holds_lock(self, db, sweep_redis):
        order = pending_created_at(NOW - timedelta(hours=13))
        sweep_redis.set.return_value = None

        result = auto_cancel_stale_orders(now=NOW)

        assert result == {"status": "already_running"}
        assert status_of(order) == OrderStatus.PENDING
        assert sweep_redis.set.call_args.args[0] == f"lock:{AUTO_CANCEL_LOCK_KEY}"
