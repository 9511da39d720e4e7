"""
Celery tasks for order reconciliation.

Both sweeps are scheduled by celery-beat (see migration
0002_add_reconciliation_schedules) and are safe to run concurrently with
user actions: candidates are selected without locks and every order is
then re-checked under its row lock by OrderLifecycleService.

Usage:
    from orders.tasks import auto_release_delivered_orders

    # Run a sweep immediately
    auto_release_delivered_orders.delay()
"""

from __future__ import annotations

import logging
from datetime import datetime

from celery import shared_task
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from orders.exceptions import LockAcquisitionError
from orders.locks import SweepLock
from orders.models import Order
from orders.services import (
    OrderLifecycleService,
    auto_release_window,
    pending_payment_window,
)
from orders.states import OrderStatus

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

BATCH_SIZE = 500
AUTO_RELEASE_LOCK_KEY = "orders:auto_release"
AUTO_CANCEL_LOCK_KEY = "orders:auto_cancel"
SWEEP_LOCK_TTL_SECONDS = 600


def _resolve_now(now: datetime | str | None) -> datetime:
    """Accept a datetime, an ISO string (from the broker) or None."""
    if now is None:
        return timezone.now()
    if isinstance(now, str):
        parsed = parse_datetime(now)
        if parsed is None:
            raise ValueError(f"Invalid datetime: {now!r}")
        now = parsed
    if timezone.is_naive(now):
        now = timezone.make_aware(now)
    return now


def _sweep(name: str, lock_key: str, order_ids, apply) -> dict:
    """
    Apply one engine operation to each candidate, isolating failures.

    Returns:
        Summary dict: selected, applied, skipped, failed
    """
    stats = {"status": "completed", "selected": 0, "applied": 0, "skipped": 0, "failed": 0}

    try:
        with SweepLock(lock_key, ttl=SWEEP_LOCK_TTL_SECONDS):
            for order_id in order_ids:
                stats["selected"] += 1
                try:
                    result = apply(order_id)
                except Exception:
                    stats["failed"] += 1
                    logger.exception(
                        f"{name}: failed to process order",
                        extra={"order_id": str(order_id)},
                    )
                    continue

                if result.applied:
                    stats["applied"] += 1
                else:
                    stats["skipped"] += 1
    except LockAcquisitionError:
        logger.info(f"{name}: another run holds the lock, skipping")
        return {"status": "already_running"}

    logger.info(
        f"{name}: processed {stats['selected']} orders",
        extra=stats,
    )
    return stats


@shared_task(bind=True)
def auto_release_delivered_orders(self, now: datetime | str | None = None) -> dict:
    """
    Complete delivered orders the buyer never confirmed.

    Selects DELIVERED, unsatisfied orders received at or before
    now - ORDER_AUTO_RELEASE_AFTER_MINUTES, oldest first, and runs
    OrderLifecycleService.auto_release on each. Escrow is released and
    AUTO_SATISFIED is announced for every order actually completed.

    Returns:
        Dict with selected/applied/skipped/failed counts, or
        {"status": "already_running"} if another run holds the lock
    """
    now = _resolve_now(now)
    cutoff = now - auto_release_window()

    order_ids = list(
        Order.objects.filter(
            status=OrderStatus.DELIVERED,
            satisfied=False,
            received_at__isnull=False,
            received_at__lte=cutoff,
        )
        .order_by("received_at")
        .values_list("id", flat=True)[:BATCH_SIZE]
    )

    return _sweep(
        "auto_release_delivered_orders",
        AUTO_RELEASE_LOCK_KEY,
        order_ids,
        lambda order_id: OrderLifecycleService.auto_release(order_id, now=now),
    )


@shared_task(bind=True)
def auto_cancel_stale_orders(self, now: datetime | str | None = None) -> dict:
    """
    Cancel orders still PENDING 12 hours after creation.

    Orders that got paid between selection and processing are skipped by
    the engine's re-check.

    Returns:
        Dict with selected/applied/skipped/failed counts, or
        {"status": "already_running"} if another run holds the lock
    """
    now = _resolve_now(now)
    cutoff = now - pending_payment_window()

    order_ids = list(
        Order.objects.filter(
            status=OrderStatus.PENDING,
            created_at__lte=cutoff,
        )
        .order_by("created_at")
        .values_list("id", flat=True)[:BATCH_SIZE]
    )

    return _sweep(
        "auto_cancel_stale_orders",
        AUTO_CANCEL_LOCK_KEY,
        order_ids,
        lambda order_id: OrderLifecycleService.auto_cancel(order_id, now=now),
    )
