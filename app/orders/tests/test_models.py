"""
Tests for Order and Escrow models.

Covers the FSM transition table, protected status fields, the one-escrow
constraint and the celery-beat schedules installed by migration.
"""

from decimal import Decimal

import pytest
from django.db import IntegrityError
from django_celery_beat.models import PeriodicTask
from django_fsm import TransitionNotAllowed, can_proceed

from orders.models import Escrow
from orders.states import TERMINAL_STATES, EscrowStatus, OrderStatus
from orders.tests.factories import EscrowFactory, OrderFactory, paid_order


@pytest.mark.django_db
class TestOrderModel:
    def test_total_amount(self):
        order = OrderFactory(price=Decimal("1000.00"), delivery_fee=Decimal("200.00"))

        assert order.total_amount == Decimal("1200.00")

    def test_references_are_unique(self):
        first = OrderFactory()
        second = OrderFactory()

        assert first.reference != second.reference

    def test_status_cannot_be_assigned(self):
        order = OrderFactory()

        with pytest.raises(AttributeError):
            order.status = OrderStatus.PAID

    @pytest.mark.parametrize(
        "status,allowed",
        [
            (OrderStatus.PENDING, {"mark_paid", "cancel"}),
            (OrderStatus.PAID, {"start_processing", "ship"}),
            (OrderStatus.PROCESSING, {"ship"}),
            (OrderStatus.SHIPPED, {"mark_delivered"}),
            (OrderStatus.DELIVERED, {"complete"}),
            (OrderStatus.COMPLETED, set()),
            (OrderStatus.CANCELLED, set()),
        ],
    )
    def test_transition_table(self, status, allowed):
        order = OrderFactory(status=status)
        transitions = {
            "mark_paid",
            "start_processing",
            "ship",
            "mark_delivered",
            "complete",
            "cancel",
        }

        permitted = {name for name in transitions if can_proceed(getattr(order, name))}

        assert permitted == allowed

    @pytest.mark.parametrize("status", sorted(TERMINAL_STATES))
    def test_terminal_states_have_no_exits(self, status):
        order = OrderFactory(status=status)
        names = [t.name for t in order.get_available_status_transitions()]

        assert names == []

    def test_paid_order_cannot_be_cancelled(self):
        order = OrderFactory(status=OrderStatus.PAID)

        with pytest.raises(TransitionNotAllowed):
            order.cancel()

    def test_complete_sets_satisfied(self):
        order = OrderFactory(status=OrderStatus.DELIVERED)

        order.complete()

        assert order.status == OrderStatus.COMPLETED
        assert order.satisfied is True
        assert order.completed_at is not None


@pytest.mark.django_db
class TestEscrowModel:
    def test_one_escrow_per_order(self):
        order = paid_order()

        with pytest.raises(IntegrityError):
            EscrowFactory(order=order)

    def test_release(self):
        escrow = EscrowFactory()

        escrow.release()
        escrow.save()

        stored = Escrow.objects.get(pk=escrow.pk)
        assert stored.status == EscrowStatus.RELEASED
        assert stored.released_at is not None

    def test_released_escrow_cannot_release_again(self):
        escrow = EscrowFactory(status=EscrowStatus.RELEASED)

        with pytest.raises(TransitionNotAllowed):
            escrow.release()


@pytest.mark.django_db
class TestReconciliationSchedules:
    def test_sweeps_are_scheduled(self):
        tasks = dict(PeriodicTask.objects.values_list("task", "interval__every"))

        assert tasks["orders.tasks.auto_release_delivered_orders"] == 10
        assert tasks["orders.tasks.auto_cancel_stale_orders"] == 30
