"""
Order and Escrow models for the purchase lifecycle.

Order is the central entity tracking a purchase from creation through
completion or cancellation. Escrow holds the buyer's verified payment until
the buyer is satisfied or the auto-release window elapses.

Both models use django-fsm with ConcurrentTransitionMixin: a save() after a
transition only updates the row if the status column still holds the value
read at load time, otherwise ConcurrentTransition is raised. Together with
select_for_update() in the service layer this gives the read-then-
conditional-write discipline every lifecycle step relies on.

Usage:
    from orders.models import Order, Escrow
    from orders.states import OrderStatus

    order = Order.objects.create(
        product=product,
        buyer=buyer,
        seller=product.seller,
        price=product.price,
        delivery_fee=product.delivery_fee,
    )

    order.mark_paid()  # pending -> paid
    order.save()

Note:
    status fields are protected; use Order.objects.get(pk=...) to reload
    instead of refresh_from_db().
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from django_fsm import ConcurrentTransitionMixin, FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from orders.states import EscrowStatus, OrderStatus


def generate_reference() -> str:
    """Fresh payment reference, shared with the gateway transaction."""
    return str(uuid.uuid4())


class Order(ConcurrentTransitionMixin, UUIDPrimaryKeyMixin, BaseModel):
    """
    A buyer's purchase of one product from one seller.

    Orders are never deleted; cancellation is a status value.

    State Flow:
        PENDING -> PAID -> PROCESSING -> SHIPPED -> DELIVERED -> COMPLETED
        PENDING -> CANCELLED

    Fields:
        reference: Unique idempotency/correlation key for the gateway
        product: Product being bought
        buyer: User paying for the order
        seller: User receiving the escrowed funds
        price: Product price copied at creation (major units)
        delivery_fee: Delivery fee copied at creation (major units)
        status: Lifecycle state (managed by FSM)
        received_at: When the buyer confirmed receipt; starts auto-release
        satisfied: Whether the order was completed (by buyer or timeout)
    """

    reference = models.CharField(
        max_length=100,
        unique=True,
        default=generate_reference,
        editable=False,
        help_text="Payment reference shared with the gateway transaction",
    )

    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="purchases",
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sales",
    )

    # ==========================================================================
    # Amounts
    # ==========================================================================

    price = models.DecimalField(max_digits=12, decimal_places=2)
    delivery_fee = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=OrderStatus.PENDING,
        choices=OrderStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the order (managed by FSM)",
    )

    received_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the buyer confirmed receipt",
    )
    satisfied = models.BooleanField(default=False)

    paid_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Order"
        verbose_name_plural = "Orders"
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created"),
            models.Index(
                fields=["status", "satisfied", "received_at"],
                name="order_status_received",
            ),
            models.Index(fields=["product", "status"], name="order_product_status"),
        ]

    def __str__(self) -> str:
        return f"Order({self.id}, {self.status}, {self.total_amount})"

    @property
    def total_amount(self) -> Decimal:
        """Amount the buyer pays and the escrow holds."""
        return self.price + self.delivery_fee

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(field=status, source=OrderStatus.PENDING, target=OrderStatus.PAID)
    def mark_paid(self, paid_at=None):
        """
        Record a verified payment.

        Transition: PENDING -> PAID

        The caller opens the Escrow in the same transaction.
        """
        self.paid_at = paid_at or timezone.now()

    @transition(
        field=status,
        source=OrderStatus.PAID,
        target=OrderStatus.PROCESSING,
    )
    def start_processing(self):
        """Transition: PAID -> PROCESSING"""

    @transition(
        field=status,
        source=[OrderStatus.PAID, OrderStatus.PROCESSING],
        target=OrderStatus.SHIPPED,
    )
    def ship(self):
        """Transition: PAID/PROCESSING -> SHIPPED"""

    @transition(
        field=status,
        source=OrderStatus.SHIPPED,
        target=OrderStatus.DELIVERED,
    )
    def mark_delivered(self, received_at=None):
        """
        Buyer confirmed receipt.

        Transition: SHIPPED -> DELIVERED

        received_at starts the auto-release window.
        """
        self.received_at = received_at or timezone.now()

    @transition(
        field=status,
        source=OrderStatus.DELIVERED,
        target=OrderStatus.COMPLETED,
    )
    def complete(self, completed_at=None):
        """
        Close the order, by buyer satisfaction or auto-release timeout.

        Transition: DELIVERED -> COMPLETED
        """
        self.satisfied = True
        self.completed_at = completed_at or timezone.now()

    @transition(
        field=status,
        source=OrderStatus.PENDING,
        target=OrderStatus.CANCELLED,
    )
    def cancel(self, cancelled_at=None):
        """
        Give up on an unpaid order.

        Transition: PENDING -> CANCELLED

        Only unpaid orders can be cancelled; once PAID an order can only
        progress.
        """
        self.cancelled_at = cancelled_at or timezone.now()


class Escrow(ConcurrentTransitionMixin, UUIDPrimaryKeyMixin, BaseModel):
    """
    Funds held for one paid order until completion.

    Created exactly once, when the order becomes PAID, and released
    exactly once, when the order becomes COMPLETED.

    Fields:
        order: The paid order (1:1)
        amount: order.price + order.delivery_fee at creation (major units)
        currency: ISO 4217 code
        status: HELD or RELEASED (managed by FSM)
        gateway_transaction_id: Gateway reference that moved the money
        released_at: When the funds were released to the seller
    """

    order = models.OneToOneField(
        Order,
        on_delete=models.PROTECT,
        related_name="escrow",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="NGN")

    status = FSMField(
        default=EscrowStatus.HELD,
        choices=EscrowStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the escrow (managed by FSM)",
    )

    gateway_transaction_id = models.CharField(max_length=255)

    released_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Escrow"
        verbose_name_plural = "Escrows"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="escrow_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Escrow({self.id}, {self.status}, {self.amount} {self.currency})"

    @transition(
        field=status,
        source=EscrowStatus.HELD,
        target=EscrowStatus.RELEASED,
    )
    def release(self, released_at=None):
        """
        Release held funds to the seller.

        Transition: HELD -> RELEASED (terminal)
        """
        self.released_at = released_at or timezone.now()
