"""
State enums for order and escrow models.

These are Django TextChoices used as django-fsm field choices.

State Machines Overview:

Order States:
    pending → paid → processing → shipped → delivered → completed
    paid → shipped (seller may skip processing)
    pending → cancelled

Escrow States:
    held → released
"""

from django.db import models


class OrderStatus(models.TextChoices):
    """
    States for the Order lifecycle.

    Terminal states: COMPLETED, CANCELLED

    State Flow:
        PENDING → PAID            (gateway verified the charge)
        PAID → PROCESSING         (seller)
        PAID/PROCESSING → SHIPPED (seller)
        SHIPPED → DELIVERED       (buyer confirms receipt)
        DELIVERED → COMPLETED     (buyer satisfied, or auto-release)

    Cancellation Flow:
        PENDING → CANCELLED       (unpaid past the payment window)
    """

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class EscrowStatus(models.TextChoices):
    """
    States for the Escrow lifecycle.

    RELEASED is terminal; an escrow never returns to HELD.
    """

    HELD = "held", "Held"
    RELEASED = "released", "Released"


# Orders whose payment has been verified. An Escrow row exists for each.
PAID_OR_LATER = frozenset(
    {
        OrderStatus.PAID,
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.COMPLETED,
    }
)

TERMINAL_STATES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

# Targets a seller may request through advance()
SELLER_ADVANCE_TARGETS = frozenset({OrderStatus.PROCESSING, OrderStatus.SHIPPED})
