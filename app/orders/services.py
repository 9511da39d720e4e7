"""
Order lifecycle service: the order/escrow state machine.

Every state change runs as one atomic unit keyed by the order's id (or its
payment reference while verifying a payment):

1. select_for_update() the order row
2. decide from the status just read (idempotent no-op, reject, or apply)
3. save through ConcurrentTransitionMixin, i.e. UPDATE ... WHERE status = <read>

If a concurrent writer got there first the conditional write raises
ConcurrentTransition, the unit rolls back and the order is re-read. A loser
that finds the order already in the requested state returns success with
applied=False and no side effects, so escrow is released at most once and
each transition is announced at most once.

Triggers:
    - Buyer/seller API calls (create, advance, confirm_received, confirm_satisfied)
    - Payment verification and webhook (mark_paid)
    - Reconciliation sweeps (auto_release, auto_cancel)

Usage:
    from orders.services import OrderLifecycleService

    order = OrderLifecycleService.create_order(buyer, product_id)
    result = OrderLifecycleService.mark_paid(order.reference)
    if result.applied:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q
from django.utils import timezone
from django_fsm import ConcurrentTransition, can_proceed

from catalog.services import CatalogService
from core.exceptions import NotFoundError
from core.services import BaseService
from notifications.services import NotificationService
from orders.events import OrderEventType, build_order_event
from orders.exceptions import (
    ForbiddenTransitionError,
    InvalidTransitionError,
    ProductUnavailableError,
)
from orders.models import Escrow, Order
from orders.states import (
    PAID_OR_LATER,
    SELLER_ADVANCE_TARGETS,
    EscrowStatus,
    OrderStatus,
)

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from django.db.models import QuerySet

    from authentication.models import User


# Unpaid orders older than this are cancelled by the sweep.
PENDING_PAYMENT_TIMEOUT_MINUTES = 720

BUYER = "buyer"
SELLER = "seller"


def auto_release_window() -> timedelta:
    """How long a delivered order waits for the buyer before auto-release."""
    return timedelta(minutes=settings.ORDER_AUTO_RELEASE_AFTER_MINUTES)


def pending_payment_window() -> timedelta:
    return timedelta(minutes=PENDING_PAYMENT_TIMEOUT_MINUTES)


@dataclass(frozen=True)
class TransitionResult:
    """
    Outcome of a lifecycle operation.

    Attributes:
        order: The order as stored after the operation
        applied: False for idempotent no-ops and lost races
    """

    order: Order
    applied: bool


class OrderLifecycleService(BaseService):
    """
    Service for order lifecycle operations.

    Methods:
        create_order: Open a PENDING order for a product
        mark_paid: Verified payment -> PAID + Escrow HELD (idempotent)
        advance: Seller moves a paid order to PROCESSING/SHIPPED
        confirm_received: Buyer confirms delivery (DELIVERED + stock side effect)
        confirm_satisfied: Buyer completes the order and releases escrow
        auto_release: Sweep variant of confirm_satisfied after the window
        auto_cancel: Sweep cancellation of stale unpaid orders
        get_order_for_user: Fetch an order visible to a participant or staff
        list_for_user: Orders a user buys or sells
        list_all: Every order (staff)
    """

    # =========================================================================
    # Creation
    # =========================================================================

    @classmethod
    def create_order(cls, buyer: User, product_id: UUID | str) -> Order:
        """
        Create a PENDING order for a product.

        Guards:
            - Product exists and is active and in stock
            - Buyer is not the product's seller
            - Single-unit products have no paid (or later) order already

        Raises:
            NotFoundError: Product does not exist
            ProductUnavailableError: A guard failed
        """
        logger = cls.get_logger()

        with cls.atomic():
            product = CatalogService.get_product_for_update(product_id)

            if not product.is_available:
                raise ProductUnavailableError(
                    "Product is not available for purchase",
                    details={"product_id": str(product.pk), "reason": "inactive"},
                )

            if product.seller_id == buyer.pk:
                raise ProductUnavailableError(
                    "You cannot buy your own product",
                    error_code="OWN_PRODUCT",
                    details={"product_id": str(product.pk), "reason": "own_product"},
                )

            if (
                product.is_single_unit
                and Order.objects.filter(
                    product=product,
                    status__in=PAID_OR_LATER,
                ).exists()
            ):
                raise ProductUnavailableError(
                    "This item has already been sold",
                    error_code="PRODUCT_ALREADY_SOLD",
                    details={"product_id": str(product.pk), "reason": "sold"},
                )

            order = Order.objects.create(
                product=product,
                buyer=buyer,
                seller_id=product.seller_id,
                price=product.price,
                delivery_fee=product.delivery_fee,
            )

            cls._announce(order, OrderEventType.ORDER_CREATED, "Order created")

        logger.info(
            "Order created",
            extra={
                "order_id": str(order.pk),
                "reference": order.reference,
                "product_id": str(product.pk),
                "buyer_id": buyer.pk,
            },
        )
        return order

    # =========================================================================
    # Payment
    # =========================================================================

    @classmethod
    def mark_paid(cls, reference: str) -> TransitionResult:
        """
        Record a verified payment and open the escrow.

        This is the only path by which an order becomes PAID. It must only
        be called after the gateway reported the transaction successful.

        Idempotent: a second call for the same reference (webhook and
        client-polled verify racing) is a no-op and creates no second
        Escrow. A CANCELLED order is never resurrected.

        Raises:
            NotFoundError: No order has this reference
            InvalidTransitionError: Order was cancelled
        """
        logger = cls.get_logger()
        lookup = {"reference": reference}

        try:
            with cls.atomic():
                order = cls._lock_order(**lookup)

                if order.status == OrderStatus.CANCELLED:
                    logger.warning(
                        "Payment verified for cancelled order",
                        extra={"order_id": str(order.pk), "reference": reference},
                    )
                    raise InvalidTransitionError.for_order(order, OrderStatus.PAID)

                if order.status in PAID_OR_LATER:
                    logger.info(
                        "Order already paid, skipping",
                        extra={"order_id": str(order.pk), "status": order.status},
                    )
                    return TransitionResult(order=order, applied=False)

                order.mark_paid()
                order.save()

                Escrow.objects.create(
                    order=order,
                    amount=order.total_amount,
                    currency=settings.ORDER_CURRENCY,
                    gateway_transaction_id=reference,
                )

                cls._announce(
                    order,
                    OrderEventType.ORDER_PAID,
                    "Payment received; funds held in escrow",
                )
        except ConcurrentTransition as exc:
            return cls._resolve_race(lookup, OrderStatus.PAID, PAID_OR_LATER, exc)

        logger.info(
            "Order paid, escrow held",
            extra={
                "order_id": str(order.pk),
                "reference": reference,
                "amount": str(order.total_amount),
            },
        )
        return TransitionResult(order=order, applied=True)

    # =========================================================================
    # Seller / buyer transitions
    # =========================================================================

    @classmethod
    def advance(
        cls,
        order_id: UUID | str,
        actor: User,
        target: str,
    ) -> TransitionResult:
        """
        Seller moves a paid order forward.

        Args:
            order_id: Order to advance
            actor: Must be the order's seller
            target: PROCESSING or SHIPPED

        Raises:
            NotFoundError: Order does not exist
            ForbiddenTransitionError: Actor is not the seller
            InvalidTransitionError: Target not allowed from current state
        """
        lookup = {"pk": order_id}

        try:
            with cls.atomic():
                order = cls._lock_order(**lookup)
                cls._ensure_role(order, actor, SELLER)

                if target not in SELLER_ADVANCE_TARGETS:
                    raise InvalidTransitionError.for_order(order, target)

                if order.status == target:
                    return TransitionResult(order=order, applied=False)

                if target == OrderStatus.PROCESSING:
                    step = order.start_processing
                else:
                    step = order.ship

                if not can_proceed(step):
                    raise InvalidTransitionError.for_order(order, target)

                step()
                order.save()

                cls._announce(
                    order,
                    OrderEventType.ORDER_STATUS_UPDATED,
                    f"Order is now {order.get_status_display().lower()}",
                )
        except ConcurrentTransition as exc:
            return cls._resolve_race(lookup, target, {target}, exc)

        cls.get_logger().info(
            "Order advanced by seller",
            extra={"order_id": str(order.pk), "status": order.status},
        )
        return TransitionResult(order=order, applied=True)

    @classmethod
    def confirm_received(cls, order_id: UUID | str, actor: User) -> TransitionResult:
        """
        Buyer confirms the order arrived.

        SHIPPED -> DELIVERED, records received_at (which starts the
        auto-release window) and applies the catalog side effect in the
        same transaction.

        Raises:
            NotFoundError: Order does not exist
            ForbiddenTransitionError: Actor is not the buyer
            InvalidTransitionError: Order is not SHIPPED
        """
        lookup = {"pk": order_id}
        settled = {OrderStatus.DELIVERED, OrderStatus.COMPLETED}

        try:
            with cls.atomic():
                order = cls._lock_order(**lookup)
                cls._ensure_role(order, actor, BUYER)

                if order.status in settled:
                    return TransitionResult(order=order, applied=False)

                if not can_proceed(order.mark_delivered):
                    raise InvalidTransitionError.for_order(
                        order, OrderStatus.DELIVERED
                    )

                order.mark_delivered(received_at=timezone.now())
                order.save()

                CatalogService.apply_delivery_side_effect(order.product_id)

                cls._announce(
                    order,
                    OrderEventType.ORDER_DELIVERED,
                    "Buyer confirmed receipt",
                )
        except ConcurrentTransition as exc:
            return cls._resolve_race(lookup, OrderStatus.DELIVERED, settled, exc)

        cls.get_logger().info(
            "Order delivered",
            extra={"order_id": str(order.pk), "received_at": order.received_at},
        )
        return TransitionResult(order=order, applied=True)

    @classmethod
    def confirm_satisfied(cls, order_id: UUID | str, actor: User) -> TransitionResult:
        """
        Buyer is satisfied: DELIVERED -> COMPLETED and escrow released.

        Safe under a race with the auto-release sweep on the same order;
        exactly one of them releases the escrow and notifies.

        Raises:
            NotFoundError: Order does not exist
            ForbiddenTransitionError: Actor is not the buyer
            InvalidTransitionError: Order is not DELIVERED
        """
        return cls._complete(
            order_id,
            actor=actor,
            event_type=OrderEventType.ORDER_COMPLETED,
            message="Buyer confirmed satisfaction; funds released",
        )

    # =========================================================================
    # Sweep transitions
    # =========================================================================

    @classmethod
    def auto_release(
        cls,
        order_id: UUID | str,
        now: datetime | None = None,
    ) -> TransitionResult:
        """
        Complete a delivered order whose buyer never confirmed satisfaction.

        Re-checks eligibility under the row lock: the order must still be
        DELIVERED, unsatisfied, and received at least the auto-release
        window ago. Anything else is a no-op.
        """
        now = now or timezone.now()
        return cls._complete(
            order_id,
            actor=None,
            event_type=OrderEventType.AUTO_SATISFIED,
            message="Order automatically confirmed after timeout",
            received_before=now - auto_release_window(),
            now=now,
        )

    @classmethod
    def auto_cancel(
        cls,
        order_id: UUID | str,
        now: datetime | None = None,
    ) -> TransitionResult:
        """
        Cancel an order left unpaid past the payment window.

        Orders that reached PAID in the meantime are left untouched.
        """
        now = now or timezone.now()
        cutoff = now - pending_payment_window()
        lookup = {"pk": order_id}

        try:
            with cls.atomic():
                order = cls._lock_order(**lookup)

                if order.status != OrderStatus.PENDING or order.created_at > cutoff:
                    return TransitionResult(order=order, applied=False)

                order.cancel(cancelled_at=now)
                order.save()

                cls._announce(
                    order,
                    OrderEventType.ORDER_CANCELLED,
                    "Order cancelled due to payment timeout (12 hours)",
                )
        except ConcurrentTransition as exc:
            # Paid or cancelled by someone else: either way not ours to touch
            settled = set(OrderStatus.values) - {OrderStatus.PENDING}
            return cls._resolve_race(lookup, OrderStatus.CANCELLED, settled, exc)

        cls.get_logger().info(
            "Stale pending order cancelled",
            extra={"order_id": str(order.pk), "created_at": order.created_at},
        )
        return TransitionResult(order=order, applied=True)

    # =========================================================================
    # Queries
    # =========================================================================

    @classmethod
    def get_order_for_user(cls, order_id: UUID | str, user: User) -> Order:
        """
        Fetch an order visible to its buyer, its seller or staff.

        Raises:
            NotFoundError: Order does not exist
            ForbiddenTransitionError: User is not a participant or staff
        """
        try:
            order = (
                Order.objects.select_related("product", "escrow")
                .filter(pk=order_id)
                .first()
            )
        except (ValueError, DjangoValidationError):
            order = None

        if order is None:
            raise cls._not_found(order_id=str(order_id))

        if not user.is_staff and user.pk not in (order.buyer_id, order.seller_id):
            raise ForbiddenTransitionError(
                "You are not a participant in this order",
                details={"order_id": str(order.pk)},
            )
        return order

    @classmethod
    def list_for_user(cls, user: User) -> QuerySet[Order]:
        """Orders where the user is buyer or seller, newest first."""
        return (
            Order.objects.filter(Q(buyer=user) | Q(seller=user))
            .select_related("product", "escrow")
            .order_by("-created_at")
        )

    @classmethod
    def list_all(cls) -> QuerySet[Order]:
        return Order.objects.select_related("product", "escrow").order_by(
            "-created_at"
        )

    # =========================================================================
    # Internals
    # =========================================================================

    @classmethod
    def _complete(
        cls,
        order_id: UUID | str,
        *,
        actor: User | None,
        event_type: str,
        message: str,
        received_before: datetime | None = None,
        now: datetime | None = None,
    ) -> TransitionResult:
        """
        DELIVERED -> COMPLETED plus escrow release, shared by buyer and sweep.

        With actor set the buyer role is enforced and a non-DELIVERED order
        is an error. With received_before set (sweep) ineligible orders are
        skipped silently.
        """
        now = now or timezone.now()
        lookup = {"pk": order_id}

        try:
            with cls.atomic():
                order = cls._lock_order(**lookup)
                if actor is not None:
                    cls._ensure_role(order, actor, BUYER)

                if order.status == OrderStatus.COMPLETED:
                    return TransitionResult(order=order, applied=False)

                if received_before is not None and not (
                    order.status == OrderStatus.DELIVERED
                    and not order.satisfied
                    and order.received_at is not None
                    and order.received_at <= received_before
                ):
                    return TransitionResult(order=order, applied=False)

                if not can_proceed(order.complete):
                    raise InvalidTransitionError.for_order(
                        order, OrderStatus.COMPLETED
                    )

                order.complete(completed_at=now)
                order.save()

                released = cls._release_escrow(order, now)

                cls._announce(order, event_type, message)
        except ConcurrentTransition as exc:
            return cls._resolve_race(
                lookup, OrderStatus.COMPLETED, {OrderStatus.COMPLETED}, exc
            )

        cls.get_logger().info(
            "Order completed",
            extra={
                "order_id": str(order.pk),
                "event_type": event_type,
                "escrow_released": released,
            },
        )
        return TransitionResult(order=order, applied=True)

    @classmethod
    def _release_escrow(cls, order: Order, now: datetime) -> bool:
        """Release the order's escrow if it is still HELD."""
        escrow = Escrow.objects.select_for_update().filter(order=order).first()

        if escrow is None:
            cls.get_logger().warning(
                "Completed order has no escrow",
                extra={"order_id": str(order.pk)},
            )
            return False

        if escrow.status != EscrowStatus.HELD:
            return False

        escrow.release(released_at=now)
        escrow.save()
        return True

    @classmethod
    def _lock_order(cls, **lookup) -> Order:
        """Row-lock the order matching lookup. Must run inside atomic()."""
        try:
            order = Order.objects.select_for_update().filter(**lookup).first()
        except (ValueError, DjangoValidationError):
            order = None

        if order is None:
            raise cls._not_found(**{k: str(v) for k, v in lookup.items()})
        return order

    @classmethod
    def _ensure_role(cls, order: Order, actor: User, role: str) -> None:
        expected_id = order.buyer_id if role == BUYER else order.seller_id
        if actor is None or actor.pk != expected_id:
            raise ForbiddenTransitionError(
                f"Only the {role} of this order can perform this action",
                details={"order_id": str(order.pk), "required_role": role},
            )

    @classmethod
    def _resolve_race(
        cls,
        lookup: dict,
        requested: str,
        settled_states,
        exc: Exception,
    ) -> TransitionResult:
        """
        Re-read after a lost conditional write.

        If the winner already put the order where we wanted it, report
        success without side effects; otherwise the request conflicts.
        """
        order = Order.objects.filter(**lookup).first()
        if order is None:
            raise cls._not_found(**{k: str(v) for k, v in lookup.items()}) from exc

        if order.status in settled_states:
            cls.get_logger().info(
                "Transition already applied concurrently",
                extra={
                    "order_id": str(order.pk),
                    "status": order.status,
                    "requested": str(requested),
                },
            )
            return TransitionResult(order=order, applied=False)

        raise InvalidTransitionError.for_order(order, requested) from exc

    @classmethod
    def _announce(cls, order: Order, event_type: str, message: str) -> None:
        """Notify the order room and the admin room once the unit commits."""
        event = build_order_event(order, event_type, message)
        order_id = order.pk

        def send():
            NotificationService.notify_order(order_id, event)
            NotificationService.notify_admins(event)

        cls.after_commit(send)

    @staticmethod
    def _not_found(**details) -> NotFoundError:
        return NotFoundError(
            "Order not found",
            error_code="ORDER_NOT_FOUND",
            details=details,
        )
