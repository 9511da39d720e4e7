"""
Payment service: glue between the Paystack adapter and the order engine.

Flow:
    1. initialize_payment: engine creates a PENDING order, adapter opens a
       Paystack transaction using the order's reference
    2. Buyer pays on Paystack's hosted page
    3. verify_payment (client polling) and/or handle_webhook (charge.success)
       ask Paystack for the transaction and, only on "success", call
       OrderLifecycleService.mark_paid, which is idempotent

Usage:
    from payments.services import PaymentService

    checkout = PaymentService.initialize_payment(buyer, product_id)
    verification = PaymentService.verify_payment(checkout.reference)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.exceptions import NotFoundError, ValidationError
from core.services import BaseService
from orders.models import Order
from orders.services import OrderLifecycleService
from payments.adapters import (
    InitializeTransactionParams,
    PaystackAdapter,
    to_minor_units,
)
from payments.exceptions import SignatureInvalidError

if TYPE_CHECKING:
    from uuid import UUID

    from authentication.models import User


CHARGE_SUCCESS = "charge.success"


@dataclass(frozen=True)
class PaymentCheckout:
    authorization_url: str
    access_code: str
    reference: str
    order: Order


@dataclass(frozen=True)
class PaymentVerification:
    """
    Attributes:
        success: True when the gateway confirmed the charge and the
            order is PAID (or later)
        status: Gateway transaction status, or "amount_mismatch"
        order: The order as stored after verification
    """

    success: bool
    status: str
    order: Order


@dataclass(frozen=True)
class WebhookOutcome:
    event: str
    processed: bool
    verification: PaymentVerification | None = None


class PaymentService(BaseService):
    """
    Service for payment operations.

    Methods:
        initialize_payment: Create an order and open a gateway transaction
        verify_payment: Confirm a transaction with the gateway, mark paid
        handle_webhook: Authenticate and process a Paystack webhook
    """

    @classmethod
    def initialize_payment(
        cls,
        buyer: User,
        product_id: UUID | str,
        callback_url: str | None = None,
    ) -> PaymentCheckout:
        """
        Create a PENDING order and initialize its Paystack transaction.

        The order is committed before the gateway call so no row lock is
        held during HTTP. If the gateway fails the order stays PENDING
        and the auto-cancel sweep reclaims it.

        Raises:
            NotFoundError / ProductUnavailableError: From order creation
            GatewayError: Paystack unreachable or rejected the request
        """
        logger = cls.get_logger()

        order = OrderLifecycleService.create_order(buyer, product_id)

        result = PaystackAdapter.initialize(
            InitializeTransactionParams(
                email=buyer.email,
                amount_minor_units=to_minor_units(order.total_amount),
                reference=order.reference,
                metadata={"order_id": str(order.pk)},
                callback_url=callback_url,
            )
        )

        logger.info(
            "Payment initialized",
            extra={"order_id": str(order.pk), "reference": order.reference},
        )

        return PaymentCheckout(
            authorization_url=result.authorization_url,
            access_code=result.access_code,
            reference=result.reference,
            order=order,
        )

    @classmethod
    def verify_payment(
        cls,
        reference: str,
        user: User | None = None,
    ) -> PaymentVerification:
        """
        Ask Paystack whether the charge went through and mark the order paid.

        Local state only changes after the gateway reports "success" for
        the full order amount. Safe to call any number of times and
        concurrently with the webhook.

        Args:
            reference: Order/transaction reference
            user: When given, must be a participant of the order or staff

        Raises:
            NotFoundError: Unknown reference
            ForbiddenTransitionError: user may not see the order
            GatewayError: Paystack unreachable or rejected the request
            InvalidTransitionError: Charge succeeded for a cancelled order
        """
        logger = cls.get_logger()

        order = Order.objects.filter(reference=reference).first()
        if order is None:
            raise NotFoundError(
                "Order not found",
                error_code="ORDER_NOT_FOUND",
                details={"reference": reference},
            )
        if user is not None:
            OrderLifecycleService.get_order_for_user(order.pk, user)

        result = PaystackAdapter.verify(reference)

        if not result.is_successful:
            logger.info(
                "Payment not successful",
                extra={"reference": reference, "gateway_status": result.status},
            )
            return PaymentVerification(success=False, status=result.status, order=order)

        expected = to_minor_units(order.total_amount)
        if result.amount_minor_units != expected:
            logger.error(
                "Paid amount does not match order total",
                extra={
                    "reference": reference,
                    "expected_minor_units": expected,
                    "paid_minor_units": result.amount_minor_units,
                },
            )
            return PaymentVerification(
                success=False,
                status="amount_mismatch",
                order=order,
            )

        transition = OrderLifecycleService.mark_paid(reference)
        return PaymentVerification(
            success=True,
            status=result.status,
            order=transition.order,
        )

    @classmethod
    def handle_webhook(cls, raw_body: bytes, signature: str | None) -> WebhookOutcome:
        """
        Authenticate and process a Paystack webhook delivery.

        The signature is checked against the raw body before anything is
        parsed or written. charge.success goes through verify_payment, so
        a forged-but-signed payload still cannot mark an order paid
        without the gateway confirming it.

        Raises:
            SignatureInvalidError: Missing or mismatched signature
            ValidationError: Body is not a JSON object
            GatewayError: Verification call failed
        """
        logger = cls.get_logger()

        if not PaystackAdapter.verify_signature(raw_body, signature):
            logger.warning("Webhook signature verification failed")
            raise SignatureInvalidError("Invalid webhook signature")

        try:
            payload = json.loads(raw_body)
        except (TypeError, ValueError) as e:
            raise ValidationError(
                "Webhook body is not valid JSON",
                error_code="INVALID_PAYLOAD",
            ) from e

        if not isinstance(payload, dict):
            raise ValidationError(
                "Webhook body must be a JSON object",
                error_code="INVALID_PAYLOAD",
            )

        event = payload.get("event") or ""
        logger.info(f"Received Paystack webhook: {event}", extra={"event": event})

        if event != CHARGE_SUCCESS:
            return WebhookOutcome(event=event, processed=False)

        reference = (payload.get("data") or {}).get("reference")
        if not reference:
            raise ValidationError(
                "charge.success without data.reference",
                error_code="INVALID_PAYLOAD",
            )

        verification = cls.verify_payment(reference)
        return WebhookOutcome(event=event, processed=True, verification=verification)
