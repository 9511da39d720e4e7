"""
Tests for PaymentService.

The gateway is mocked at the HTTP layer; the order engine runs for real.
"""

import json

import pytest
import requests

from authentication.tests.factories import UserFactory
from core.exceptions import NotFoundError, ValidationError
from orders.exceptions import ForbiddenTransitionError, InvalidTransitionError
from orders.models import Escrow, Order
from orders.states import OrderStatus
from orders.tests.factories import OrderFactory
from payments.exceptions import GatewayError, SignatureInvalidError
from payments.services import PaymentService


def status_of(order):
    return Order.objects.get(pk=order.pk).status


class TestInitializePayment:
    def test_creates_order_and_opens_transaction(
        self, buyer, product, paystack_http, paystack_response
    ):
        paystack_http.return_value = paystack_response(
            data={
                "authorization_url": "https://checkout.paystack.com/xyz",
                "access_code": "xyz",
                "reference": "echoed",
            }
        )

        checkout = PaymentService.initialize_payment(
            buyer, product.id, callback_url="https://shop.example.com/done"
        )

        assert checkout.authorization_url == "https://checkout.paystack.com/xyz"
        assert checkout.order.status == OrderStatus.PENDING

        body = paystack_http.call_args.kwargs["json"]
        assert body["email"] == "buyer@example.com"
        assert body["amount"] == "120000"
        assert body["reference"] == checkout.order.reference
        assert body["metadata"] == {"order_id": str(checkout.order.pk)}
        assert body["callback_url"] == "https://shop.example.com/done"

    def test_gateway_failure_leaves_pending_order(self, buyer, product, paystack_http):
        paystack_http.side_effect = requests.Timeout()

        with pytest.raises(GatewayError):
            PaymentService.initialize_payment(buyer, product.id)

        order = Order.objects.get(product=product)
        assert order.status == OrderStatus.PENDING
        assert not Escrow.objects.filter(order=order).exists()


class TestVerifyPayment:
    def test_success_marks_order_paid(self, pending_order, paystack_http, verified_charge):
        paystack_http.return_value = verified_charge(pending_order)

        verification = PaymentService.verify_payment(pending_order.reference)

        assert verification.success is True
        assert verification.status == "success"
        assert verification.order.status == OrderStatus.PAID
        assert Escrow.objects.filter(order=pending_order).count() == 1

    def test_repeat_verification_is_idempotent(
        self, pending_order, paystack_http, verified_charge
    ):
        paystack_http.return_value = verified_charge(pending_order)

        PaymentService.verify_payment(pending_order.reference)
        verification = PaymentService.verify_payment(pending_order.reference)

        assert verification.success is True
        assert Escrow.objects.filter(order=pending_order).count() == 1

    @pytest.mark.parametrize("gateway_status", ["failed", "abandoned"])
    def test_unsuccessful_charge_changes_nothing(
        self, pending_order, paystack_http, verified_charge, gateway_status
    ):
        paystack_http.return_value = verified_charge(pending_order, status=gateway_status)

        verification = PaymentService.verify_payment(pending_order.reference)

        assert verification.success is False
        assert verification.status == gateway_status
        assert status_of(pending_order) == OrderStatus.PENDING

    def test_amount_mismatch_is_not_paid(
        self, pending_order, paystack_http, verified_charge
    ):
        paystack_http.return_value = verified_charge(pending_order, amount=100)

        verification = PaymentService.verify_payment(pending_order.reference)

        assert verification.success is False
        assert verification.status == "amount_mismatch"
        assert status_of(pending_order) == OrderStatus.PENDING
        assert not Escrow.objects.filter(order=pending_order).exists()

    def test_gateway_error_changes_nothing(self, pending_order, paystack_http):
        paystack_http.side_effect = requests.ConnectionError()

        with pytest.raises(GatewayError):
            PaymentService.verify_payment(pending_order.reference)

        assert status_of(pending_order) == OrderStatus.PENDING

    def test_cancelled_order_is_not_paid(self, product, buyer, paystack_http, verified_charge):
        order = OrderFactory(product=product, buyer=buyer, status=OrderStatus.CANCELLED)
        paystack_http.return_value = verified_charge(order)

        with pytest.raises(InvalidTransitionError):
            PaymentService.verify_payment(order.reference)

        assert status_of(order) == OrderStatus.CANCELLED

    def test_unknown_reference(self, db, paystack_http):
        with pytest.raises(NotFoundError):
            PaymentService.verify_payment("unknown")

        paystack_http.assert_not_called()

    def test_outsider_cannot_verify(self, pending_order, paystack_http):
        with pytest.raises(ForbiddenTransitionError):
            PaymentService.verify_payment(pending_order.reference, user=UserFactory())

        paystack_http.assert_not_called()


class TestHandleWebhook:
    def body_for(self, order, event="charge.success"):
        return json.dumps(
            {"event": event, "data": {"reference": order.reference}}
        ).encode()

    def test_charge_success_marks_paid(
        self, pending_order, paystack_http, verified_charge, sign
    ):
        paystack_http.return_value = verified_charge(pending_order)
        body = self.body_for(pending_order)

        outcome = PaymentService.handle_webhook(body, sign(body))

        assert outcome.processed is True
        assert outcome.verification.success is True
        assert status_of(pending_order) == OrderStatus.PAID

    def test_bad_signature_writes_nothing(self, pending_order, paystack_http, sign):
        body = self.body_for(pending_order)

        with pytest.raises(SignatureInvalidError):
            PaymentService.handle_webhook(body, sign(body, secret="wrong"))

        paystack_http.assert_not_called()
        assert status_of(pending_order) == OrderStatus.PENDING

    def test_other_events_are_ignored(self, pending_order, paystack_http, sign):
        body = self.body_for(pending_order, event="transfer.success")

        outcome = PaymentService.handle_webhook(body, sign(body))

        assert outcome.processed is False
        assert outcome.event == "transfer.success"
        paystack_http.assert_not_called()

    @pytest.mark.parametrize(
        "body",
        [b"not json", b"[1, 2]", b'{"event": "charge.success", "data": {}}'],
    )
    def test_malformed_payload(self, db, paystack_http, sign, body):
        with pytest.raises(ValidationError) as exc_info:
            PaymentService.handle_webhook(body, sign(body))

        assert exc_info.value.error_code == "INVALID_PAYLOAD"
        paystack_http.assert_not_called()
