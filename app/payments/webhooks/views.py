"""
Webhook endpoint view for Paystack.

The view:
1. Passes the raw body and X-Paystack-Signature to PaymentService
2. Maps the outcome to a plain HTTP status Paystack understands

Processing is synchronous: a charge.success delivery costs one verify
call and one row-locked update, well within Paystack's timeout.

Usage:
    # In urls.py
    from payments.webhooks.views import paystack_webhook

    urlpatterns = [
        path("webhook/", paystack_webhook, name="paystack-webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from core.exceptions import NotFoundError, ValidationError
from orders.exceptions import InvalidTransitionError
from payments.exceptions import GatewayError, SignatureInvalidError
from payments.services import PaymentService

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Paystack-Signature"


@csrf_exempt
@require_POST
def paystack_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive Paystack webhook events.

    Returns:
        HttpResponse with status:
        - 200: Event processed, ignored, or not applicable
        - 400: Missing/invalid signature or malformed payload
        - 502: Verification against Paystack failed; Paystack will retry

    Security:
    - Signature is verified on the raw body before parsing
    - No Order/Escrow write happens for an unverified payload
    - CSRF exemption required for external webhooks
    """
    signature = request.headers.get(SIGNATURE_HEADER, "")

    if not signature:
        logger.warning("Webhook received without X-Paystack-Signature header")
        return HttpResponse("Missing signature", status=400)

    try:
        outcome = PaymentService.handle_webhook(request.body, signature)
    except SignatureInvalidError:
        return HttpResponse("Invalid signature", status=400)
    except ValidationError as e:
        logger.warning(
            f"Invalid webhook payload: {e.message}",
            extra={"error_code": e.error_code},
        )
        return HttpResponse("Invalid payload", status=400)
    except GatewayError as e:
        logger.error(
            f"Webhook verification failed: {e.message}",
            extra={"error_code": e.error_code},
        )
        return HttpResponse("Gateway error", status=502)
    except (NotFoundError, InvalidTransitionError) as e:
        # Redelivery cannot fix these; acknowledge and leave a trail.
        logger.error(
            f"Webhook not applicable: {e.message}",
            extra={"error_code": e.error_code, "details": e.details},
        )
        return HttpResponse("Not applicable", status=200)

    if not outcome.processed:
        return HttpResponse("Ignored", status=200)

    return HttpResponse("Processed", status=200)
