"""
Paystack API adapter.

All Paystack HTTP calls go through PaystackAdapter so that timeouts, error
translation and logging stay consistent.

Features:
- Bounded timeout on every request (no automatic retries)
- Error translation to GatewayError
- Structured logging with timing metrics
- Constant-time webhook signature verification

Configuration (via settings):
- PAYSTACK_SECRET_KEY: Secret key, also the webhook signing secret
- PAYSTACK_BASE_URL: API root (default: https://api.paystack.co)
- PAYSTACK_TIMEOUT_SECONDS: Request timeout (default: 15)

Usage:
    from payments.adapters import InitializeTransactionParams, PaystackAdapter

    result = PaystackAdapter.initialize(
        InitializeTransactionParams(
            email="buyer@example.com",
            amount_minor_units=120000,
            reference=order.reference,
            metadata={"order_id": str(order.id)},
        )
    )
    redirect_to(result.authorization_url)
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import requests
from django.conf import settings

from payments.exceptions import GatewayError


def to_minor_units(amount: Decimal) -> int:
    """
    Convert a major-unit amount (e.g. naira) to minor units (kobo).

    Example:
        to_minor_units(Decimal("1200.00"))  # 120000
    """
    minor = (Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(minor)


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class InitializeTransactionParams:
    """
    Parameters for POST /transaction/initialize.

    Attributes:
        email: Customer email
        amount_minor_units: Amount in the smallest currency unit (kobo)
        reference: Our order reference; Paystack echoes it back
        metadata: Extra data returned on verify and webhooks
        callback_url: Where Paystack redirects the buyer afterwards
    """

    email: str
    amount_minor_units: int
    reference: str
    metadata: dict[str, Any] = field(default_factory=dict)
    callback_url: str | None = None

    def __post_init__(self) -> None:
        if self.amount_minor_units <= 0:
            raise ValueError("amount_minor_units must be positive")
        if not self.reference:
            raise ValueError("reference is required")
        if not self.email:
            raise ValueError("email is required")


@dataclass
class InitializeTransactionResult:
    authorization_url: str
    access_code: str
    reference: str


@dataclass
class VerifyTransactionResult:
    """
    Result of GET /transaction/verify/:reference.

    Attributes:
        status: Transaction status ("success", "failed", "abandoned", ...)
        reference: Transaction reference
        amount_minor_units: Amount charged in kobo
        gateway_response: Processor message
        paid_at: ISO timestamp when paid (None if not paid)
        metadata: Metadata sent at initialization
        raw_response: Full "data" object (for debugging)
    """

    status: str
    reference: str
    amount_minor_units: int
    gateway_response: str = ""
    paid_at: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)

    @property
    def is_successful(self) -> bool:
        return self.status == "success"


# =============================================================================
# Adapter
# =============================================================================


class PaystackAdapter:
    """
    Adapter for Paystack transaction APIs.

    Usage:
        result = PaystackAdapter.initialize(params)
        result = PaystackAdapter.verify(reference)
        ok = PaystackAdapter.verify_signature(raw_body, signature)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @staticmethod
    def _secret_key() -> str:
        return settings.PAYSTACK_SECRET_KEY or ""

    @staticmethod
    def _base_url() -> str:
        return settings.PAYSTACK_BASE_URL.rstrip("/")

    @staticmethod
    def _timeout() -> float:
        return settings.PAYSTACK_TIMEOUT_SECONDS

    @classmethod
    def _headers(cls) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {cls._secret_key()}",
            "Content-Type": "application/json",
        }

    # =========================================================================
    # Core Operations
    # =========================================================================

    @classmethod
    def initialize(
        cls,
        params: InitializeTransactionParams,
    ) -> InitializeTransactionResult:
        """
        Initialize a transaction and get the hosted checkout URL.

        Raises:
            GatewayError: Timeout, connection failure or error response
        """
        body = {
            "email": params.email,
            "amount": str(params.amount_minor_units),
            "reference": params.reference,
            "metadata": params.metadata,
            "callback_url": params.callback_url,
        }
        data = cls._request(
            "post",
            "/transaction/initialize",
            operation="initialize",
            log_context={
                "reference": params.reference,
                "amount_minor_units": params.amount_minor_units,
            },
            json=body,
        )

        return InitializeTransactionResult(
            authorization_url=data.get("authorization_url", ""),
            access_code=data.get("access_code", ""),
            reference=data.get("reference", params.reference),
        )

    @classmethod
    def verify(cls, reference: str) -> VerifyTransactionResult:
        """
        Fetch the gateway's view of a transaction.

        This is the only source of truth for whether money moved.

        Raises:
            GatewayError: Timeout, connection failure or error response
        """
        data = cls._request(
            "get",
            f"/transaction/verify/{reference}",
            operation="verify",
            log_context={"reference": reference},
        )

        return VerifyTransactionResult(
            status=data.get("status", ""),
            reference=data.get("reference", reference),
            amount_minor_units=int(data.get("amount") or 0),
            gateway_response=data.get("gateway_response") or "",
            paid_at=data.get("paid_at"),
            metadata=data.get("metadata") or {},
            raw_response=data,
        )

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    @classmethod
    def verify_signature(cls, raw_body: bytes, signature: str | None) -> bool:
        """
        Check X-Paystack-Signature against HMAC-SHA512(secret, raw_body).

        Must be called on the raw request body, before any parsing.
        """
        secret = cls._secret_key()
        if not secret or not signature:
            return False

        computed = hmac.new(
            secret.encode("utf-8"),
            raw_body,
            hashlib.sha512,
        ).hexdigest()
        return hmac.compare_digest(computed, signature.strip())

    # =========================================================================
    # HTTP
    # =========================================================================

    @classmethod
    def _request(
        cls,
        method: str,
        path: str,
        operation: str,
        log_context: dict[str, Any],
        **kwargs,
    ) -> dict[str, Any]:
        """Send one request and return the response's "data" object."""
        logger = cls.get_logger()
        log_context = {"operation": operation, **log_context}
        url = f"{cls._base_url()}{path}"

        start_time = time.time()
        logger.info("Starting Paystack operation", extra=log_context)

        try:
            response = requests.request(
                method,
                url,
                headers=cls._headers(),
                timeout=cls._timeout(),
                **kwargs,
            )
        except requests.Timeout as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "Paystack request timed out",
                extra={**log_context, "duration_ms": duration_ms},
            )
            raise GatewayError(
                f"Paystack {operation} timed out",
                error_code="GATEWAY_TIMEOUT",
                details={"operation": operation},
            ) from e
        except requests.RequestException as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Paystack request failed: {e}",
                extra={**log_context, "duration_ms": duration_ms},
            )
            raise GatewayError(
                f"Paystack {operation} failed: {e}",
                details={"operation": operation},
            ) from e

        duration_ms = (time.time() - start_time) * 1000

        try:
            payload = response.json() if response.content else {}
        except ValueError:
            payload = {}

        if not 200 <= response.status_code < 300 or payload.get("status") is not True:
            message = payload.get("message") or f"HTTP {response.status_code}"
            logger.error(
                f"Paystack operation rejected: {message}",
                extra={
                    **log_context,
                    "http_status": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
            raise GatewayError(
                f"Paystack {operation} failed: {message}",
                details={"operation": operation, "http_status": response.status_code},
                http_status=response.status_code,
            )

        logger.info(
            "Paystack operation completed",
            extra={
                **log_context,
                "http_status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return payload.get("data") or {}
