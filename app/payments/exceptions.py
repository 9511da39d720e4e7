"""
Payment-specific exceptions.

Exception Hierarchy:
    ExternalServiceError (core)
    └── GatewayError - Paystack unreachable, timed out or returned an error

    PermissionDeniedError (core)
    └── SignatureInvalidError - Webhook payload failed HMAC verification

Usage:
    from payments.exceptions import GatewayError

    try:
        PaystackAdapter.verify(reference)
    except GatewayError as e:
        logger.warning(f"Verification failed: {e.message}")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import ExternalServiceError, PermissionDeniedError

if TYPE_CHECKING:
    from typing import Any


class GatewayError(ExternalServiceError):
    """
    Raised when a payment gateway call fails.

    Never retried by the adapter; callers decide whether a retry is safe.

    Attributes:
        http_status: HTTP status returned by the gateway (None for
            timeouts and connection errors)
    """

    default_error_code: str = "GATEWAY_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
    ):
        super().__init__(message, error_code=error_code, details=details)
        self.http_status = http_status


class SignatureInvalidError(PermissionDeniedError):
    """Raised when a webhook signature is missing or does not match."""

    default_error_code: str = "SIGNATURE_INVALID"
