"""
Base exception classes for application-wide error handling.

Every domain error carries a machine-readable error code, optional details
and the HTTP status the API layer should answer with.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures (400)
    ├── NotFoundError - Resource not found (404)
    ├── PermissionDeniedError - Authorization failures (403)
    ├── ConflictError - State conflicts, invalid transitions (409)
    └── ExternalServiceError - Third-party service failures (502)

Usage:
    from core.exceptions import NotFoundError

    order = Order.objects.filter(id=order_id).first()
    if order is None:
        raise NotFoundError(
            f"Order {order_id} not found",
            error_code="ORDER_NOT_FOUND",
            details={"order_id": str(order_id)},
        )

Note:
    These exceptions are for domain/business logic errors. They are
    rendered for API clients by core.exception_handlers; DRF keeps
    handling its own serializer and authentication exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (current state, ids, ...)
        status_code: HTTP status used when the error reaches the API layer
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Order abc not found",
                "error_code": "ORDER_NOT_FOUND",
                "details": {"order_id": "abc"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails in the service layer.

    For request body validation, use DRF serializers instead.
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = 400


class NotFoundError(BaseApplicationError):
    """Raised when a requested resource does not exist."""

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the acting user lacks the role an operation needs.

    Note:
        For authentication failures (missing/invalid token), DRF's
        AuthenticationFailed applies. This is for authorization only.
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for:
    - Duplicate entries
    - Concurrent modification conflicts
    - Invalid state transitions
    """

    default_error_code: str = "CONFLICT"
    status_code: int = 409


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Log the original error for debugging but don't expose internal
    details to clients.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
    status_code: int = 502
