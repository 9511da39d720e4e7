"""
Order-specific exceptions.

Exception Hierarchy:
    ConflictError (core)
    ├── InvalidTransitionError - Guard failed for a lifecycle transition
    │   └── ProductUnavailableError - Order cannot be placed on a product
    └── LockAcquisitionError - A sweep is already running

    PermissionDeniedError (core)
    └── ForbiddenTransitionError - Actor lacks the role for a transition

Usage:
    from orders.exceptions import InvalidTransitionError

    raise InvalidTransitionError.for_order(order, OrderStatus.DELIVERED)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import ConflictError, PermissionDeniedError

if TYPE_CHECKING:
    from orders.models import Order


class InvalidTransitionError(ConflictError):
    """
    Raised when an order cannot move to the requested state.

    details always carries current_state and requested_state so clients
    can tell a stale UI from a real conflict.
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"

    @classmethod
    def for_order(cls, order: Order, requested_state: str) -> InvalidTransitionError:
        return cls(
            f"Cannot move order from '{order.status}' to '{requested_state}'",
            details={
                "order_id": str(order.pk),
                "current_state": str(order.status),
                "requested_state": str(requested_state),
            },
        )


class ProductUnavailableError(InvalidTransitionError):
    """Raised when an order cannot be placed against a product."""

    default_error_code: str = "PRODUCT_UNAVAILABLE"


class ForbiddenTransitionError(PermissionDeniedError):
    """Raised when the acting user is not the buyer/seller a step requires."""

    default_error_code: str = "FORBIDDEN_TRANSITION"


class LockAcquisitionError(ConflictError):
    """Raised when a sweep lock is already held by another run."""

    default_error_code: str = "LOCK_ACQUISITION_FAILED"
