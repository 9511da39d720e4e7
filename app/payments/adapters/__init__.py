"""
Payment adapters for external services.

All payment gateway calls go through these adapters to ensure consistent
error handling, timeouts and observability.

Usage:
    from payments.adapters import PaystackAdapter

    result = PaystackAdapter.verify(reference)
    if result.is_successful:
        ...
"""

from payments.adapters.paystack_adapter import (
    InitializeTransactionParams,
    InitializeTransactionResult,
    PaystackAdapter,
    VerifyTransactionResult,
    to_minor_units,
)

__all__ = [
    "InitializeTransactionParams",
    "InitializeTransactionResult",
    "PaystackAdapter",
    "VerifyTransactionResult",
    "to_minor_units",
]
