"""
DRF exception handler for application errors.

Registered as REST_FRAMEWORK["EXCEPTION_HANDLER"]. Domain exceptions raised
from services propagate untouched through the views and are rendered here
using BaseApplicationError.to_dict() and the class's status_code.
Everything else falls through to DRF's default handler.
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def application_exception_handler(exc, context):
    """Render BaseApplicationError subclasses as JSON error responses."""
    if isinstance(exc, BaseApplicationError):
        view = context.get("view")
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            f"Request failed: {exc.error_code}",
            extra={
                "error_code": exc.error_code,
                "status_code": exc.status_code,
                "view": view.__class__.__name__ if view else None,
            },
        )
        return Response(exc.to_dict(), status=exc.status_code)

    return exception_handler(exc, context)
