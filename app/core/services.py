"""
Base class for the service layer.

Services hold the business logic; views and Celery tasks stay thin and call
into them. Services are stateless and expose classmethods only.

Expected failures are raised as core.exceptions subclasses and surface
verbatim to the caller.

Usage:
    from core.services import BaseService

    class CatalogService(BaseService):
        @classmethod
        def get_product(cls, product_id):
            with cls.atomic():
                ...
            cls.get_logger().info("Loaded product", extra={...})
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


class BaseService:
    """
    Base class for service layer classes.

    Provides:
    - Logging setup per service
    - Database transaction management
    - Post-commit side effects
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Logger named after the service class for easy filtering."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Thin wrapper around transaction.atomic() that makes transaction
        boundaries explicit in service code.
        """
        with transaction.atomic():
            yield

    @classmethod
    def after_commit(cls, func: Callable[[], None]) -> None:
        """
        Run func once the surrounding transaction commits.

        Outside a transaction Django runs the callback immediately. If the
        transaction rolls back the callback is discarded, so side effects
        such as notifications only fire for writes that actually landed.
        """
        transaction.on_commit(func)
