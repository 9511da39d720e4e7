"""
Notification service layer.

Notifications are observability, not part of the transactional contract:
every method here swallows delivery errors after logging them, so a
broken Redis or an absent channel layer can never roll back or block an
order transition. Callers schedule them with transaction.on_commit so only
committed transitions are announced.

Message Types (to consumers):
    order.update        - sent to order_<order_id>
    admin.order.update  - sent to admin_orders

Usage:
    from notifications.services import NotificationService

    NotificationService.notify_order(order.id, {
        "type": "ORDER_PAID",
        "order_id": str(order.id),
        "status": "paid",
        "message": "Payment received",
    })
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync

from core.services import BaseService
from notifications.registry import ADMIN_GROUP, get_registry, order_group

if TYPE_CHECKING:
    from typing import Any
    from uuid import UUID


ORDER_MESSAGE_TYPE = "order.update"
ADMIN_MESSAGE_TYPE = "admin.order.update"


class NotificationService(BaseService):
    """
    Fire-and-forget fan-out of order events.

    Methods:
        notify_order: Send an event to everyone watching one order
        notify_admins: Send an event to the staff room
    """

    @classmethod
    def notify_order(cls, order_id: UUID | str, event: dict[str, Any]) -> bool:
        """
        Broadcast an event to the order's room.

        Returns:
            True if the event was handed to the registry, False otherwise
        """
        return cls._broadcast(
            order_group(order_id),
            {"type": ORDER_MESSAGE_TYPE, "event": event},
        )

    @classmethod
    def notify_admins(cls, event: dict[str, Any]) -> bool:
        """Broadcast an event to the admin room."""
        return cls._broadcast(
            ADMIN_GROUP,
            {"type": ADMIN_MESSAGE_TYPE, "event": event},
        )

    @classmethod
    def _broadcast(cls, group: str, message: dict[str, Any]) -> bool:
        logger = cls.get_logger()
        event = message["event"]

        try:
            async_to_sync(get_registry().broadcast)(group, message)
        except Exception:
            logger.warning(
                "Notification delivery failed",
                extra={
                    "group": group,
                    "event_type": event.get("type"),
                    "order_id": event.get("order_id"),
                },
                exc_info=True,
            )
            return False

        logger.debug(
            "Notification broadcast",
            extra={"group": group, "event_type": event.get("type")},
        )
        return True
