"""
Order event payloads sent through the notification sink.

Payload shape:
    {
        "type": "ORDER_PAID",
        "order_id": "<uuid>",
        "status": "paid",
        "message": "Payment received; funds held in escrow",
    }
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from orders.models import Order


class OrderEventType:
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_PAID = "ORDER_PAID"
    ORDER_STATUS_UPDATED = "ORDER_STATUS_UPDATED"
    ORDER_DELIVERED = "ORDER_DELIVERED"
    ORDER_COMPLETED = "ORDER_COMPLETED"
    AUTO_SATISFIED = "AUTO_SATISFIED"
    ORDER_CANCELLED = "ORDER_CANCELLED"


def build_order_event(order: Order, event_type: str, message: str) -> dict[str, str]:
    return {
        "type": event_type,
        "order_id": str(order.pk),
        "status": str(order.status),
        "message": message,
    }
