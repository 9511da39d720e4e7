"""
WebSocket consumer for realtime order updates.

Consumers:
    OrderUpdatesConsumer: One connection per client; the client joins the
        rooms it wants after connecting.

Authentication:
    Users are authenticated via JWT (see notifications.middleware).
    Anonymous connections are closed with code 4001.

Message Types (from client):
    {"action": "join_order_room", "order_id": "<uuid>"}
    {"action": "leave_order_room", "order_id": "<uuid>"}
    {"action": "join_admin_room"}                      (staff only)

Message Types (to client):
    {"event": "joined", "room": "<group>"}
    {"event": "left", "room": "<group>"}
    {"event": "order_update", "data": {...}}
    {"event": "admin_order_update", "data": {...}}
    {"event": "error", "error": "...", "error_code": "..."}
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from core.exceptions import NotFoundError, PermissionDeniedError
from notifications.registry import ADMIN_GROUP, get_registry, order_group

logger = logging.getLogger(__name__)


class OrderUpdatesConsumer(AsyncJsonWebsocketConsumer):
    """
    Relays order events to buyers, sellers and staff.

    Attributes:
        rooms: Groups this connection has joined
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.rooms: set[str] = set()

    async def connect(self):
        user = self.scope.get("user")

        if user is None or not user.is_authenticated:
            logger.warning("Rejected unauthenticated order updates connection")
            await self.close(code=4001)
            return

        if "jwt" in self.scope.get("subprotocols", []):
            # Browsers drop the handshake unless the offered subprotocol is echoed
            await self.accept(subprotocol="jwt")
        else:
            await self.accept()
        logger.info(f"User {user.id} connected to order updates")

    async def disconnect(self, close_code):
        registry = get_registry()
        for room in self.rooms:
            await registry.leave(room, self.channel_name)
        self.rooms.clear()

    async def receive_json(self, content, **kwargs):
        action = content.get("action") if isinstance(content, dict) else None

        if action == "join_order_room":
            await self._join_order_room(content.get("order_id"))
        elif action == "leave_order_room":
            await self._leave_room(order_group(content.get("order_id")))
        elif action == "join_admin_room":
            await self._join_admin_room()
        else:
            await self._send_error("Unknown action", "UNKNOWN_ACTION")

    # =========================================================================
    # Room management
    # =========================================================================

    async def _join_order_room(self, order_id):
        if not order_id:
            await self._send_error("order_id is required", "ORDER_ID_REQUIRED")
            return

        allowed = await self._can_watch_order(order_id)
        if not allowed:
            await self._send_error("Order not available", "ORDER_NOT_AVAILABLE")
            return

        await self._join_room(order_group(order_id))

    async def _join_admin_room(self):
        if not self.scope["user"].is_staff:
            await self._send_error("Staff access required", "ADMIN_REQUIRED")
            return

        await self._join_room(ADMIN_GROUP)

    async def _join_room(self, room: str):
        await get_registry().join(room, self.channel_name)
        self.rooms.add(room)
        await self.send_json({"event": "joined", "room": room})

    async def _leave_room(self, room: str):
        if room in self.rooms:
            await get_registry().leave(room, self.channel_name)
            self.rooms.discard(room)
        await self.send_json({"event": "left", "room": room})

    async def _send_error(self, message: str, error_code: str):
        await self.send_json(
            {"event": "error", "error": message, "error_code": error_code}
        )

    @database_sync_to_async
    def _can_watch_order(self, order_id) -> bool:
        from orders.services import OrderLifecycleService

        try:
            OrderLifecycleService.get_order_for_user(order_id, self.scope["user"])
        except (NotFoundError, PermissionDeniedError):
            return False
        return True

    # =========================================================================
    # Group message handlers
    # =========================================================================

    async def order_update(self, message):
        await self.send_json({"event": "order_update", "data": message["event"]})

    async def admin_order_update(self, message):
        await self.send_json(
            {"event": "admin_order_update", "data": message["event"]}
        )
