"""
Connection registry abstraction for realtime subscriptions.

A registry tracks which live connections belong to which named groups and
broadcasts messages to a group. Connections are identified by an opaque
connection id (a Channels channel name for websocket consumers).

The default implementation delegates to the Channels channel layer. With
channels-redis every process shares the same group membership, so an
event raised by a Celery sweep reaches a websocket held by a web worker.

Usage:
    from notifications.registry import get_registry, order_group

    registry = get_registry()
    await registry.join(order_group(order.id), self.channel_name)
    await registry.broadcast(order_group(order.id), {"type": "order.update", ...})
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import TYPE_CHECKING

from channels.layers import get_channel_layer
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

if TYPE_CHECKING:
    from typing import Any
    from uuid import UUID


ADMIN_GROUP = "admin_orders"


def order_group(order_id: UUID | str) -> str:
    """Group name for subscribers of a single order."""
    return f"order_{order_id}"


class ConnectionRegistry(ABC):
    """
    Named subscription groups keyed by connection identity.

    Implementations must be safe to share between processes; nothing may
    assume the publisher and the subscriber live in the same interpreter.
    """

    @abstractmethod
    async def join(self, group: str, connection_id: str) -> None:
        """Subscribe a connection to a group."""

    @abstractmethod
    async def leave(self, group: str, connection_id: str) -> None:
        """Unsubscribe a connection from a group. Unknown pairs are ignored."""

    @abstractmethod
    async def broadcast(self, group: str, message: dict[str, Any]) -> None:
        """Deliver a message to every connection in the group."""


class ChannelLayerRegistry(ConnectionRegistry):
    """ConnectionRegistry backed by a Channels channel layer."""

    def __init__(self, alias: str | None = None) -> None:
        self.alias = alias or "default"

    @property
    def channel_layer(self):
        layer = get_channel_layer(self.alias)
        if layer is None:
            raise ImproperlyConfigured(
                f"No channel layer configured for alias '{self.alias}'"
            )
        return layer

    async def join(self, group: str, connection_id: str) -> None:
        await self.channel_layer.group_add(group, connection_id)

    async def leave(self, group: str, connection_id: str) -> None:
        await self.channel_layer.group_discard(group, connection_id)

    async def broadcast(self, group: str, message: dict[str, Any]) -> None:
        await self.channel_layer.group_send(group, message)


@lru_cache(maxsize=1)
def get_registry() -> ConnectionRegistry:
    """Registry selected by NOTIFICATIONS_CONNECTION_REGISTRY."""
    registry_class = import_string(
        getattr(
            settings,
            "NOTIFICATIONS_CONNECTION_REGISTRY",
            "notifications.registry.ChannelLayerRegistry",
        )
    )
    return registry_class()
