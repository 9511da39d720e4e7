"""
Notifications app: best-effort realtime fan-out of order events.

This app provides:
- ConnectionRegistry: interface over named subscription groups
- ChannelLayerRegistry: registry backed by the Channels channel layer, so
  every web/worker instance shares the same groups (Redis in production)
- NotificationService: notify_order / notify_admins, never raising
- OrderUpdatesConsumer: websocket endpoint clients use to join order rooms

Groups:
    order_<order_id>  - buyer, seller and staff watching one order
    admin_orders      - staff watching every order

Usage:
    from notifications.services import NotificationService

    NotificationService.notify_order(order.id, event)
    NotificationService.notify_admins(event)
"""
