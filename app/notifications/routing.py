"""
WebSocket URL routing for order notifications.

URL Patterns:
    ws/orders/ - Order updates; rooms are joined after connecting

Authentication:
    JWT token should be passed as query parameter: ?token=<jwt_access_token>
"""

from django.urls import path

from notifications import consumers

websocket_urlpatterns = [
    path("ws/orders/", consumers.OrderUpdatesConsumer.as_asgi()),
]
