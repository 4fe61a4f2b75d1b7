"""WebSocket URL routing for the realtime app."""

from django.urls import re_path

from .consumers.request_consumer import RequestConsumer

websocket_urlpatterns = [
    # Request status endpoint for the customer dashboard
    # URL: ws://localhost:8000/ws/requests/<uuid>/?client_email=...
    re_path(
        r"ws/requests/(?P<request_id>[0-9a-fA-F-]{36})/$",
        RequestConsumer.as_asgi(),
        name="request-ws"
    ),
]
