"""Realtime consumers for WebSocket communication."""

from .base import BaseConsumer
from .request_consumer import RequestConsumer

__all__ = [
    "BaseConsumer",
    "RequestConsumer",
]
