"""Base WebSocket consumer with shared functionality for all consumers."""

import logging
from typing import Dict, Any, List, Set
from urllib.parse import parse_qs

from channels.generic.websocket import AsyncJsonWebsocketConsumer

logger = logging.getLogger(__name__)


class BaseConsumer(AsyncJsonWebsocketConsumer):
    """
    Base consumer with shared connection management and helper methods.

    Subclasses should override:
        - authorize(): decide whether the handshake is accepted
        - get_groups(): return list of groups to join on connect
        - handle_message(msg_type, data): handle incoming messages
    """

    async def connect(self):
        # Track joined groups for cleanup
        self.joined_groups: Set[str] = set()
        self.query_params = parse_qs(self.scope.get("query_string", b"").decode())

        if not await self.authorize():
            await self.close()
            return

        for group in self.get_groups():
            await self._join_group(group)

        await self.accept()
        await self.on_connect()

    async def authorize(self) -> bool:
        return True

    def get_groups(self) -> List[str]:
        return []

    def get_query_param(self, name: str, default: str = "") -> str:
        values = self.query_params.get(name)
        return values[0] if values else default

    async def on_connect(self):
        """Override in subclass for custom connect logic."""
        await self.send_json({"type": "connection_established"})

    async def disconnect(self, close_code):
        """Leave all joined groups on disconnect."""
        try:
            for group in list(getattr(self, "joined_groups", ())):
                await self._leave_group(group)
            await self.on_disconnect(close_code)
        except Exception:
            logger.exception("Error during disconnect for channel %s", self.channel_name)

    async def on_disconnect(self, close_code):
        """Override in subclass for custom disconnect logic."""
        pass

    async def receive_json(self, data: Dict[str, Any]):
        """Route incoming messages to appropriate handlers."""
        msg_type = data.get("type")
        if not msg_type:
            await self.send_error("Message type is required")
            return

        try:
            await self.handle_message(msg_type, data)
        except Exception:
            logger.exception("Error handling message type %s", msg_type)
            await self.send_error(f"Error processing {msg_type}")

    async def handle_message(self, msg_type: str, data: Dict[str, Any]):
        """Override in subclass to handle specific message types."""
        await self.send_error(f"Unknown message type: {msg_type}")

    # ---------------------- Group Management Helpers ----------------------

    async def _join_group(self, group_name: str):
        """Join a channel group and track it."""
        await self.channel_layer.group_add(group_name, self.channel_name)
        self.joined_groups.add(group_name)

    async def _leave_group(self, group_name: str):
        """Leave a channel group and untrack it."""
        await self.channel_layer.group_discard(group_name, self.channel_name)
        self.joined_groups.discard(group_name)

    # ---------------------- Response Helpers ----------------------

    async def send_error(self, message: str):
        """Send an error message to the client."""
        await self.send_json({
            "type": "error",
            "message": message,
        })

    async def send_success(self, event_type: str, **kwargs):
        """Send a success response to the client."""
        await self.send_json({
            "type": event_type,
            **kwargs,
        })
