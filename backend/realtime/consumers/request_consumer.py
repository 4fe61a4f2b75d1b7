"""Request status WebSocket consumer for customers waiting on a match."""

import logging
from typing import Dict, Any, List, Optional

from channels.db import database_sync_to_async

from realtime.notifications import request_group_name
from .base import BaseConsumer

logger = logging.getLogger(__name__)


class RequestConsumer(BaseConsumer):
    """
    WebSocket consumer for one service request.

    URL: ws/requests/<request_id>/?client_email=<email>

    The handshake is accepted only when client_email owns the request.
    Server pushes:
        - request_matched: a professional accepted
        - matching_exhausted: no candidates left within radius
    Client messages:
        - get_status: reply with the current request status
    """

    async def authorize(self) -> bool:
        self.request_id = str(self.scope["url_route"]["kwargs"]["request_id"])
        client_email = self.get_query_param("client_email")
        if not client_email:
            return False
        return await self._owns_request(client_email)

    def get_groups(self) -> List[str]:
        return [request_group_name(self.request_id)]

    async def on_connect(self):
        await self.send_json({
            "type": "connection_established",
            "request_id": self.request_id,
            "status": await self._current_status(),
        })

    async def handle_message(self, msg_type: str, data: Dict[str, Any]):
        if msg_type == "get_status":
            await self.send_success(
                "request_status",
                request_id=self.request_id,
                status=await self._current_status(),
            )
        else:
            await self.send_error(f"Unknown message type: {msg_type}")

    # ---------------------- Event Handlers (from group_send) ----------------------

    async def request_matched(self, event):
        """Sent when a professional accepts the request."""
        await self.send_json({
            "type": "request_matched",
            "request_id": event.get("request_id"),
            "message": event.get("message", ""),
            "request": event.get("request_data", {}),
        })

    async def matching_exhausted(self, event):
        """Sent when no professional is left to offer the request to."""
        await self.send_json({
            "type": "matching_exhausted",
            "request_id": event.get("request_id"),
            "message": event.get("message", ""),
        })

    # ---------------------- Database Helpers ----------------------

    @database_sync_to_async
    def _owns_request(self, client_email: str) -> bool:
        from services.request_management import normalize_email
        from service_requests.models import ServiceRequest

        owner = (
            ServiceRequest.objects.filter(pk=self.request_id)
            .values_list("client_email", flat=True)
            .first()
        )
        return owner is not None and normalize_email(owner) == normalize_email(client_email)

    @database_sync_to_async
    def _current_status(self) -> Optional[str]:
        from service_requests.models import ServiceRequest

        return (
            ServiceRequest.objects.filter(pk=self.request_id)
            .values_list("status", flat=True)
            .first()
        )
