"""
Notification helpers for sending WebSocket messages to connected clients.

Customers watching a request join the group request_<request_id>; the
matching engine pushes status events (request_matched, matching_exhausted)
there.
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def request_group_name(request_id) -> str:
    return f"request_{request_id}"


def notify_request_event(
    event_type: str,
    service_request,
    message: str = "",
    extra: Dict[str, Any] = None,
) -> bool:
    """
    Send a request status event to everyone watching: request_<request_id>

    Args:
        event_type: Handler name in consumer (request_matched, matching_exhausted)
        service_request: ServiceRequest model instance
        message: Optional message to include
        extra: Additional payload data

    Returns:
        True if sent, False when no channel layer is configured
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False

    from service_requests.serializers import ServiceRequestSerializer

    payload = {
        "type": event_type,
        "request_id": str(service_request.id),
        "status": service_request.status,
        "request_data": ServiceRequestSerializer(service_request).data,
        **(extra or {}),
    }

    if message:
        payload["message"] = message

    group = request_group_name(service_request.id)
    logger.debug("WS -> %s: %s", group, payload)
    async_to_sync(channel_layer.group_send)(group, payload)

    return True
