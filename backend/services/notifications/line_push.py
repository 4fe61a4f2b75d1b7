"""LINE Messaging API push messages."""

import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

LINE_PUSH_URL = "https://api.line.me/v2/bot/message/push"


def push_text(line_user_id: str, text: str) -> bool:
    """
    Push a single text message to a LINE user.

    Returns:
        True if LINE accepted the push, False for a dry run
        (no LINE_CHANNEL_ACCESS_TOKEN configured)

    Raises:
        requests.RequestException: LINE unreachable or rejected the push
    """
    token = settings.LINE_CHANNEL_ACCESS_TOKEN
    if not token:
        logger.info("[LINE:DRYRUN] to=%s", line_user_id)
        return False

    body = {
        "to": line_user_id,
        "messages": [{"type": "text", "text": text}],
    }
    response = requests.post(
        LINE_PUSH_URL,
        json=body,
        headers={"Authorization": f"Bearer {token}"},
        timeout=settings.NOTIFICATION_HTTP_TIMEOUT,
    )
    response.raise_for_status()
    return True
