"""Email delivery through the Resend REST API."""

import logging
from typing import Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"


def send_mail(to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
    """
    Send one email.

    Returns:
        True if the provider accepted the message, False for a dry run
        (no RESEND_API_KEY configured)

    Raises:
        requests.RequestException: provider unreachable or rejected the message
    """
    api_key = settings.RESEND_API_KEY
    if not api_key:
        logger.info("[MAIL:DRYRUN] to=%s subject=%s", to, subject)
        return False

    body = {
        "from": settings.MAIL_FROM,
        "to": to,
        "subject": subject,
        "html": html,
    }
    if text:
        body["text"] = text

    response = requests.post(
        RESEND_URL,
        json=body,
        headers={"Authorization": f"Bearer {api_key}"},
        timeout=settings.NOTIFICATION_HTTP_TIMEOUT,
    )
    response.raise_for_status()
    return True
