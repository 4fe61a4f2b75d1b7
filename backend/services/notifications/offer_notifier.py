"""
Offer notification dispatch.

Sends one offer to one professional over email and LINE at the same time.
Each channel is best effort: a failure is logged and never reaches the
matching engine, and one channel failing does not stop the other.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from html import escape
from typing import Callable, Dict, Tuple
from urllib.parse import urlencode

from django.conf import settings
from django.urls import reverse

from .line_push import push_text
from .mailer import send_mail

logger = logging.getLogger(__name__)

OFFER_SUBJECT = "[Miles] New service request near you"
SUPERSEDED_NOTICE = "This link becomes invalid as soon as another professional accepts the request."


@dataclass
class OfferDelivery:
    """Per-channel delivery outcome of one offer."""
    email: bool = False
    line: bool = False


def build_response_links(match_id) -> Tuple[str, str]:
    """Return the (accept, reject) URLs embedded in an offer."""
    base = settings.APP_BASE_URL.rstrip("/") + reverse("service_requests:match-respond")
    accept = f"{base}?{urlencode({'id': str(match_id), 'status': 'accept'})}"
    reject = f"{base}?{urlencode({'id': str(match_id), 'status': 'reject'})}"
    return accept, reject


def _offer_email_html(address: str, accept_url: str, reject_url: str) -> str:
    return (
        "<p>A new service request has arrived near you.</p>"
        f"<p><b>Address:</b> {escape(address)}</p>"
        "<p>"
        f'<a href="{escape(accept_url)}">Accept</a>&nbsp;&nbsp;'
        f'<a href="{escape(reject_url)}">Decline</a>'
        "</p>"
        f"<p>{SUPERSEDED_NOTICE}</p>"
    )


def _offer_line_text(address: str, accept_url: str, reject_url: str) -> str:
    return (
        "[Miles] New service request nearby\n"
        f"Address: {address}\n\n"
        f"Accept: {accept_url}\n"
        f"Decline: {reject_url}\n\n"
        f"{SUPERSEDED_NOTICE}"
    )


def notify_offer(match) -> OfferDelivery:
    """
    Deliver an offer to its professional over both channels concurrently.

    Args:
        match: Match instance (with request and professional loaded)

    Returns:
        OfferDelivery with one flag per channel (True = provider accepted it)
    """
    professional = match.professional
    address = match.request.address
    accept_url, reject_url = build_response_links(match.id)

    # Resolve everything from the ORM up front; worker threads only do HTTP
    sends: Dict[str, Callable[[], bool]] = {}
    if professional.email:
        sends["email"] = lambda: send_mail(
            to=professional.email,
            subject=OFFER_SUBJECT,
            html=_offer_email_html(address, accept_url, reject_url),
        )
    if professional.line_user_id:
        sends["line"] = lambda: push_text(
            professional.line_user_id,
            _offer_line_text(address, accept_url, reject_url),
        )

    delivery = OfferDelivery()
    if not sends:
        logger.warning("Professional %s has no contact channel for match %s", professional.id, match.id)
        return delivery

    with ThreadPoolExecutor(max_workers=len(sends), thread_name_prefix="offer-notify") as pool:
        futures = {channel: pool.submit(send) for channel, send in sends.items()}

    for channel, future in futures.items():
        try:
            delivered = bool(future.result())
        except Exception:
            logger.exception("Offer %s: %s delivery to professional %s failed", match.id, channel, professional.id)
            delivered = False
        setattr(delivery, channel, delivered)

    logger.info(
        "Offer %s notified professional %s (email=%s line=%s)",
        match.id, professional.id, delivery.email, delivery.line
    )
    return delivery
