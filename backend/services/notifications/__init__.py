"""
Outbound offer notifications.

Two independent, best-effort channels:
    - mailer: email through the Resend REST API
    - line_push: LINE Messaging API push message
"""

from .offer_notifier import OfferDelivery, build_response_links, notify_offer

__all__ = [
    "OfferDelivery",
    "build_response_links",
    "notify_offer",
]
