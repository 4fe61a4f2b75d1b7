"""
Offer dispatch: advance a request to its next candidate.

Handles the daisy-chain pattern for service offers:
1. Offer sent to the nearest unoffered professional
2. Wait for response or timeout
3. If expired/rejected, offer to the next professional
4. Repeat until accepted or no professionals left in radius
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from realtime.notifications import notify_request_event
from service_requests.models import Match, ServiceRequest
from services.notifications import OfferDelivery, notify_offer
from .exceptions import MatchingConflictError
from .offer_builder import select_next_candidate

logger = logging.getLogger(__name__)

OFFERED = "offered"
NO_MORE_CANDIDATES = "no_more_candidates"
ALREADY_RESOLVED = "already_resolved"

# Bound on reselection after losing a candidate to a concurrent advance
MAX_SELECTION_ATTEMPTS = 5


@dataclass
class AdvanceResult:
    """Outcome of one advance call."""
    outcome: str
    request_id: object
    match: Optional[Match] = None
    delivery: Optional[OfferDelivery] = None

    @property
    def offered(self) -> bool:
        return self.outcome == OFFERED


def offer_wait_window() -> timedelta:
    return timedelta(minutes=settings.MATCH_OFFER_WAIT_MINUTES)


def advance(request_id, radius_km: Optional[float] = None) -> AdvanceResult:
    """
    Offer a pending request to the nearest professional not yet offered it.

    Args:
        request_id: ServiceRequest primary key
        radius_km: Search radius in kilometers (defaults to MATCH_DEFAULT_RADIUS_KM)

    Returns:
        AdvanceResult with outcome OFFERED, NO_MORE_CANDIDATES or ALREADY_RESOLVED

    Raises:
        ValueError: radius_km is not positive
        MatchingConflictError: concurrent advances kept taking every pick
    """
    if radius_km is None:
        radius_km = settings.MATCH_DEFAULT_RADIUS_KM
    radius_km = float(radius_km)
    if radius_km <= 0:
        raise ValueError("radius_km must be positive")

    for attempt in range(1, MAX_SELECTION_ATTEMPTS + 1):
        service_request = ServiceRequest.objects.filter(pk=request_id).first()
        if service_request is None or service_request.status != ServiceRequest.STATUS_PENDING:
            logger.info("Advance skipped: request %s missing or already resolved", request_id)
            return AdvanceResult(outcome=ALREADY_RESOLVED, request_id=request_id)

        candidate = select_next_candidate(service_request, radius_km)
        if candidate is None:
            logger.warning(
                "Request %s has no more candidates within %skm; it stays pending for manual follow-up",
                service_request.id, radius_km
            )
            _notify_request_group(
                service_request,
                "matching_exhausted",
                "We could not find an available professional nearby yet. Our team will follow up.",
            )
            return AdvanceResult(outcome=NO_MORE_CANDIDATES, request_id=service_request.id)

        try:
            match = _create_offer(service_request, candidate)
        except IntegrityError:
            # Unique (request, professional): someone else offered this candidate
            logger.info(
                "Professional %s already offered request %s concurrently; reselecting (attempt %d)",
                candidate.id, service_request.id, attempt
            )
            continue

        if match is None:
            logger.info("Request %s was resolved while offering; nothing to do", service_request.id)
            return AdvanceResult(outcome=ALREADY_RESOLVED, request_id=service_request.id)

        delivery = _deliver(match)
        return AdvanceResult(
            outcome=OFFERED,
            request_id=service_request.id,
            match=match,
            delivery=delivery,
        )

    raise MatchingConflictError(
        f"Could not claim a candidate for request {request_id} after {MAX_SELECTION_ATTEMPTS} attempts"
    )


def _create_offer(service_request: ServiceRequest, candidate) -> Optional[Match]:
    """
    Insert a waiting match, or return None if the request stopped being pending.

    The request row is locked so an accept cannot commit between the status
    check and the insert.
    """
    with transaction.atomic():
        locked_pk = (
            ServiceRequest.objects.select_for_update()
            .filter(pk=service_request.pk, status=ServiceRequest.STATUS_PENDING)
            .values_list("pk", flat=True)
            .first()
        )
        if locked_pk is None:
            return None

        match = Match.objects.create(
            request=service_request,
            professional=candidate.professional,
            status=Match.STATUS_WAITING,
            distance_km=round(candidate.distance_km, 3),
            expires_at=timezone.now() + offer_wait_window(),
        )

    logger.info(
        "Offered request %s to professional %s (%.2fkm), match %s expires %s",
        service_request.id, candidate.id, candidate.distance_km, match.id, match.expires_at.isoformat()
    )
    return match


def _deliver(match: Match) -> OfferDelivery:
    """Notify the professional; never raises."""
    try:
        delivery = notify_offer(match)
    except Exception:
        logger.exception("Offer notification failed for match %s", match.id)
        return OfferDelivery()

    if delivery.email or delivery.line:
        Match.objects.filter(pk=match.pk).update(email_sent=delivery.email, line_sent=delivery.line)
        match.email_sent = delivery.email
        match.line_sent = delivery.line
    return delivery


def _notify_request_group(service_request: ServiceRequest, event_type: str, message: str):
    """Push a status event to the customer's realtime channel (best effort)."""
    try:
        notify_request_event(event_type, service_request, message)
    except Exception:
        logger.exception("Failed to push %s for request %s", event_type, service_request.id)
