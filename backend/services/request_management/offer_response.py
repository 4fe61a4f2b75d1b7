"""
Accept/reject handling for offers, reached from the emailed or pushed links.

Every state change is a guarded UPDATE (compare-and-set), so concurrent
responders, the expiry sweep and advance converge without in-process locks.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from realtime.notifications import notify_request_event
from service_requests.models import Match, ServiceRequest
from services.matching import advance

logger = logging.getLogger(__name__)

ACCEPT = "accept"
REJECT = "reject"
DECISIONS = (ACCEPT, REJECT)

MATCHED = "matched"
REJECTED = "rejected"
NOT_FOUND = "not_found"
ALREADY_FINALIZED = "already_finalized"
EXPIRED = "expired"

RESPONSE_MESSAGES = {
    MATCHED: "Thank you. The match is confirmed.",
    REJECTED: "Your decline has been received. We will contact the next professional.",
    NOT_FOUND: "This offer could not be found.",
    ALREADY_FINALIZED: "This request is already closed.",
    EXPIRED: "This link has expired.",
}


@dataclass
class RespondResult:
    """Result object for offer responses."""
    outcome: str
    match: Optional[Match] = None
    next_outcome: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in (MATCHED, REJECTED)

    @property
    def message(self) -> str:
        return RESPONSE_MESSAGES[self.outcome]


class _ResponseLost(Exception):
    """A guarded update matched no row; rolls back the accept transaction."""

    def __init__(self, outcome: str):
        super().__init__(outcome)
        self.outcome = outcome


def respond_to_match(match_id, decision: str) -> RespondResult:
    """
    Apply a professional's accept/reject decision to an offer.

    Args:
        match_id: Match primary key from the link
        decision: "accept" or "reject"

    Returns:
        RespondResult; terminal conditions are outcomes, not exceptions
    """
    if decision not in DECISIONS:
        raise ValueError(f"decision must be one of {DECISIONS}")

    match = Match.objects.select_related("request").filter(pk=match_id).first()
    if match is None:
        return RespondResult(outcome=NOT_FOUND)

    if match.request.status != ServiceRequest.STATUS_PENDING:
        return RespondResult(outcome=ALREADY_FINALIZED, match=match)

    now = timezone.now()
    if match.status != Match.STATUS_WAITING or match.expires_at <= now:
        return RespondResult(outcome=EXPIRED, match=match)

    if decision == ACCEPT:
        return _accept(match, now)
    return _reject(match, now)


def _accept(match: Match, now) -> RespondResult:
    service_request = match.request

    try:
        with transaction.atomic():
            claimed = Match.objects.filter(
                pk=match.pk,
                status=Match.STATUS_WAITING,
                expires_at__gt=now,
            ).update(status=Match.STATUS_ACCEPTED, responded_at=now)
            if not claimed:
                raise _ResponseLost(_lost_outcome(service_request))

            finalized = ServiceRequest.objects.filter(
                pk=service_request.pk,
                status=ServiceRequest.STATUS_PENDING,
            ).update(status=ServiceRequest.STATUS_MATCHED, matched_at=now)
            if not finalized:
                raise _ResponseLost(ALREADY_FINALIZED)

            superseded = (
                Match.objects.filter(request_id=service_request.pk, status=Match.STATUS_WAITING)
                .exclude(pk=match.pk)
                .update(status=Match.STATUS_EXPIRED, responded_at=now)
            )
    except _ResponseLost as lost:
        logger.info("Accept of match %s lost the race: %s", match.pk, lost.outcome)
        return RespondResult(outcome=lost.outcome, match=match)
    except IntegrityError:
        # Accepted-match partial unique index
        logger.info("Accept of match %s hit the accepted-match constraint", match.pk)
        return RespondResult(outcome=ALREADY_FINALIZED, match=match)

    match.status = Match.STATUS_ACCEPTED
    match.responded_at = now
    service_request.status = ServiceRequest.STATUS_MATCHED
    service_request.matched_at = now

    logger.info(
        "Request %s matched to professional %s via match %s (%d other offer(s) expired)",
        service_request.pk, match.professional_id, match.pk, superseded
    )

    try:
        notify_request_event("request_matched", service_request, "A professional has accepted your request.")
    except Exception:
        logger.exception("Failed to push request_matched for request %s", service_request.pk)

    return RespondResult(outcome=MATCHED, match=match)


def _reject(match: Match, now) -> RespondResult:
    service_request = match.request

    rejected = Match.objects.filter(
        pk=match.pk,
        status=Match.STATUS_WAITING,
        expires_at__gt=now,
    ).update(status=Match.STATUS_REJECTED, responded_at=now)
    if not rejected:
        outcome = _lost_outcome(service_request)
        logger.info("Reject of match %s lost the race: %s", match.pk, outcome)
        return RespondResult(outcome=outcome, match=match)

    match.status = Match.STATUS_REJECTED
    match.responded_at = now
    logger.info("Professional %s declined request %s", match.professional_id, service_request.pk)

    next_outcome = None
    try:
        next_outcome = advance(service_request.pk).outcome
    except Exception:
        logger.exception("Advance after reject of match %s failed", match.pk)

    return RespondResult(outcome=REJECTED, match=match, next_outcome=next_outcome)


def _lost_outcome(service_request: ServiceRequest) -> str:
    """A closed request wins over a stale link when both explain a lost update."""
    still_pending = ServiceRequest.objects.filter(
        pk=service_request.pk,
        status=ServiceRequest.STATUS_PENDING,
    ).exists()
    return EXPIRED if still_pending else ALREADY_FINALIZED
