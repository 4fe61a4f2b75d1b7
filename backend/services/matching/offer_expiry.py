"""
Expire overdue offers and resume matching for their requests.

Designed for periodic external invocation (Celery beat, cron via the
sweep_expired_matches command, or the check-expired endpoint).
"""

import logging
from dataclasses import dataclass
from typing import List

from django.utils import timezone

from service_requests.models import Match, ServiceRequest
from .offer_dispatch import NO_MORE_CANDIDATES, OFFERED, advance

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    expired: int = 0
    advanced: int = 0
    exhausted: int = 0
    failed: int = 0


def sweep_expired(now=None) -> SweepResult:
    """
    Expire waiting offers past their deadline, then advance their requests.

    Returns:
        SweepResult with counts of expired offers and per-request outcomes
    """
    now = now or timezone.now()
    result = SweepResult()

    overdue = list(
        Match.objects.filter(status=Match.STATUS_WAITING, expires_at__lt=now)
        .order_by("expires_at")
        .values_list("id", "request_id")
    )

    affected_requests: List = []
    for match_id, request_id in overdue:
        # Guarded write: a responder may have moved this match since the read
        updated = Match.objects.filter(pk=match_id, status=Match.STATUS_WAITING).update(
            status=Match.STATUS_EXPIRED,
            responded_at=now,
        )
        if not updated:
            continue

        result.expired += 1
        if request_id not in affected_requests:
            affected_requests.append(request_id)

    for request_id in affected_requests:
        if not ServiceRequest.objects.filter(pk=request_id, status=ServiceRequest.STATUS_PENDING).exists():
            continue

        try:
            outcome = advance(request_id)
        except Exception:
            logger.exception("Sweep could not advance request %s", request_id)
            result.failed += 1
            continue

        if outcome.outcome == OFFERED:
            result.advanced += 1
        elif outcome.outcome == NO_MORE_CANDIDATES:
            result.exhausted += 1

    if result.expired:
        logger.info(
            "Sweep expired %d offer(s); advanced %d, exhausted %d, failed %d request(s)",
            result.expired, result.advanced, result.exhausted, result.failed
        )
    return result
