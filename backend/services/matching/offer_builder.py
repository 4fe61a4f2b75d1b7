"""
Pick the next professional to offer a request to.

Uses professional locations and distances to find the closest professional
within the search radius who has not been offered this request before.
"""

import logging
from typing import Optional, Set

from professionals.services import Candidate, find_nearby_professionals, required_labels_for
from service_requests.models import ServiceRequest

logger = logging.getLogger(__name__)


def offered_professional_ids(service_request: ServiceRequest) -> Set[int]:
    """
    Professionals already offered this request, whatever their answer.

    Always read from the match ledger: invocations share no memory.
    """
    return set(service_request.matches.values_list("professional_id", flat=True))


def select_next_candidate(service_request: ServiceRequest, radius_km: float) -> Optional[Candidate]:
    """
    Select the nearest not-yet-offered professional for a request.

    Args:
        service_request: ServiceRequest to find a candidate for
        radius_km: Search radius in kilometers

    Returns:
        The closest eligible Candidate, or None when the radius is exhausted
    """
    already_offered = offered_professional_ids(service_request)
    required = required_labels_for(service_request.service, service_request.plan_key)

    candidates = find_nearby_professionals(
        service_request.latitude,
        service_request.longitude,
        radius_km,
        required_labels=required,
    )

    for candidate in candidates:
        if candidate.id not in already_offered:
            return candidate

    logger.info(
        "No unoffered candidates for request %s (radius=%skm, in_radius=%d, offered=%d)",
        service_request.id, radius_km, len(candidates), len(already_offered)
    )
    return None
