"""
Professional directory lookups.

The matching engine only reads from here: it never mutates professionals.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from django.db.models import Q

from common.utils.geo import bounding_box, crosses_antimeridian, distance_km
from professionals.models import PlanRequirement, Professional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A professional within radius of a request, with the computed distance."""
    professional: Professional
    distance_km: float

    @property
    def id(self) -> int:
        return self.professional.id


def find_nearby_professionals(
    lat,
    lng,
    radius_km: float,
    required_labels: Optional[Iterable[str]] = None,
) -> List[Candidate]:
    """
    Find active professionals within radius of a point, nearest first.

    Args:
        lat: Latitude of the request
        lng: Longitude of the request
        radius_km: Search radius in kilometers
        required_labels: Labels every candidate must carry (optional)

    Returns:
        List of Candidate sorted by distance (closest first), ties by id
    """
    min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius_km)

    # Cheap box prefilter in the DB, exact Haversine below
    if crosses_antimeridian(min_lng, max_lng):
        lng_filter = Q(longitude__gte=min_lng) | Q(longitude__lte=max_lng)
    else:
        lng_filter = Q(longitude__gte=min_lng, longitude__lte=max_lng)

    professionals = Professional.objects.filter(
        lng_filter,
        is_active=True,
        latitude__isnull=False,
        longitude__isnull=False,
        latitude__gte=min_lat,
        latitude__lte=max_lat,
    )

    required = list(required_labels or [])

    candidates: List[Candidate] = []
    for professional in professionals:
        if required and not professional.has_labels(required):
            continue

        distance = distance_km(
            float(lat),
            float(lng),
            float(professional.latitude),
            float(professional.longitude),
        )
        if distance <= radius_km:
            candidates.append(Candidate(professional=professional, distance_km=distance))

    # Sort closest → farthest
    candidates.sort(key=lambda c: (c.distance_km, c.professional.id))

    logger.debug(
        "Directory lookup at (%s, %s) radius=%skm labels=%s -> %d candidates",
        lat, lng, radius_km, required, len(candidates)
    )
    return candidates


def required_labels_for(service: str, plan_key: str) -> List[str]:
    """Labels required for a (service, plan) pair; empty when unconstrained."""
    if not service or not plan_key:
        return []

    requirement = PlanRequirement.objects.filter(service=service, plan_key=plan_key).first()
    if requirement is None or not isinstance(requirement.required_labels, list):
        return []
    return requirement.required_labels


def upsert_plan_requirement(service: str, plan_key: str, required_labels: List[str]) -> PlanRequirement:
    requirement, created = PlanRequirement.objects.update_or_create(
        service=service,
        plan_key=plan_key,
        defaults={"required_labels": required_labels},
    )
    logger.info(
        "%s plan requirement %s/%s -> %s",
        "Created" if created else "Updated", service, plan_key, required_labels
    )
    return requirement
