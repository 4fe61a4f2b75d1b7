"""
Service request intake: geocode, persist, start matching.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from service_requests.models import ServiceRequest
from services.geocoding import geocode_address
from services.matching import AdvanceResult, advance

logger = logging.getLogger(__name__)


@dataclass
class IntakeResult:
    """Created request plus the outcome of its first advance (None if it failed)."""
    service_request: ServiceRequest
    advance: Optional[AdvanceResult] = None


def create_service_request(
    client_name: str,
    client_email: str,
    address: str,
    note: str = "",
    client_phone: str = "",
    service: str = "",
    plan_key: str = "",
    radius_km: Optional[float] = None,
) -> IntakeResult:
    """
    Create a pending service request and offer it to the first candidate.

    Args:
        client_name: Customer name
        client_email: Customer email (used for "my requests" lookups)
        address: Free-text service address, geocoded before saving
        note: Optional note, may carry a "[サービス] <plan title>" line
        client_phone: Optional customer phone
        service: Optional service key for plan label requirements
        plan_key: Optional plan key for plan label requirements
        radius_km: Search radius for the first advance (default from settings)

    Returns:
        IntakeResult with the persisted request

    Raises:
        GeocodingError: address could not be resolved; nothing is saved
    """
    latitude, longitude = geocode_address(address)

    service_request = ServiceRequest.objects.create(
        client_name=client_name,
        client_email=client_email.strip(),
        client_phone=client_phone or "",
        address=address,
        latitude=round(latitude, 6),
        longitude=round(longitude, 6),
        note=note or "",
        service=service or "",
        plan_key=plan_key or "",
        status=ServiceRequest.STATUS_PENDING,
    )
    logger.info(
        "Created request %s for %s at (%.6f, %.6f)",
        service_request.id, service_request.client_email, latitude, longitude
    )

    # The request stands even if the first advance fails; the sweep or an
    # admin restart picks it up later.
    first_advance = None
    try:
        first_advance = advance(service_request.id, radius_km=radius_km)
    except Exception:
        logger.exception("Initial advance failed for request %s", service_request.id)

    return IntakeResult(service_request=service_request, advance=first_advance)
