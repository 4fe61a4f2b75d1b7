"""
Address geocoding through the Google Geocoding API.

Failure here is terminal for request intake: callers must not persist a
request whose address could not be resolved.
"""

import logging
from typing import Tuple

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


class GeocodingError(Exception):
    """Raised when an address cannot be resolved to coordinates."""

    def __init__(self, message: str, provider_status: str = "UNKNOWN"):
        super().__init__(message)
        self.provider_status = provider_status


def geocode_address(address: str) -> Tuple[float, float]:
    """
    Resolve a free-text address to (latitude, longitude).

    Raises:
        GeocodingError: missing API key, provider unreachable, or no result
    """
    api_key = settings.GOOGLE_MAPS_API_KEY
    if not api_key:
        raise GeocodingError("GOOGLE_MAPS_API_KEY is missing", provider_status="NOT_CONFIGURED")

    params = {
        "address": address,
        "key": api_key,
        "language": settings.GEOCODING_LANGUAGE,
    }

    try:
        response = requests.get(GEOCODE_URL, params=params, timeout=settings.GEOCODING_HTTP_TIMEOUT)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Geocoding request failed for %r: %s", address, e)
        raise GeocodingError(f"geocoding failed: {e}", provider_status="UNREACHABLE") from e

    provider_status = payload.get("status") or "UNKNOWN"
    results = payload.get("results") or []
    if provider_status != "OK" or not results:
        logger.info("Geocoding returned %s for %r", provider_status, address)
        raise GeocodingError(f"geocoding failed: {provider_status}", provider_status=provider_status)

    location = results[0]["geometry"]["location"]
    return float(location["lat"]), float(location["lng"])
