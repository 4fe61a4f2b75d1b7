"""
Geographic utility functions.

This module provides core geospatial calculations used throughout the application.
"""

from math import radians, cos, sin, asin, sqrt
from typing import Tuple

KM_PER_DEGREE_LAT = 111.0


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate distance between two points in meters using Haversine formula.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in meters
    """
    lat1, lon1, lat2, lon2 = map(radians, [float(lat1), float(lon1), float(lat2), float(lon2)])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * asin(sqrt(a))
    r = 6371000  # Earth's radius in meters
    return c * r


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in kilometers."""
    return calculate_distance(lat1, lon1, lat2, lon2) / 1000.0


def bounding_box(lat: float, lon: float, radius_km: float) -> Tuple[float, float, float, float]:
    """
    Conservative lat/lon box around a point, used as a cheap DB prefilter
    before the exact Haversine check.

    Args:
        lat: Center latitude
        lon: Center longitude
        radius_km: Search radius in kilometers

    Returns:
        (min_lat, max_lat, min_lon, max_lon). Longitudes are normalized to
        [-180, 180]; when the box crosses the antimeridian min_lon > max_lon
        and the box covers lon >= min_lon OR lon <= max_lon.
    """
    lat = float(lat)
    lon = float(lon)
    lat_offset = radius_km / KM_PER_DEGREE_LAT

    # avoid division by zero near the poles
    c = abs(cos(radians(lat)))
    if c < 0.01:
        c = 0.01
    lon_offset = radius_km / (KM_PER_DEGREE_LAT * c)

    min_lat = max(lat - lat_offset, -90.0)
    max_lat = min(lat + lat_offset, 90.0)
    if lon_offset >= 180.0:
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, normalize_longitude(lon - lon_offset), normalize_longitude(lon + lon_offset)


def normalize_longitude(lon: float) -> float:
    """Wrap a longitude into [-180, 180]."""
    if -180.0 <= lon <= 180.0:
        return lon
    return (lon + 180.0) % 360.0 - 180.0


def crosses_antimeridian(min_lon: float, max_lon: float) -> bool:
    return min_lon > max_lon
