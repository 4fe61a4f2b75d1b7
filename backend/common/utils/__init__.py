"""Common utility functions."""

from .geo import bounding_box, calculate_distance, crosses_antimeridian, distance_km, normalize_longitude

__all__ = [
    "bounding_box",
    "calculate_distance",
    "crosses_antimeridian",
    "distance_km",
    "normalize_longitude",
]
