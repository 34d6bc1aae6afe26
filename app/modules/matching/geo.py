"""Great-circle distance helpers.

Straight-line (haversine) distance is used as a filter and sort key only; it
does not model road networks, so real travel distance is always longer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from app.shared.exceptions import InvalidCoordinateException

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """Latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


def validate_point(point: GeoPoint) -> GeoPoint:
    """Reject NaN, infinite or out-of-range coordinates."""
    if not (math.isfinite(point.lat) and math.isfinite(point.lng)):
        raise InvalidCoordinateException(f"Coordinate is not a finite number: ({point.lat}, {point.lng})")
    if abs(point.lat) > 90:
        raise InvalidCoordinateException(f"Latitude out of range: {point.lat}")
    if abs(point.lng) > 180:
        raise InvalidCoordinateException(f"Longitude out of range: {point.lng}")
    return point


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance in kilometres between two points."""
    validate_point(a)
    validate_point(b)
    if a == b:
        return 0.0

    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    delta_lat = lat2 - lat1
    delta_lng = math.radians(b.lng - a.lng)

    h = math.sin(delta_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lng / 2) ** 2
    # min() guards against h drifting above 1.0 for antipodal points
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))
