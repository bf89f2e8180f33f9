from __future__ import annotations

import math

from src.domain.models import GeoPoint


def haversine_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""

    r = 6371000.0
    lat1 = math.radians(a.lat)
    lon1 = math.radians(a.lon)
    lat2 = math.radians(b.lat)
    lon2 = math.radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    )
    return 2.0 * r * math.asin(math.sqrt(s))


WALK_SPEED_M_PER_MIN = 60.0
DEFAULT_WALK_MINUTES = 5
MIN_WALK_MINUTES = 1
MAX_WALK_MINUTES = 30


def estimate_walk_minutes(a: GeoPoint, b: GeoPoint) -> int:
    """Straight-line walk estimate, clamped to a plausible transfer range."""

    minutes = math.ceil(haversine_distance_m(a, b) / WALK_SPEED_M_PER_MIN)
    return max(MIN_WALK_MINUTES, min(MAX_WALK_MINUTES, minutes))
