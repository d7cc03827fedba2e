"""Great-circle helpers for check-in coordinates."""

from __future__ import annotations

import math

from worktrack.models import VisitRecord

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in meters between two lat/lon points (degrees)."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def straight_line_km(prev: VisitRecord, cur: VisitRecord) -> float:
    """Straight-line distance between two check-ins in kilometers.

    Road distance comes from the backend; this is only a lower bound shown next
    to it. Non-finite coordinates give 0.0.
    """

    coords = (prev.latitude, prev.longitude, cur.latitude, cur.longitude)
    if not all(math.isfinite(c) for c in coords):
        return 0.0
    return haversine_m(*coords) / 1000.0
