"""
Great-circle helpers for distributor matching.
"""

import math

EARTH_RADIUS_METERS = 6_371_000.0


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in meters between two WGS84 points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(
    lat: float, lng: float, radius_meters: float
) -> tuple[float, float, float, float]:
    """Return ``(min_lat, max_lat, min_lng, max_lng)`` enclosing a circle.

    Used as an index-friendly SQL prefilter; exact distance is checked
    afterwards with :func:`haversine_meters`.
    """
    lat_delta = math.degrees(radius_meters / EARTH_RADIUS_METERS)
    cos_lat = math.cos(math.radians(lat))
    if cos_lat < 1e-6:
        lng_delta = 180.0
    else:
        lng_delta = min(180.0, math.degrees(radius_meters / (EARTH_RADIUS_METERS * cos_lat)))
    return (
        max(-90.0, lat - lat_delta),
        min(90.0, lat + lat_delta),
        lng - lng_delta,
        lng + lng_delta,
    )


def longitude_ranges(min_lng: float, max_lng: float) -> list[tuple[float, float]]:
    """Fold a longitude span from :func:`bounding_box` back into [-180, 180].

    A span crossing the antimeridian comes back as two ranges, one on
    each side of it.
    """
    if max_lng - min_lng >= 360.0:
        return [(-180.0, 180.0)]
    if min_lng < -180.0:
        return [(min_lng + 360.0, 180.0), (-180.0, max_lng)]
    if max_lng > 180.0:
        return [(min_lng, 180.0), (-180.0, max_lng - 360.0)]
    return [(min_lng, max_lng)]
