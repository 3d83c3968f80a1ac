"""
Geodesic helpers for GPS fixes
- Great-circle distance (haversine) in meters
- Initial bearing (forward azimuth) in degrees
Inputs are assumed finite; callers validate coordinates first.
"""

import math

EARTH_RADIUS_M = 6371000.0  # mean Earth radius in meters


def to_rad(deg):
    return deg * math.pi / 180.0


def to_deg(rad):
    return rad * 180.0 / math.pi


def haversine_distance(lat1, lon1, lat2, lon2):
    """
    Great-circle distance between two points on Earth in meters.
    """
    lat1_rad = to_rad(lat1)
    lat2_rad = to_rad(lat2)
    dlat = to_rad(lat2 - lat1)
    dlon = to_rad(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    # rounding can push a just past 1.0 for near-antipodal points
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return EARTH_RADIUS_M * c


def distance(a, b):
    """Distance in meters between two objects exposing ``lat``/``lon``"""
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def initial_bearing(a, b):
    """
    Forward azimuth from a to b in degrees, normalized to [0, 360).
    """
    lat1 = to_rad(a.lat)
    lat2 = to_rad(b.lat)
    dlon = to_rad(b.lon - a.lon)

    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    return (to_deg(math.atan2(y, x)) + 360.0) % 360.0


def bearing_difference(previous, current):
    """Signed minimal angle in degrees from ``previous`` to ``current``, in [-180, 180)"""
    return ((current - previous + 540.0) % 360.0) - 180.0
