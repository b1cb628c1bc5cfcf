"""
Great-circle distance between two geo-points (Haversine formula).

Points are ``GeoPoint(longitude, latitude)`` in degrees, matching the
``[lng, lat]`` order used by the stored location documents and the API.
Road distance would need a routing service; straight-line distance is what
ride pricing is defined on.

Complexity: O(1) per call.
"""

import math

from .entities import GeoPoint

EARTH_RADIUS_KM = 6_371.0


def haversine_km(origin: GeoPoint, destination: GeoPoint) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(destination.latitude)
    dlat = lat2 - lat1
    dlng = math.radians(destination.longitude - origin.longitude)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))
