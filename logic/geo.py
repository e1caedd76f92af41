"""
Geodesic distance helpers.

This module computes great-circle distances between map positions and
scans the loaded hazards for ones close to a user's location.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-12
"""

import math
from typing import Dict, List, Optional, Tuple

from logic.config import ALERT_RADIUS_KM

EARTH_RADIUS_KM = 6371.0


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres between two lat/lng points.

    Args:
        lat1: Latitude of the first point in decimal degrees.
        lng1: Longitude of the first point in decimal degrees.
        lat2: Latitude of the second point in decimal degrees.
        lng2: Longitude of the second point in decimal degrees.

    Returns:
        Distance in kilometres on a sphere of radius 6371 km.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push a just outside [0, 1] for near-antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def is_nearby(distance_km: float, radius_km: float = ALERT_RADIUS_KM) -> bool:
    """True when a distance is strictly inside the alert radius."""
    return distance_km < radius_km


def hazard_position(hazard: Dict) -> Optional[Tuple[float, float]]:
    """Extract (lat, lng) from a hazard document, or None if it has no position."""
    location = hazard.get("location") or {}
    lat, lng = location.get("lat"), location.get("lng")
    if lat is None or lng is None:
        return None
    return lat, lng


def find_nearby_hazards(
        lat: float, lng: float, hazards: List[Dict], radius_km: float = ALERT_RADIUS_KM
) -> List[Tuple[Dict, float]]:
    """Find every hazard within the alert radius of a position.

    Compares against each loaded hazard in turn; there is no spatial index.

    Args:
        lat: User latitude.
        lng: User longitude.
        hazards: Hazard documents as returned by the store.
        radius_km: Alert radius in kilometres.

    Returns:
        List of (hazard, distance_km) tuples, nearest first.
    """
    nearby: List[Tuple[Dict, float]] = []
    for hazard in hazards:
        position = hazard_position(hazard)
        if position is None:
            continue
        distance = haversine_distance(lat, lng, position[0], position[1])
        if is_nearby(distance, radius_km):
            nearby.append((hazard, distance))

    nearby.sort(key=lambda item: item[1])
    return nearby
