"""
Validation and sanitization utilities.

This module contains functions for validating hazard types, severity levels
and positions, and for sanitizing user-supplied text.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-12
"""

import re
from typing import Any, Optional, Tuple

from fastapi import HTTPException

HAZARD_TYPES = {
    "pothole": "Pothole",
    "speed_bump": "Speed Bump",
    "uneven_surface": "Uneven Surface",
}

SEVERITY_LEVELS = ("low", "medium", "high")
MAX_DESCRIPTION_LEN = 500

ALL_TYPES = "all"


def normalize_hazard_type(value: Any) -> str:
    """Normalize a hazard type to its canonical key.

    Accepts the key itself or its display spelling, e.g. "Speed Bump",
    "speed-bump" and "SPEED_BUMP" all map to "speed_bump".

    Args:
        value: Raw hazard type from the client.

    Returns:
        Canonical hazard type key.

    Raises:
        HTTPException: If the value is not a known hazard type.
    """
    if not isinstance(value, str):
        raise HTTPException(400, "Invalid hazard type")
    key = re.sub(r"[\s\-]+", "_", value.strip().lower())
    if key not in HAZARD_TYPES:
        raise HTTPException(400, f"Invalid hazard type: {value}")
    return key


def parse_type_filter(value: Optional[str]) -> Optional[str]:
    """Parse the type filter from a list request.

    Returns:
        Canonical hazard type key, or None to keep every type.
    """
    if value is None or not value.strip() or value.strip().lower() == ALL_TYPES:
        return None
    return normalize_hazard_type(value)


def validate_severity(value: Any) -> str:
    """Validate a severity level.

    Args:
        value: Raw severity from the client.

    Returns:
        Lowercased severity level.

    Raises:
        HTTPException: If the value is not low, medium or high.
    """
    if not isinstance(value, str) or value.strip().lower() not in SEVERITY_LEVELS:
        raise HTTPException(400, "Invalid severity")
    return value.strip().lower()


def validate_coordinates(lat: Any, lng: Any) -> Tuple[float, float]:
    """Validate a latitude/longitude pair.

    Args:
        lat: Latitude in decimal degrees.
        lng: Longitude in decimal degrees.

    Returns:
        Tuple of (lat, lng) as floats.

    Raises:
        HTTPException: If either value is missing, not numeric, or out of range.
    """
    if isinstance(lat, bool) or isinstance(lng, bool):
        raise HTTPException(400, "Invalid coordinates")
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        raise HTTPException(400, "Invalid coordinates")
    if lat != lat or lng != lng:
        raise HTTPException(400, "Invalid coordinates")
    if not -90.0 <= lat <= 90.0:
        raise HTTPException(400, "Latitude out of range")
    if not -180.0 <= lng <= 180.0:
        raise HTTPException(400, "Longitude out of range")
    return lat, lng


def sanitise_description(value: Optional[str]) -> str:
    """Sanitize a hazard description.

    Args:
        value: Description string, may be None.

    Returns:
        Trimmed description.

    Raises:
        HTTPException: If the description exceeds the maximum length.
    """
    if value is None:
        return ""
    value = value.strip()
    if len(value) > MAX_DESCRIPTION_LEN:
        raise HTTPException(400, "Description too long")
    return value
