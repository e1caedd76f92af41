"""
Configuration module.

This module loads application settings from the environment (and a local
.env file) and exposes the map widget configuration served to the browser.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-12
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

root_env = Path(BASE_DIR) / ".env"
if root_env.exists():
    load_dotenv(dotenv_path=root_env)

# --- Map widget ---
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")
DEFAULT_CENTER = {
    "lat": float(os.getenv("DEFAULT_CENTER_LAT", "0.1957")),
    "lng": float(os.getenv("DEFAULT_CENTER_LNG", "36.4148")),
}
DEFAULT_ZOOM = int(os.getenv("DEFAULT_ZOOM", "13"))

# --- Document store ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hazard_map.db")

# --- Blob storage ---
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(BASE_DIR, "uploads"))
UPLOAD_URL_PREFIX = "/uploads"
MAX_PHOTO_BYTES = 5 * 1024 * 1024

# --- Proximity alerts ---
ALERT_RADIUS_KM = float(os.getenv("ALERT_RADIUS_KM", "0.1"))
PROXIMITY_INTERVAL_SECONDS = float(os.getenv("PROXIMITY_INTERVAL_SECONDS", "10"))

# --- Auth ---
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY")
OAUTH_CLIENT_ID = os.getenv("OAUTH_CLIENT_ID")
OAUTH_CLIENT_SECRET = os.getenv("OAUTH_CLIENT_SECRET")
OAUTH_REDIRECT_URI = os.getenv("OAUTH_REDIRECT_URI", "http://localhost:8000/auth/callback")
OAUTH_METADATA_URL = os.getenv(
    "OAUTH_METADATA_URL", "https://accounts.google.com/.well-known/openid-configuration"
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

MARKER_ICONS = {
    "pothole": "https://maps.google.com/mapfiles/ms/icons/red-dot.png",
    "speed_bump": "https://maps.google.com/mapfiles/ms/icons/yellow-dot.png",
    "uneven_surface": "https://maps.google.com/mapfiles/ms/icons/orange-dot.png",
}

SEVERITY_COLORS = {
    "low": "#16a34a",
    "medium": "#f59e0b",
    "high": "#dc2626",
}


def get_map_settings() -> Dict[str, Any]:
    """Get the configuration consumed by the browser map widget.

    Returns:
        Dictionary with the maps API key, default center and zoom, marker
        icons, severity colours and proximity alert parameters.
    """
    from logic.validation import HAZARD_TYPES, SEVERITY_LEVELS

    return {
        "api_key": GOOGLE_MAPS_API_KEY,
        "default_center": dict(DEFAULT_CENTER),
        "zoom": DEFAULT_ZOOM,
        "hazard_types": [
            {"value": key, "label": label, "icon": MARKER_ICONS.get(key)}
            for key, label in HAZARD_TYPES.items()
        ],
        "severity_levels": list(SEVERITY_LEVELS),
        "severity_colors": dict(SEVERITY_COLORS),
        "alert_radius_km": ALERT_RADIUS_KM,
        "proximity_interval_seconds": PROXIMITY_INTERVAL_SECONDS,
        "max_photo_bytes": MAX_PHOTO_BYTES,
    }


def resolve_map_center(lat: Optional[float], lng: Optional[float]) -> Dict[str, float]:
    """Pick the map center for a client.

    Falls back to the default center when the browser could not provide a
    usable position, either because it reported none or because the
    reported one is off the map.

    Args:
        lat: Latitude reported by the browser, if any.
        lng: Longitude reported by the browser, if any.

    Returns:
        Dictionary with lat and lng.
    """
    if not is_known_position(lat, lng):
        return dict(DEFAULT_CENTER)
    return {"lat": lat, "lng": lng}


def is_known_position(lat: Optional[float], lng: Optional[float]) -> bool:
    """True when both coordinates are present and on the map."""
    if lat is None or lng is None:
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0
