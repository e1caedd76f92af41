"""
Basic API routes.

This module contains the fundamental endpoints for serving the map page and
the map widget configuration.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-15
"""

import os
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import FileResponse, HTMLResponse

from logic.config import BASE_DIR, get_map_settings, is_known_position, resolve_map_center

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def index():
    """Serve the main HTML page.

    Returns:
        HTML page from static/index.html.
    """
    return FileResponse(os.path.join(BASE_DIR, "static", "index.html"))


@router.get("/api/map")
def get_map():
    """Get the map widget configuration.

    Returns:
        Dictionary containing the maps API key, default center, zoom, marker
        icons per hazard type and proximity alert parameters.
    """
    return get_map_settings()


@router.get("/api/map/center")
def get_map_center(lat: Optional[float] = None, lng: Optional[float] = None):
    """Get the center for a client's map.

    The page passes its geolocation result. When the position is missing
    (permission denied or unavailable) or off the map, the default center is
    returned.
    """
    center = resolve_map_center(lat, lng)
    return {"center": center, "is_default": not is_known_position(lat, lng)}

