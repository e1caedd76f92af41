"""
Proximity alert routes.

This module exposes a one-shot proximity check and the location updates that
drive each client's periodic proximity scan. Alerts found by the scan are
delivered over the client's SSE stream.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-15
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from logic.hazards import fetch_hazards, load_all_hazards
from logic.proximity import ProximityMonitor, check_proximity
from logic.validation import validate_coordinates
from server.broadcast import notify_proximity_alert, toast


class Position(BaseModel):
    """Request model for a one-shot proximity check.

    Coordinates are checked by validate_coordinates so bad values get a 400.
    """

    lat: Any
    lng: Any


class LocationUpdate(BaseModel):
    """Request model for a client location update."""

    client_id: str
    lat: Any
    lng: Any


async def _toast_error(client_id: str, message: str):
    await toast(client_id, message, level="error")


router = APIRouter()

monitor = ProximityMonitor(
    load_hazards=load_all_hazards,
    notify=notify_proximity_alert,
    on_error=_toast_error,
)


@router.post("/api/proximity/check")
def proximity_check(position: Position, db: Session = Depends(get_db)):
    """Check a position against every hazard once.

    Returns:
        Dictionary with the alerts and the radius used.
    """
    lat, lng = validate_coordinates(position.lat, position.lng)
    try:
        hazards = fetch_hazards(db)
    except SQLAlchemyError:
        raise HTTPException(500, "Failed to load hazards")

    return {
        "alerts": check_proximity(lat, lng, hazards, monitor.radius_km),
        "radius_km": monitor.radius_km,
    }


@router.post("/api/location")
async def update_location(update: LocationUpdate):
    """Record a client's location and (re)start its periodic scan.

    Returns:
        Dictionary with watch status and polling interval.
    """
    client_id = update.client_id.strip()
    if not client_id:
        raise HTTPException(400, "Missing client id")
    lat, lng = validate_coordinates(update.lat, update.lng)

    monitor.update_location(client_id, lat, lng)

    return {
        "status": "watching",
        "client_id": client_id,
        "interval_seconds": monitor.interval,
    }


@router.delete("/api/location/{client_id}")
async def stop_watching(client_id: str):
    """Stop the periodic scan for a client."""
    return {"success": monitor.stop(client_id)}
