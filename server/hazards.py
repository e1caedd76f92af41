"""
Hazard API routes.

This module contains endpoints for listing, filtering, submitting and
exporting road hazards, and for adding follow-up reports to a hazard.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-15
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from logic.hazards import (
    add_hazard,
    add_report,
    fetch_hazards,
    filter_hazards,
    get_hazard,
    hazards_to_csv,
)
from logic.storage import InvalidPhotoError, PhotoTooLargeError, check_photo_size
from logic.validation import (
    normalize_hazard_type,
    parse_type_filter,
    sanitise_description,
    validate_coordinates,
    validate_severity,
)
from server.auth import get_current_user_email
from server.broadcast import notify_hazard_added
from server.proximity import monitor

log = logging.getLogger(__name__)

router = APIRouter()


class ReportCreate(BaseModel):
    """Request model for adding a report to an existing hazard."""

    severity: str
    has_photo: bool = False


def _load_hazards(db: Session):
    try:
        return fetch_hazards(db)
    except SQLAlchemyError:
        raise HTTPException(500, "Failed to load hazards")


def _save_hazard(db: Session, hazard_data, photo):
    hazard_id = add_hazard(db, hazard_data, photo=photo)
    return get_hazard(db, hazard_id)


@router.get("/api/hazards")
def list_hazards(type: Optional[str] = None, db: Session = Depends(get_db)):
    """List hazards, optionally filtered by type.

    Args:
        type: Hazard type to keep, or "all".

    Returns:
        List of hazard documents.
    """
    hazard_type = parse_type_filter(type)
    return filter_hazards(_load_hazards(db), hazard_type)


@router.get("/api/hazards/export.csv")
def export_hazards_csv(type: Optional[str] = None, db: Session = Depends(get_db)):
    """Download hazards as CSV.

    Returns:
        CSV file with one row per hazard.
    """
    hazard_type = parse_type_filter(type)
    content = hazards_to_csv(filter_hazards(_load_hazards(db), hazard_type))

    def iter_csv():
        yield content

    return StreamingResponse(
        iter_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=hazards.csv"},
    )


@router.post("/api/hazards")
async def create_hazard(
    type: str = Form(...),
    severity: str = Form(...),
    lat: str = Form(...),
    lng: str = Form(...),
    description: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    user_email: Optional[str] = Depends(get_current_user_email),
    db: Session = Depends(get_db),
):
    """Submit a new hazard report.

    Validates the form, rejects oversized photos before storing anything,
    writes the hazard and tells connected clients about it. The photo check
    and database writes run in the threadpool.

    Returns:
        The created hazard document.

    Raises:
        HTTPException: 400 on invalid input, 413 on an oversized photo,
            500 if the photo or hazard could not be saved.
    """
    hazard_type = normalize_hazard_type(type)
    severity = validate_severity(severity)
    lat, lng = validate_coordinates(lat, lng)
    description = sanitise_description(description)

    photo_upload = None
    if photo is not None and photo.filename:
        try:
            if photo.size is not None:
                check_photo_size(photo.size)
            data = await photo.read()
            check_photo_size(len(data))
        except PhotoTooLargeError as e:
            raise HTTPException(413, str(e))
        if data:
            photo_upload = (photo.filename, data)

    hazard_data = {
        "type": hazard_type,
        "severity": severity,
        "lat": lat,
        "lng": lng,
        "description": description,
        "created_by": user_email,
    }

    try:
        hazard = await run_in_threadpool(_save_hazard, db, hazard_data, photo_upload)
    except PhotoTooLargeError as e:
        raise HTTPException(413, str(e))
    except InvalidPhotoError as e:
        raise HTTPException(400, str(e))
    except OSError:
        raise HTTPException(500, "Failed to upload photo")
    except SQLAlchemyError:
        raise HTTPException(500, "Failed to save hazard")

    await notify_hazard_added(hazard)
    monitor.refresh()

    return hazard


@router.get("/api/hazards/{hazard_id}")
def read_hazard(hazard_id: str, db: Session = Depends(get_db)):
    """Get one hazard with its report history.

    Raises:
        HTTPException: If the hazard does not exist.
    """
    hazard = get_hazard(db, hazard_id)
    if hazard is None:
        raise HTTPException(404, f"Hazard '{hazard_id}' not found")
    return hazard


@router.post("/api/hazards/{hazard_id}/reports")
def create_report(
    hazard_id: str,
    report: ReportCreate,
    user_email: Optional[str] = Depends(get_current_user_email),
    db: Session = Depends(get_db),
):
    """Add a report to an existing hazard.

    Returns:
        The updated hazard document.

    Raises:
        HTTPException: If the hazard does not exist or the report is invalid.
    """
    severity = validate_severity(report.severity)

    try:
        hazard = add_report(db, hazard_id, user_email, severity, report.has_photo)
    except SQLAlchemyError:
        raise HTTPException(500, "Failed to save report")

    if hazard is None:
        raise HTTPException(404, f"Hazard '{hazard_id}' not found")
    return hazard
