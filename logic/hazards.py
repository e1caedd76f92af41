"""
Hazard data access.

This module adds hazards to the store (uploading any photo first), lists
them back, and appends follow-up reports. Filtering by type happens here,
in-process, over the full list returned by the store.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-14
"""

import csv
import logging
from datetime import datetime, timezone
from io import StringIO
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import Hazard, HazardReport, SessionLocal
from logic.storage import LocalBlobStorage, upload_photo

log = logging.getLogger(__name__)

ANONYMOUS = "anonymous"

# (filename, bytes)
PhotoUpload = Tuple[str, bytes]


def add_hazard(
        db: Session,
        hazard_data: Dict[str, Any],
        photo: Optional[PhotoUpload] = None,
        storage: Optional[LocalBlobStorage] = None,
) -> str:
    """Add a hazard document to the store.

    The photo, if any, is uploaded first and its public URL stored on the
    hazard. The hazard starts with a single report from its submitter.

    Args:
        db: Database session.
        hazard_data: Validated fields: type, severity, lat, lng,
            description and created_by.
        photo: Optional (filename, bytes) tuple.
        storage: Blob store for the photo.

    Returns:
        ID of the new hazard.

    Raises:
        PhotoTooLargeError, InvalidPhotoError: If the photo is rejected.
        OSError: If the photo could not be stored.
        SQLAlchemyError: If the hazard could not be written.
    """
    photo_url = None
    if photo is not None:
        filename, data = photo
        try:
            photo_url = upload_photo(storage or LocalBlobStorage(), filename, data)
        except OSError as e:
            log.error("Error uploading hazard photo %s: %s", filename, e)
            raise

    reporter = hazard_data.get("created_by") or ANONYMOUS
    now = datetime.now(timezone.utc)

    hazard = Hazard(
        type=hazard_data["type"],
        severity=hazard_data["severity"],
        latitude=hazard_data["lat"],
        longitude=hazard_data["lng"],
        description=hazard_data.get("description", ""),
        photo_url=photo_url,
        created_by=reporter,
        created_at=now,
    )
    hazard.reports.append(
        HazardReport(
            reporter=reporter,
            reported_at=now,
            severity=hazard_data["severity"],
            has_photo=photo_url is not None,
        )
    )

    try:
        db.add(hazard)
        db.commit()
        db.refresh(hazard)
    except SQLAlchemyError as e:
        db.rollback()
        log.error("Error adding hazard: %s", e)
        raise

    log.info("Added %s hazard %s at (%.6f, %.6f)", hazard.type, hazard.id, hazard.latitude, hazard.longitude)
    return hazard.id


def fetch_hazards(db: Session) -> List[Dict[str, Any]]:
    """List every hazard in the store.

    Returns:
        Hazard documents in insertion order.

    Raises:
        SQLAlchemyError: If the store could not be read.
    """
    try:
        hazards = db.query(Hazard).order_by(Hazard.created_at).all()
    except SQLAlchemyError as e:
        log.error("Error fetching hazards: %s", e)
        raise
    return [hazard.to_dict() for hazard in hazards]


def load_all_hazards() -> List[Dict[str, Any]]:
    """Fetch hazards using a session of its own, for background checks."""
    db = SessionLocal()
    try:
        return fetch_hazards(db)
    finally:
        db.close()


def filter_hazards(hazards: List[Dict[str, Any]], hazard_type: Optional[str]) -> List[Dict[str, Any]]:
    """Keep only hazards of one type.

    Args:
        hazards: Hazard documents.
        hazard_type: Canonical type key, or None to keep everything.

    Returns:
        Filtered list in the original order.
    """
    if hazard_type is None:
        return list(hazards)
    return [h for h in hazards if h.get("type") == hazard_type]


def get_hazard(db: Session, hazard_id: str) -> Optional[Dict[str, Any]]:
    hazard = db.get(Hazard, hazard_id)
    return hazard.to_dict() if hazard else None


def add_report(
        db: Session,
        hazard_id: str,
        reporter: Optional[str],
        severity: str,
        has_photo: bool = False,
) -> Optional[Dict[str, Any]]:
    """Append a report to an existing hazard.

    Args:
        db: Database session.
        hazard_id: Hazard to report on.
        reporter: Reporter email, or None for anonymous.
        severity: Validated severity level.
        has_photo: Whether the reporter attached a photo.

    Returns:
        Updated hazard document, or None if the hazard does not exist.

    Raises:
        SQLAlchemyError: If the report could not be written.
    """
    hazard = db.get(Hazard, hazard_id)
    if hazard is None:
        return None

    hazard.reports.append(
        HazardReport(
            reporter=reporter or ANONYMOUS,
            reported_at=datetime.now(timezone.utc),
            severity=severity,
            has_photo=has_photo,
        )
    )

    try:
        db.commit()
        db.refresh(hazard)
    except SQLAlchemyError as e:
        db.rollback()
        log.error("Error adding report to hazard %s: %s", hazard_id, e)
        raise

    return hazard.to_dict()


CSV_FIELDS = [
    "id",
    "type",
    "severity",
    "lat",
    "lng",
    "description",
    "photo_url",
    "created_by",
    "created_at",
    "report_count",
]


def hazards_to_csv(hazards: List[Dict[str, Any]]) -> str:
    """Render hazard documents as CSV text."""
    output = StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_FIELDS)
    writer.writeheader()
    for hazard in hazards:
        location = hazard.get("location") or {}
        writer.writerow(
            {
                "id": hazard.get("id"),
                "type": hazard.get("type"),
                "severity": hazard.get("severity"),
                "lat": location.get("lat"),
                "lng": location.get("lng"),
                "description": hazard.get("description", ""),
                "photo_url": hazard.get("photoURL") or "",
                "created_by": hazard.get("createdBy"),
                "created_at": hazard.get("createdAt"),
                "report_count": len(hazard.get("reports", [])),
            }
        )
    return output.getvalue()
