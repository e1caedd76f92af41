"""Database setup and models for the hazard collection.

This module provides the database connection, models, and utilities
for storing hazards and their report history using SQLAlchemy.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from logic.config import DATABASE_URL

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


def _new_id():
    return uuid.uuid4().hex


def _isoformat(value):
    if value is None:
        return None
    if value.tzinfo is None:
        # SQLite drops tzinfo on the way back out
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class Hazard(Base):
    """A road hazard reported at a point on the map.

    Attributes:
        id: Opaque document ID.
        type: Hazard type key (pothole, speed_bump, uneven_surface).
        severity: Severity level (low, medium, high).
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        description: Free-text description.
        photo_url: Public URL of the uploaded photo, if any.
        created_by: Email of the reporter, or 'anonymous'.
        created_at: When the hazard was first reported.
        reports: Ordered report history, oldest first.
    """

    __tablename__ = "hazards"

    id = Column(String(32), primary_key=True, default=_new_id)
    type = Column(String(32), nullable=False, index=True)
    severity = Column(String(16), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    description = Column(Text, nullable=False, default="")
    photo_url = Column(String(500), nullable=True)
    created_by = Column(String(255), nullable=False, default="anonymous")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    reports = relationship(
        "HazardReport",
        back_populates="hazard",
        order_by="HazardReport.id",
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        """Convert hazard to the JSON document shape used by the API.

        Returns:
            Dictionary representation of the hazard, including reports.
        """
        return {
            "id": self.id,
            "type": self.type,
            "severity": self.severity,
            "location": {"lat": self.latitude, "lng": self.longitude},
            "description": self.description or "",
            "photoURL": self.photo_url,
            "createdBy": self.created_by,
            "createdAt": _isoformat(self.created_at),
            "reports": [report.to_dict() for report in self.reports],
        }


class HazardReport(Base):
    """One sighting of a hazard.

    Attributes:
        id: Primary key auto-incrementing ID, also the report order.
        hazard_id: ID of the hazard this report belongs to.
        reporter: Email of the reporter, or 'anonymous'.
        reported_at: When the report was made.
        severity: Severity observed by this reporter.
        has_photo: Whether a photo accompanied the report.
    """

    __tablename__ = "hazard_reports"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    hazard_id = Column(String(32), ForeignKey("hazards.id"), nullable=False, index=True)
    reporter = Column(String(255), nullable=False, default="anonymous")
    reported_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    severity = Column(String(16), nullable=False)
    has_photo = Column(Boolean, nullable=False, default=False)

    hazard = relationship("Hazard", back_populates="reports")

    def to_dict(self):
        return {
            "reporter": self.reporter,
            "date": _isoformat(self.reported_at),
            "severity": self.severity,
            "hasPhoto": bool(self.has_photo),
        }


def get_db():
    """Dependency for getting database session.

    Yields:
        Database session that will be closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize the database by creating all tables."""
    Base.metadata.create_all(bind=engine)
