"""
Tests for validation and sanitization utilities.

Run with: python -m pytest tests/test_validation.py
"""

import pytest
from fastapi import HTTPException

from logic.validation import (
    HAZARD_TYPES,
    MAX_DESCRIPTION_LEN,
    normalize_hazard_type,
    parse_type_filter,
    sanitise_description,
    validate_coordinates,
    validate_severity,
)


def test_hazard_types_are_the_fixed_set():
    assert set(HAZARD_TYPES) == {"pothole", "speed_bump", "uneven_surface"}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("pothole", "pothole"),
        ("Pothole", "pothole"),
        ("Speed Bump", "speed_bump"),
        ("speed-bump", "speed_bump"),
        ("SPEED_BUMP", "speed_bump"),
        ("  uneven surface ", "uneven_surface"),
    ],
)
def test_normalize_hazard_type(raw, expected):
    assert normalize_hazard_type(raw) == expected


@pytest.mark.parametrize("raw", ["flood", "", "pot hole", None, 3])
def test_normalize_hazard_type_rejects_unknown(raw):
    with pytest.raises(HTTPException) as exc:
        normalize_hazard_type(raw)
    assert exc.value.status_code == 400


def test_parse_type_filter():
    assert parse_type_filter(None) is None
    assert parse_type_filter("") is None
    assert parse_type_filter("all") is None
    assert parse_type_filter("ALL") is None
    assert parse_type_filter("Speed Bump") == "speed_bump"
    with pytest.raises(HTTPException):
        parse_type_filter("landslide")


def test_validate_severity():
    assert validate_severity("low") == "low"
    assert validate_severity(" High ") == "high"
    for bad in ("critical", "", None, 2):
        with pytest.raises(HTTPException) as exc:
            validate_severity(bad)
        assert exc.value.status_code == 400


def test_validate_coordinates():
    assert validate_coordinates(40.7128, -74.0060) == (40.7128, -74.0060)
    assert validate_coordinates("1.5", "2") == (1.5, 2.0)
    assert validate_coordinates(-90, 180) == (-90.0, 180.0)


@pytest.mark.parametrize(
    "lat, lng",
    [
        (91, 0),
        (-90.5, 0),
        (0, 180.1),
        (0, -181),
        (None, 0),
        ("abc", 0),
        (True, 0),
        (float("nan"), 0),
    ],
)
def test_validate_coordinates_rejects_invalid(lat, lng):
    with pytest.raises(HTTPException) as exc:
        validate_coordinates(lat, lng)
    assert exc.value.status_code == 400


def test_sanitise_description():
    assert sanitise_description(None) == ""
    assert sanitise_description("  deep hole  ") == "deep hole"
    assert sanitise_description("x" * MAX_DESCRIPTION_LEN) == "x" * MAX_DESCRIPTION_LEN
    with pytest.raises(HTTPException):
        sanitise_description("x" * (MAX_DESCRIPTION_LEN + 1))
