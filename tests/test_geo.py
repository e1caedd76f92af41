"""
Tests for the geodesic distance helpers.

Run with: python -m pytest tests/test_geo.py
"""

import math

import pytest

from logic.geo import (
    EARTH_RADIUS_KM,
    find_nearby_hazards,
    haversine_distance,
    hazard_position,
    is_nearby,
)


def _hazard(hazard_id, lat, lng, hazard_type="pothole"):
    return {"id": hazard_id, "type": hazard_type, "severity": "low", "location": {"lat": lat, "lng": lng}}


def test_haversine_same_point_is_zero():
    assert haversine_distance(40.7128, -74.0060, 40.7128, -74.0060) == 0.0


def test_haversine_nearby_points_under_100m():
    # One ten-thousandth of a degree of longitude at New York's latitude
    distance = haversine_distance(40.7128, -74.0060, 40.7128, -74.0061)
    expected = EARTH_RADIUS_KM * math.radians(0.0001) * math.cos(math.radians(40.7128))

    assert distance < 0.1
    assert distance == pytest.approx(expected, rel=1e-6)
    assert distance == pytest.approx(0.00843, abs=1e-4)


def test_haversine_one_degree_of_latitude():
    distance = haversine_distance(0.0, 0.0, 1.0, 0.0)
    assert distance == pytest.approx(EARTH_RADIUS_KM * math.pi / 180, rel=1e-9)


def test_haversine_is_symmetric():
    a = haversine_distance(51.5074, -0.1278, 48.8566, 2.3522)
    b = haversine_distance(48.8566, 2.3522, 51.5074, -0.1278)
    assert a == pytest.approx(b)
    # London to Paris
    assert a == pytest.approx(343.5, abs=1.0)


def test_haversine_antipodal_points():
    distance = haversine_distance(0.0, 0.0, 0.0, 180.0)
    assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM)


@pytest.mark.parametrize("lng_offset", [179.5, 180.0, -180.0])
def test_haversine_near_antipodal_points_stay_in_range(lng_offset):
    half_circumference = math.pi * EARTH_RADIUS_KM
    for lat in range(-89, 90):
        for lng in (-179.5, -90.0, 0.0, 90.0, 179.5):
            distance = haversine_distance(lat, lng, -lat, lng + lng_offset)
            assert 0.0 <= distance <= half_circumference + 1e-6


def test_is_nearby_threshold_is_strict():
    assert is_nearby(0.05) is True
    assert is_nearby(0.0999) is True
    assert is_nearby(0.1) is False
    assert is_nearby(5.0) is False
    assert is_nearby(0.5, radius_km=1.0) is True


def test_hazard_position():
    assert hazard_position(_hazard("a", 1.5, 2.5)) == (1.5, 2.5)
    assert hazard_position({"id": "b"}) is None
    assert hazard_position({"id": "c", "location": {"lat": 1.0}}) is None


def test_find_nearby_hazards_scans_every_hazard():
    hazards = [
        _hazard("far", 40.8028, -74.0060),  # ~10 km north
        _hazard("close", 40.7128, -74.0061),
        _hazard("closer", 40.7128, -74.00605),
        {"id": "no-position", "type": "pothole"},
    ]

    nearby = find_nearby_hazards(40.7128, -74.0060, hazards)

    assert [h["id"] for h, _ in nearby] == ["closer", "close"]
    assert all(d < 0.1 for _, d in nearby)


def test_find_nearby_hazards_point_10km_away_does_not_match():
    hazards = [_hazard("far", 40.8028, -74.0060)]

    distance = haversine_distance(40.7128, -74.0060, 40.8028, -74.0060)
    assert distance == pytest.approx(10.0, abs=0.1)
    assert find_nearby_hazards(40.7128, -74.0060, hazards) == []


def test_find_nearby_hazards_empty_list():
    assert find_nearby_hazards(0.0, 0.0, []) == []
