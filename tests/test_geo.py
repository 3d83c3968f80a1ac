"""Tests for geodesic helpers"""

from types import SimpleNamespace

import pytest

from fixtrack.services.geo import (
    bearing_difference,
    distance,
    haversine_distance,
    initial_bearing,
)


def at(lat, lon):
    return SimpleNamespace(lat=lat, lon=lon)


def test_haversine_distance():
    """Test distance calculation between two points"""
    assert haversine_distance(0, 0, 0, 0) == 0

    # ~111km for 1 degree at the equator
    dist = haversine_distance(0, 0, 0, 1)
    assert 111000 < dist < 111400

    # Half the circumference
    dist = haversine_distance(0, 0, 0, 180)
    assert dist == pytest.approx(20015086, rel=1e-4)


def test_distance_is_symmetric():
    a, b = at(52.52, 13.405), at(48.8566, 2.3522)
    assert distance(a, b) == pytest.approx(distance(b, a))
    assert 870000 < distance(a, b) < 890000


def test_initial_bearing_cardinal_directions():
    """Bearings to due north/east/south/west"""
    origin = at(0, 0)
    assert initial_bearing(origin, at(1, 0)) == pytest.approx(0)
    assert initial_bearing(origin, at(0, 1)) == pytest.approx(90)
    assert initial_bearing(origin, at(-1, 0)) == pytest.approx(180)
    assert initial_bearing(origin, at(0, -1)) == pytest.approx(270)


def test_initial_bearing_range():
    """Bearing always lands in [0, 360)"""
    origin = at(10, 10)
    for lat, lon in [(10.1, 9.9), (9.9, 9.9), (10.0, 10.0001), (9.99, 10.01)]:
        b = initial_bearing(origin, at(lat, lon))
        assert 0 <= b < 360


def test_bearing_difference_wraps():
    assert bearing_difference(350, 10) == pytest.approx(20)
    assert bearing_difference(10, 350) == pytest.approx(-20)
    assert abs(bearing_difference(90, 270)) == pytest.approx(180)
    assert bearing_difference(45, 45) == 0
