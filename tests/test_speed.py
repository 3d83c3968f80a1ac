"""Tests for the robust speed estimator"""

import pytest

from fixtrack.services.speed import SpeedEstimator

METER_DEG = 1 / 111195.0


def test_first_fix_is_rate_limited(make_fix):
    """36 km/h from rest is clamped to the 5 km/h step"""
    est = SpeedEstimator()
    assert est.update(make_fix(speed=10)) == pytest.approx(5.0)
    assert est.window[-1] == pytest.approx(36.0)


def test_low_accuracy_caps_speed(make_fix):
    est = SpeedEstimator()
    assert est.update(make_fix(speed=10, accuracy=50)) == pytest.approx(4.0)


def test_hard_cap(make_fix):
    est = SpeedEstimator()
    est.update(make_fix(speed=50))  # 180 km/h
    assert est.window[-1] == 120


def test_missing_and_negative_speed(make_fix):
    est = SpeedEstimator()
    assert est.update(make_fix(speed=None)) == 0.0
    assert est.update(make_fix(speed=-3, ts=120_000)) == 0.0
    assert list(est.window) == [0.0, 0.0]


def test_distance_speed_preferred(make_fix):
    """100 m in 10 s is 36 km/h, whatever the device reports"""
    est = SpeedEstimator()
    est.update(make_fix(ts=0, speed=0))
    est.update(make_fix(lat=100 * METER_DEG, ts=10_000, speed=0))
    assert est.window[-1] == pytest.approx(36.0, rel=1e-3)


def test_stale_previous_uses_device_speed(make_fix):
    est = SpeedEstimator()
    est.update(make_fix(ts=0))
    est.update(make_fix(lat=100 * METER_DEG, ts=60_000, speed=2))
    assert est.window[-1] == pytest.approx(7.2)


def test_duplicate_timestamp_uses_device_speed(make_fix):
    est = SpeedEstimator()
    est.update(make_fix(ts=1000))
    est.update(make_fix(lat=100 * METER_DEG, ts=1000, speed=1))
    assert est.window[-1] == pytest.approx(3.6)


def test_rate_limiter_steps(make_fix):
    """Constant 36 km/h converges in 5 km/h steps"""
    est = SpeedEstimator()
    outputs = [est.update(make_fix(ts=i * 120_000, speed=10)) for i in range(10)]
    assert outputs[:4] == pytest.approx([5.0, 10.0, 15.0, 20.0])
    for a, b in zip(outputs, outputs[1:]):
        assert abs(b - a) <= 5.0 + 1e-9
    assert outputs[-1] == pytest.approx(36.0)


def test_window_is_bounded(make_fix):
    est = SpeedEstimator()
    for i in range(50):
        est.update(make_fix(ts=i * 1000, lat=i * 3 * METER_DEG))
        assert len(est.window) <= 5
    assert len(est.window) == 5


def test_reset(make_fix):
    est = SpeedEstimator()
    est.update(make_fix(speed=10))
    est.reset()
    assert len(est.window) == 0
    assert est.previous is None
    assert est.last_smoothed == 0.0
