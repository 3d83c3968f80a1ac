"""Tests for the per-fix enrichment pipeline"""

import pytest

from fixtrack.services.pipeline import TrackingSession, suggest_power_mode
from fixtrack.services.records import (
    GPS_GAP,
    KEEP,
    LARGE_TIME_GAP,
    POSITION_SPIKE,
    REVIEW,
    STATIONARY,
)

METER_DEG = 1 / 111195.0


def walk(make_fix, n=30, step_m=1.5, interval_ms=1000, start_ts=0):
    """A steady walk northwards at step_m per interval"""
    return [
        make_fix(lat=i * step_m * METER_DEG, ts=start_ts + i * interval_ms, altitude=100.0 + i * 0.1)
        for i in range(n)
    ]


def test_first_fix(make_fix):
    session = TrackingSession()
    point = session.process(make_fix(accuracy=10, altitude=200, speed=0, ts=1000))

    assert point.quality.score == 100
    assert point.quality.flags == ()
    assert point.confidence == 1.0
    assert point.suggested_action == KEEP
    assert point.filtered.is_quality_point is True
    assert point.filtered.altitude == 200
    assert point.filtered.activity == STATIONARY
    assert point.gap_from_prev_sec is None
    assert point.captured_at == 1000
    assert point.scenario == "UNKNOWN"


def test_position_spike_lowers_confidence(make_fix):
    """Two fixes 1 s and 100 m apart"""
    session = TrackingSession()
    session.process(make_fix(ts=0))
    point = session.process(make_fix(lat=100 * METER_DEG, ts=1000))

    assert POSITION_SPIKE in point.quality.flags
    assert point.confidence == pytest.approx(0.3)
    assert point.suggested_action == REVIEW
    assert point.filtered.is_quality_point is False


def test_score_and_spike_flags_are_merged(make_fix):
    session = TrackingSession()
    session.process(make_fix(ts=0))
    point = session.process(make_fix(ts=40_000, accuracy=150))
    assert point.quality.flags == ("poor_accuracy", LARGE_TIME_GAP)
    assert point.quality.score == 60


def test_altitude_spike_is_held(make_fix):
    session = TrackingSession()
    session.process(make_fix(ts=0, altitude=100.0))
    point = session.process(make_fix(ts=1000, altitude=200.0))
    assert point.filtered.altitude == 100.0
    assert point.raw.altitude == 200.0


def test_gap_is_measured(make_fix):
    session = TrackingSession()
    session.process(make_fix(ts=0))
    point = session.process(make_fix(ts=15_000))
    assert point.gap_from_prev_sec == pytest.approx(15.0)

    alerts = session.check_anomalies(point)
    assert [a.kind for a in alerts] == [GPS_GAP]
    assert alerts[0].value == pytest.approx(15.0)


def test_clock_overrides_capture_time(make_fix):
    session = TrackingSession(clock=lambda: 42)
    assert session.process(make_fix(ts=1000)).captured_at == 42


def test_reset_then_replay_is_identical(make_fix):
    """No state leaks between sessions"""
    fixes = walk(make_fix) + [make_fix(lat=0.01, ts=31_000, altitude=500.0, speed=70)]
    session = TrackingSession(scenario="TEST")

    first = [session.process(f) for f in fixes]
    session.reset()
    second = [session.process(f) for f in fixes]

    assert first == second
    assert TrackingSession(scenario="TEST").process(fixes[0]) == first[0]


def test_reset_clears_state(make_fix):
    session = TrackingSession()
    for fix in walk(make_fix, n=10):
        session.process(fix)
    session.reset(scenario="NEW")

    assert session.previous is None
    assert session.last_fix_ts is None
    assert session.points_processed == 0
    assert len(session.speed_estimator.window) == 0
    assert len(session.activity.window) == 0
    assert session.scenario == "NEW"


def test_windows_stay_bounded(make_fix):
    session = TrackingSession()
    for fix in walk(make_fix, n=200):
        session.process(fix)
        assert len(session.speed_estimator.window) <= 5
        assert len(session.activity.window) <= 7


def test_battery_mode_skips_tiny_moves(make_fix):
    session = TrackingSession(power_mode="battery")
    first = make_fix(ts=0)
    assert session.should_skip(first) is False
    session.process(first)

    near = make_fix(lat=2 * METER_DEG, ts=2000)
    assert session.should_skip(near) is True
    assert session.last_fix_ts == 2000

    far = make_fix(lat=20 * METER_DEG, ts=3000)
    assert session.should_skip(far) is False
    later = make_fix(ts=6000)
    assert session.should_skip(later) is False


def test_skipped_fixes_still_feed_speed_and_activity(make_fix):
    """Battery skipping drops the point, not the speed or activity history"""
    session = TrackingSession(power_mode="battery")
    assert session.ingest(make_fix(ts=0)) is not None

    for i in range(1, 4):
        fix = make_fix(lat=i * 1.2 * METER_DEG, ts=i * 1000)
        assert session.ingest(fix) is None

    assert len(session.speed_estimator.window) == 4
    assert len(session.activity.window) == 4
    assert session.speed_estimator.previous[2] == 3000
    assert session.last_fix_ts == 3000
    assert session.points_processed == 1


def test_balanced_mode_never_skips(make_fix):
    session = TrackingSession()
    session.process(make_fix(ts=0))
    assert session.should_skip(make_fix(ts=100)) is False


def test_unknown_power_mode():
    with pytest.raises(ValueError):
        TrackingSession(power_mode="turbo")


def test_suggest_power_mode():
    assert suggest_power_mode(None) is None
    assert suggest_power_mode(0.9) == "high"
    assert suggest_power_mode(0.6) == "high"
    assert suggest_power_mode(0.45) == "balanced"
    assert suggest_power_mode(0.1) == "battery"


def test_suggest_power_mode_non_finite():
    """Unknown battery readings give no suggestion"""
    assert suggest_power_mode(float("nan")) is None
    assert suggest_power_mode(float("inf")) is None
    assert suggest_power_mode(float("-inf")) is None
