"""Shared fixtures"""

import pytest

from fixtrack.services.records import (
    KEEP,
    WALKING,
    EnrichedPoint,
    FilteredView,
    QualityAssessment,
    RawFix,
)


@pytest.fixture
def make_fix():
    """Factory for RawFix with sensible defaults"""

    def _make(lat=0.0, lon=0.0, ts=0, accuracy=5.0, altitude=None, speed=None, heading=None):
        return RawFix(
            lat=lat,
            lon=lon,
            accuracy=accuracy,
            timestamp=ts,
            altitude=altitude,
            heading=heading,
            speed=speed,
        )

    return _make


@pytest.fixture
def make_point():
    """Factory for EnrichedPoint, bypassing the pipeline"""

    def _make(lat=0.0, lon=0.0, ts=0, speed_kmh=0.0, altitude=None, gap=None, activity=WALKING, score=100):
        raw = RawFix(lat=lat, lon=lon, accuracy=5.0, timestamp=ts, altitude=altitude)
        return EnrichedPoint(
            raw=raw,
            quality=QualityAssessment(score=score),
            filtered=FilteredView(
                lat=lat,
                lon=lon,
                altitude=altitude,
                speed_kmh=speed_kmh,
                activity=activity,
                is_quality_point=True,
            ),
            confidence=score / 100,
            suggested_action=KEEP,
            captured_at=ts,
            gap_from_prev_sec=gap,
        )

    return _make
