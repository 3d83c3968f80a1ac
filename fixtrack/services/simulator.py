"""Synthetic circular tracks for demos and tests"""

import math

from .activity import classify_basic
from .records import KEEP, EnrichedPoint, FilteredView, QualityAssessment, RawFix

SIM_RADIUS_DEG = 0.01
SIM_INTERVAL_MS = 2000
SIM_SCORE = 85


def simulate_track(center_lat=-29.1, center_lon=26.2, n=50, start_ts=0) -> list[EnrichedPoint]:
    """Generate ``n`` points on a circle around the center, two seconds apart"""
    points = []
    for i in range(n):
        angle = (i / n) * math.pi * 2
        lat = center_lat + math.sin(angle) * SIM_RADIUS_DEG
        lon = center_lon + math.cos(angle) * SIM_RADIUS_DEG
        speed_kmh = 5 + 5 * abs(math.sin(angle))
        altitude = 100 + math.sin(angle) * 20
        ts = start_ts + i * SIM_INTERVAL_MS

        raw = RawFix(
            lat=lat,
            lon=lon,
            accuracy=5,
            timestamp=ts,
            altitude=altitude,
            heading=math.degrees(angle) % 360,
            speed=speed_kmh / 3.6,
        )
        points.append(
            EnrichedPoint(
                raw=raw,
                quality=QualityAssessment(score=SIM_SCORE),
                filtered=FilteredView(
                    lat=lat,
                    lon=lon,
                    altitude=altitude,
                    speed_kmh=speed_kmh,
                    activity=classify_basic(speed_kmh),
                    is_quality_point=True,
                ),
                confidence=SIM_SCORE / 100,
                suggested_action=KEEP,
                captured_at=ts,
                scenario="SIMULATED",
            )
        )
    return points
