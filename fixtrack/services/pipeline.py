"""
Per-fix enrichment pipeline
Every fix runs to completion through:
    quality score + spike flags -> altitude filter -> speed estimator
    -> activity classifier -> confidence
and comes out as an EnrichedPoint. All mutable state belongs to one
TrackingSession, so independent sessions never share windows or streaks.
"""

import logging
import math
from collections.abc import Callable

from .activity import ActivityClassifier
from .anomaly import AnomalyDetector
from .geo import distance
from .quality import (
    compute_confidence,
    detect_spikes,
    filter_altitude,
    is_quality_point,
    score_fix,
    suggest_action,
)
from .records import Alert, EnrichedPoint, FilteredView, QualityAssessment, RawFix
from .speed import SpeedEstimator

logger = logging.getLogger(__name__)

HIGH = "high"
BALANCED = "balanced"
BATTERY = "battery"
POWER_MODES = (HIGH, BALANCED, BATTERY)

MIN_MOVE_FOR_SAVE_M = 5
MIN_TIME_FOR_SAVE_SEC = 5


def suggest_power_mode(level):
    """Suggest a power mode for a battery level in 0..1 (None when unknown)"""
    if level is None or not math.isfinite(level):
        return None
    pct = round(level * 100)
    if pct >= 60:
        return HIGH
    if pct >= 30:
        return BALANCED
    return BATTERY


class TrackingSession:
    """Session context owning every piece of per-recording state"""

    def __init__(
        self,
        scenario: str = "UNKNOWN",
        power_mode: str = BALANCED,
        detector: AnomalyDetector | None = None,
        clock: Callable[[], int] | None = None,
    ):
        if power_mode not in POWER_MODES:
            raise ValueError(f"Unknown power mode: {power_mode}")
        self.scenario = scenario
        self.power_mode = power_mode
        self.detector = detector or AnomalyDetector()
        # None -> use the fix timestamp as capture time
        self.clock = clock
        self.speed_estimator = SpeedEstimator()
        self.activity = ActivityClassifier()
        self.previous: EnrichedPoint | None = None
        self.last_fix_ts: int | None = None
        self.points_processed = 0

    def reset(self, scenario: str | None = None):
        """Clear all windows, streaks and previous-point references"""
        if scenario is not None:
            self.scenario = scenario
        self.speed_estimator.reset()
        self.activity.reset()
        self.detector.reset()
        self.previous = None
        self.last_fix_ts = None
        self.points_processed = 0

    def _measure_gap(self, fix) -> float | None:
        gap = None
        if self.last_fix_ts is not None:
            gap = (fix.timestamp - self.last_fix_ts) / 1000.0
        self.last_fix_ts = fix.timestamp
        return gap

    def should_skip(self, fix) -> bool:
        """
        Low-power skipping of near-duplicate fixes.

        In battery mode a fix that is both close in time and in space to the
        last enriched point is dropped. The gap clock still advances.
        """
        if self.power_mode != BATTERY or self.previous is None:
            return False
        dt_sec = (fix.timestamp - self.previous.raw.timestamp) / 1000.0
        moved = distance(self.previous.raw, fix)
        if dt_sec < MIN_TIME_FOR_SAVE_SEC and moved < MIN_MOVE_FOR_SAVE_M:
            self.last_fix_ts = fix.timestamp
            logger.debug(f"Skipping fix at {fix.timestamp}: moved {moved:.1f} m in {dt_sec:.1f} s")
            return True
        return False

    def ingest(self, fix: RawFix) -> EnrichedPoint | None:
        """
        Enrich a fix unless battery mode drops it.

        Speed and activity state advance for every fix, skipped or not.
        """
        speed_kmh = self.speed_estimator.update(fix)
        activity = self.activity.update(speed_kmh)
        if self.should_skip(fix):
            return None
        return self._enrich(fix, speed_kmh, activity)

    def process(self, fix: RawFix) -> EnrichedPoint:
        """Turn one raw fix into an enriched point"""
        speed_kmh = self.speed_estimator.update(fix)
        activity = self.activity.update(speed_kmh)
        return self._enrich(fix, speed_kmh, activity)

    def _enrich(self, fix, speed_kmh, activity) -> EnrichedPoint:
        captured_at = self.clock() if self.clock else fix.timestamp
        gap = self._measure_gap(fix)

        assessment = score_fix(fix)
        prev_raw = self.previous.raw if self.previous else None
        flags = assessment.flags + tuple(detect_spikes(fix, prev_raw))
        quality = QualityAssessment(score=assessment.score, flags=flags)

        confidence = compute_confidence(quality.score, quality.flags)
        filtered = FilteredView(
            lat=fix.lat,
            lon=fix.lon,
            altitude=filter_altitude(fix.altitude, self.previous, captured_at),
            speed_kmh=speed_kmh,
            activity=activity,
            is_quality_point=is_quality_point(confidence),
        )
        point = EnrichedPoint(
            raw=fix,
            quality=quality,
            filtered=filtered,
            confidence=confidence,
            suggested_action=suggest_action(confidence),
            captured_at=captured_at,
            scenario=self.scenario,
            gap_from_prev_sec=gap,
        )
        self.previous = point
        self.points_processed += 1
        return point

    def check_anomalies(self, point, all_tracks=None, geofences=(), current_track_id=None) -> list[Alert]:
        return self.detector.check(point, all_tracks, geofences, current_track_id)
