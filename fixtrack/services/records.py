"""Value types flowing through the fix pipeline"""

from dataclasses import dataclass, field
from typing import Any

# Quality flag vocabulary
POOR_ACCURACY = "poor_accuracy"
MEDIUM_ACCURACY = "medium_accuracy"
IMPLAUSIBLE_SPEED = "implausible_speed"
HIGH_SPEED = "high_speed"
IMPLAUSIBLE_ALTITUDE = "implausible_altitude"
EXTREME_ALTITUDE = "extreme_altitude"
LARGE_TIME_GAP = "large_time_gap"
POSITION_SPIKE = "position_spike"
HIGH_SPEED_JUMP = "high_speed_jump"
ALTITUDE_SPIKE = "altitude_spike"
RAPID_ALTITUDE_CHANGE = "rapid_altitude_change"

QUALITY_FLAGS = (
    POOR_ACCURACY,
    MEDIUM_ACCURACY,
    IMPLAUSIBLE_SPEED,
    HIGH_SPEED,
    IMPLAUSIBLE_ALTITUDE,
    EXTREME_ALTITUDE,
    LARGE_TIME_GAP,
    POSITION_SPIKE,
    HIGH_SPEED_JUMP,
    ALTITUDE_SPIKE,
    RAPID_ALTITUDE_CHANGE,
)

# Activity labels, slowest first
STATIONARY = "stationary"
WALKING = "walking"
RUNNING = "running"
CYCLING = "cycling"
DRIVING = "driving"

ACTIVITY_LABELS = (STATIONARY, WALKING, RUNNING, CYCLING, DRIVING)

KEEP = "keep"
REVIEW = "review"

# Alert kinds
GPS_GAP = "gps_gap"
SHARP_TURN = "sharp_turn"
DEVIATION = "deviation"
GEOFENCE = "geofence"
GENERIC = "generic"

ALERT_KINDS = (GPS_GAP, SHARP_TURN, DEVIATION, GEOFENCE, GENERIC)


@dataclass(frozen=True, slots=True)
class RawFix:
    """A single sensor sample as reported by the location provider.

    Attributes:
        lat: Latitude in decimal degrees.
        lon: Longitude in decimal degrees.
        accuracy: Horizontal accuracy in meters.
        timestamp: Epoch milliseconds of the fix.
        altitude: Altitude in meters, ``None`` when not reported.
        heading: Heading in degrees, ``None`` when not reported.
        speed: Device speed in meters/second, ``None`` when not reported.
    """

    lat: float
    lon: float
    accuracy: float
    timestamp: int
    altitude: float | None = None
    heading: float | None = None
    speed: float | None = None


@dataclass(frozen=True, slots=True)
class QualityAssessment:
    """Score (0-100) plus diagnostic flags for one fix"""

    score: int
    flags: tuple[str, ...] = ()

    def has(self, flag: str) -> bool:
        return flag in self.flags


@dataclass(frozen=True, slots=True)
class FilteredView:
    """Cleaned values derived from a fix"""

    lat: float
    lon: float
    altitude: float | None
    speed_kmh: float
    activity: str
    is_quality_point: bool


@dataclass(frozen=True, slots=True)
class EnrichedPoint:
    """A fix together with its quality, filtered values and confidence"""

    raw: RawFix
    quality: QualityAssessment
    filtered: FilteredView
    confidence: float
    suggested_action: str
    captured_at: int
    scenario: str = "UNKNOWN"
    gap_from_prev_sec: float | None = None

    @property
    def lat(self) -> float:
        return self.filtered.lat

    @property
    def lon(self) -> float:
        return self.filtered.lon

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw": {
                "lat": self.raw.lat,
                "lon": self.raw.lon,
                "altitude": self.raw.altitude,
                "accuracy": self.raw.accuracy,
                "heading": self.raw.heading,
                "speed": self.raw.speed,
                "timestamp": self.raw.timestamp,
            },
            "quality": {
                "score": self.quality.score,
                "flags": list(self.quality.flags),
                "confidence": self.confidence,
                "suggested_action": self.suggested_action,
            },
            "filtered": {
                "lat": self.filtered.lat,
                "lon": self.filtered.lon,
                "altitude": self.filtered.altitude,
                "speed": self.filtered.speed_kmh,
                "activity": self.filtered.activity,
                "is_quality_point": self.filtered.is_quality_point,
            },
            "ts": self.captured_at,
            "scenario": self.scenario,
            "gap_from_prev_sec": self.gap_from_prev_sec,
        }


@dataclass(frozen=True, slots=True)
class Geofence:
    """Circular region used for exit detection"""

    lat: float
    lon: float
    radius_m: float
    id: int | None = None


@dataclass(frozen=True, slots=True)
class Alert:
    """Anomaly raised while recording"""

    kind: str
    message: str
    lat: float | None = None
    lon: float | None = None
    value: float | None = None
    ts: int | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "lat": self.lat,
            "lon": self.lon,
            "value": self.value,
            "ts": self.ts,
            "details": dict(self.details),
        }
