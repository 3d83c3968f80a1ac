"""
Per-fix quality assessment
- Tiered penalty score from accuracy, reported speed and altitude
- Spike flags against the previous raw fix (time gap, position, altitude)
- Altitude hold filter
- Confidence / suggested action from score and flags
None of these raise on odd input: degraded fixes get lower scores instead.
"""

from .geo import distance
from .records import (
    ALTITUDE_SPIKE,
    EXTREME_ALTITUDE,
    HIGH_SPEED,
    HIGH_SPEED_JUMP,
    IMPLAUSIBLE_ALTITUDE,
    IMPLAUSIBLE_SPEED,
    KEEP,
    LARGE_TIME_GAP,
    MEDIUM_ACCURACY,
    POOR_ACCURACY,
    POSITION_SPIKE,
    RAPID_ALTITUDE_CHANGE,
    REVIEW,
    QualityAssessment,
)

# Spike detector thresholds
LARGE_TIME_GAP_SEC = 30
POSITION_SPIKE_MS = 50  # ~180 km/h
HIGH_SPEED_JUMP_MS = 30  # ~108 km/h
ALTITUDE_SPIKE_MS = 10
RAPID_ALTITUDE_CHANGE_MS = 5

MAX_VERTICAL_SPEED_MS = 5

# Confidence multipliers, compounded when several flags fire
CONFIDENCE_PENALTIES = {
    POSITION_SPIKE: 0.3,
    ALTITUDE_SPIKE: 0.5,
    IMPLAUSIBLE_SPEED: 0.2,
}
KEEP_CONFIDENCE = 0.7
QUALITY_POINT_CONFIDENCE = 0.5


def score_fix(fix) -> QualityAssessment:
    """Score a raw fix from 0 to 100 using independent penalty tiers"""
    score = 100
    flags = []

    # Accuracy tier
    if fix.accuracy > 100:
        score -= 40
        flags.append(POOR_ACCURACY)
    elif fix.accuracy > 50:
        score -= 20
        flags.append(MEDIUM_ACCURACY)
    elif fix.accuracy > 20:
        score -= 10

    # Speed tier
    speed_kmh = (fix.speed or 0) * 3.6
    if speed_kmh > 200:
        score -= 30
        flags.append(IMPLAUSIBLE_SPEED)
    elif speed_kmh > 100:
        score -= 15
        flags.append(HIGH_SPEED)

    # Altitude tier
    if fix.altitude is not None:
        if fix.altitude > 10000 or fix.altitude < -500:
            score -= 25
            flags.append(IMPLAUSIBLE_ALTITUDE)
        elif fix.altitude > 5000 or fix.altitude < -100:
            score -= 10
            flags.append(EXTREME_ALTITUDE)

    return QualityAssessment(score=max(0, score), flags=tuple(flags))


def detect_spikes(fix, previous) -> list[str]:
    """
    Flag time gaps and implausible jumps between two consecutive raw fixes.

    Args:
        fix: Current RawFix.
        previous: Previous RawFix of the session, or None on the first fix.

    Returns:
        List of flags, empty when there is no previous fix.
    """
    if previous is None:
        return []

    flags = []
    time_gap_sec = (fix.timestamp - previous.timestamp) / 1000.0
    if time_gap_sec > LARGE_TIME_GAP_SEC:
        flags.append(LARGE_TIME_GAP)

    # Clock skew or duplicate timestamps: fall back to one second
    dt = time_gap_sec if time_gap_sec > 0 else 1.0

    speed_ms = distance(previous, fix) / dt
    if speed_ms > POSITION_SPIKE_MS:
        flags.append(POSITION_SPIKE)
    elif speed_ms > HIGH_SPEED_JUMP_MS:
        flags.append(HIGH_SPEED_JUMP)

    if fix.altitude is not None and previous.altitude is not None:
        vertical_speed = abs(fix.altitude - previous.altitude) / dt
        if vertical_speed > ALTITUDE_SPIKE_MS:
            flags.append(ALTITUDE_SPIKE)
        elif vertical_speed > RAPID_ALTITUDE_CHANGE_MS:
            flags.append(RAPID_ALTITUDE_CHANGE)

    return flags


def filter_altitude(altitude, previous, captured_at):
    """
    Accept a candidate altitude or hold the previous one.

    Args:
        altitude: Candidate altitude in meters, or None.
        previous: Previous EnrichedPoint of the session, or None.
        captured_at: Capture time (epoch ms) of the current fix.

    Returns:
        The candidate, or the previous filtered altitude when the implied
        vertical speed exceeds MAX_VERTICAL_SPEED_MS.
    """
    if altitude is None:
        return None
    if previous is None:
        return altitude

    prev_alt = previous.filtered.altitude
    if prev_alt is None:
        prev_alt = previous.raw.altitude
    if prev_alt is None:
        return altitude

    dt = (captured_at - previous.captured_at) / 1000.0
    if dt <= 0:
        dt = 1.0

    if abs(altitude - prev_alt) / dt > MAX_VERTICAL_SPEED_MS:
        return prev_alt
    return altitude


def compute_confidence(score, flags) -> float:
    """Scale the score to 0..1 and apply flag penalties"""
    confidence = score / 100.0
    for flag, factor in CONFIDENCE_PENALTIES.items():
        if flag in flags:
            confidence *= factor
    return max(0.0, min(1.0, confidence))


def suggest_action(confidence) -> str:
    return KEEP if confidence > KEEP_CONFIDENCE else REVIEW


def is_quality_point(confidence) -> bool:
    return confidence > QUALITY_POINT_CONFIDENCE
