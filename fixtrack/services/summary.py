"""Track statistics and the plain-text case summary"""

from datetime import UTC, datetime
from typing import Any

import pytz

from .geo import distance
from .records import ACTIVITY_LABELS

MAX_SUMMARY_INTERVAL_SEC = 3600


def quality_bucket(score: int) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "medium"
    return "poor"


def _iso(ts_ms: int) -> str:
    return datetime.fromtimestamp(ts_ms / 1000, tz=UTC).isoformat()


def track_stats(points) -> dict[str, Any] | None:
    """Duration, distance, activity time and quality breakdown for a track.

    Returns None for tracks with fewer than two points.
    """
    if len(points) < 2:
        return None

    start_ts = points[0].captured_at
    end_ts = points[-1].captured_at

    distance_m = 0.0
    activity_time: dict[str, float] = {}
    quality_stats = {"excellent": 0, "good": 0, "medium": 0, "poor": 0}

    for point in points:
        quality_stats[quality_bucket(point.quality.score)] += 1

    for prev, cur in zip(points, points[1:]):
        distance_m += distance(prev, cur)
        # time between two points is attributed to the earlier label
        act = prev.filtered.activity
        dt = (cur.captured_at - prev.captured_at) / 1000.0
        activity_time[act] = activity_time.get(act, 0.0) + dt

    return {
        "start_time_iso": _iso(start_ts),
        "end_time_iso": _iso(end_ts),
        "duration_sec": (end_ts - start_ts) / 1000.0,
        "distance_m": distance_m,
        "distance_km": distance_m / 1000.0,
        "activity_time_sec": activity_time,
        "quality_stats": quality_stats,
        "total_points": len(points),
    }


def activity_summary(tracks) -> dict[str, float]:
    """Seconds spent per activity label across all tracks"""
    stats = {label: 0.0 for label in ACTIVITY_LABELS}
    for points in tracks.values():
        if len(points) < 2:
            continue
        for prev, cur in zip(points, points[1:]):
            dt = (cur.captured_at - prev.captured_at) / 1000.0
            if dt <= 0 or dt > MAX_SUMMARY_INTERVAL_SEC:
                continue
            act = prev.filtered.activity
            if act in stats:
                stats[act] += dt
    return stats


def case_summary(track_id: str, points, alerts, timezone: str = "UTC") -> str:
    """Human-readable forensic report for one track"""
    stats = track_stats(points)
    if stats is None:
        raise ValueError("Track too short for summary")

    tz = pytz.timezone(timezone)

    def local(ts_ms):
        return datetime.fromtimestamp(ts_ms / 1000, tz=tz).strftime("%Y-%m-%d %H:%M:%S %Z")

    total_points = stats["total_points"]
    act_time = stats["activity_time_sec"]
    total_sec = sum(act_time.values()) or 1

    def act_pct(label):
        return f"{act_time.get(label, 0) / total_sec * 100:.1f}"

    def quality_pct(bucket):
        return f"{stats['quality_stats'][bucket] / total_points * 100:.1f}"

    lines = [
        "=== FORENSIC TRACK ANALYSIS ===",
        "",
        f"Track ID : {track_id}",
        f"Start time : {local(points[0].captured_at)}",
        f"End time   : {local(points[-1].captured_at)}",
        f"Duration   : {stats['duration_sec'] / 60:.1f} minutes",
        f"Distance   : {stats['distance_km']:.3f} km",
        f"Total points: {total_points}",
        "",
        "Data Quality Breakdown:",
        f"  Excellent (80-100%): {quality_pct('excellent')}%",
        f"  Good (60-79%): {quality_pct('good')}%",
        f"  Medium (40-59%): {quality_pct('medium')}%",
        f"  Poor (0-39%): {quality_pct('poor')}%",
        "",
        "Activity breakdown (by time):",
    ]
    for label in ACTIVITY_LABELS:
        lines.append(f"  {label.capitalize():<10}: {act_pct(label)}%")
    lines.append("")

    if not alerts:
        lines.append("No anomaly or geofence alerts were triggered.")
    else:
        first, last = alerts[0], alerts[-1]
        lines.append(
            f"{len(alerts)} alerts were triggered "
            "(sudden speed, sharp turns, route deviation and/or geofence)."
        )
        lines.append(f"First alert: {local(first.ts)} - {first.message}")
        lines.append(f"Last alert : {local(last.ts)} - {last.message}")

    lines.extend(
        [
            "",
            "=== DATA COLLECTION METADATA ===",
            "Collection mode: Layered storage (raw + filtered)",
            "Quality scoring: Enabled",
            "Spike detection: Enabled",
            f"Generated: {datetime.now(tz).strftime('%Y-%m-%d %H:%M:%S %Z')}",
        ]
    )
    return "\n".join(lines) + "\n"
