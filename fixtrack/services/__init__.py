"""Services package"""

from .anomaly import AnomalyDetector
from .pipeline import TrackingSession, suggest_power_mode
from .simulator import simulate_track
from .summary import activity_summary, case_summary, track_stats

__all__ = [
    "AnomalyDetector",
    "TrackingSession",
    "activity_summary",
    "case_summary",
    "simulate_track",
    "suggest_power_mode",
    "track_stats",
]
