"""Robust speed estimation from noisy fixes"""

import math
from collections import deque

from .geo import haversine_distance

WINDOW_SIZE = 5
MAX_DERIVED_DT_SEC = 60
LOW_ACCURACY_M = 40
LOW_ACCURACY_CAP_KMH = 4
HARD_CAP_KMH = 120
MAX_DELTA_KMH = 5


class SpeedEstimator:
    """
    Fuses device speed with distance/time speed, then smooths it.

    Distance-derived speed is preferred whenever the previous fix is less
    than a minute old. The chosen value is capped for low-accuracy fixes and
    artifacts, averaged over a short window and rate limited.
    """

    def __init__(self, window_size: int = WINDOW_SIZE, max_delta_kmh: float = MAX_DELTA_KMH):
        self.window: deque[float] = deque(maxlen=window_size)
        self.max_delta_kmh = max_delta_kmh
        self.previous: tuple[float, float, int] | None = None
        self.last_smoothed = 0.0

    def reset(self):
        self.window.clear()
        self.previous = None
        self.last_smoothed = 0.0

    def _derived_speed(self, fix) -> float | None:
        if self.previous is None:
            return None
        prev_lat, prev_lon, prev_ts = self.previous
        dt_sec = (fix.timestamp - prev_ts) / 1000.0
        if not 0 < dt_sec < MAX_DERIVED_DT_SEC:
            return None
        km = haversine_distance(prev_lat, prev_lon, fix.lat, fix.lon) / 1000.0
        return km / (dt_sec / 3600.0)

    def update(self, fix) -> float:
        """Consume one fix and return the smoothed speed in km/h"""
        v_gps = (fix.speed or 0) * 3.6
        if not math.isfinite(v_gps):
            v_gps = 0.0

        v_dist = self._derived_speed(fix)
        self.previous = (fix.lat, fix.lon, fix.timestamp)

        v = v_dist if v_dist is not None else v_gps
        if not math.isfinite(v) or v < 0:
            v = 0.0

        if fix.accuracy and fix.accuracy > LOW_ACCURACY_M:
            v = min(v, LOW_ACCURACY_CAP_KMH)
        v = min(v, HARD_CAP_KMH)

        self.window.append(v)
        avg = sum(self.window) / len(self.window)

        delta = avg - self.last_smoothed
        if abs(delta) > self.max_delta_kmh:
            avg = self.last_smoothed + math.copysign(self.max_delta_kmh, delta)
        self.last_smoothed = avg
        return avg
