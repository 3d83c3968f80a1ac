"""Activity classification from smoothed speed"""

import math
from collections import deque

from .records import CYCLING, DRIVING, RUNNING, STATIONARY, WALKING

LABEL_WINDOW_SIZE = 7
STREAK_REQUIRED = 10
STATIONARY_KMH = 0.5
WALKING_KMH = 7
FAST_KMH = 20
DRIVING_KMH = 45


def classify_basic(speed_kmh) -> str:
    """Stateless speed bands, used for simulated tracks"""
    if speed_kmh < 0.5:
        return STATIONARY
    if speed_kmh < 6:
        return WALKING
    if speed_kmh < 15:
        return RUNNING
    if speed_kmh < 30:
        return CYCLING
    return DRIVING


class ActivityClassifier:
    """
    Conservative two-stage classifier.

    Stage one only reports cycling/driving after a streak of fast samples;
    stage two returns the majority label of the recent window.
    """

    def __init__(self, window_size: int = LABEL_WINDOW_SIZE, streak_required: int = STREAK_REQUIRED):
        self.window: deque[str] = deque(maxlen=window_size)
        self.streak_required = streak_required
        self.fast_streak = 0

    def reset(self):
        self.window.clear()
        self.fast_streak = 0

    def classify_raw(self, speed_kmh) -> str:
        if not math.isfinite(speed_kmh):
            speed_kmh = 0.0

        if speed_kmh < STATIONARY_KMH:
            self.fast_streak = 0
            return STATIONARY
        if speed_kmh < WALKING_KMH:
            self.fast_streak = 0
            return WALKING

        if speed_kmh > FAST_KMH:
            self.fast_streak += 1
        else:
            self.fast_streak = max(0, self.fast_streak - 1)

        if self.fast_streak >= self.streak_required:
            return DRIVING if speed_kmh > DRIVING_KMH else CYCLING
        return WALKING

    def smooth(self, label) -> str:
        """Push a label and return the window majority (first seen wins ties)"""
        self.window.append(label)

        counts: dict[str, int] = {}
        for item in self.window:
            counts[item] = counts.get(item, 0) + 1

        best, best_count = label, 0
        for item, count in counts.items():
            if count > best_count:
                best, best_count = item, count
        return best

    def update(self, speed_kmh) -> str:
        return self.smooth(self.classify_raw(speed_kmh))
