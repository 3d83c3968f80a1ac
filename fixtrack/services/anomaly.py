"""
Track-level anomaly detection
- GPS outages (gap between consecutive fixes)
- Sudden speed increase and sharp turns between consecutive points
- Route deviation against previously recorded tracks
- Geofence exits
"""

import logging
import math

from .geo import bearing_difference, distance, initial_bearing
from .records import DEVIATION, GEOFENCE, GPS_GAP, SHARP_TURN, Alert

logger = logging.getLogger(__name__)

GAP_THRESHOLD_SEC = 10
SPEED_JUMP_KMH = 20
SHARP_TURN_DEG = 90
ROUTE_MIN_POINTS = 10
ROUTE_SAMPLES = 60
ROUTE_MATCH_M = 50
ROUTE_DEVIATION_M = 150

EVERY_SAMPLE = "every_sample"
ON_EXIT = "on_exit"


def min_distance_to_track(point, track, samples=ROUTE_SAMPLES, match_m=ROUTE_MATCH_M):
    """
    Minimum distance in meters from a point to a strided sample of a track.

    Stops early once a sample is closer than ``match_m``.
    """
    stride = max(1, len(track) // samples)
    best = math.inf
    for i in range(0, len(track), stride):
        d = distance(point, track[i])
        if d < best:
            best = d
        if best < match_m:
            break
    return best


class AnomalyDetector:
    """Cross-fix and cross-track checks for one recording session"""

    def __init__(
        self,
        gap_threshold_sec: float = GAP_THRESHOLD_SEC,
        speed_jump_kmh: float = SPEED_JUMP_KMH,
        sharp_turn_deg: float = SHARP_TURN_DEG,
        route_match_m: float = ROUTE_MATCH_M,
        route_deviation_m: float = ROUTE_DEVIATION_M,
        geofence_mode: str = EVERY_SAMPLE,
    ):
        if geofence_mode not in (EVERY_SAMPLE, ON_EXIT):
            raise ValueError(f"Unknown geofence mode: {geofence_mode}")
        self.gap_threshold_sec = gap_threshold_sec
        self.speed_jump_kmh = speed_jump_kmh
        self.sharp_turn_deg = sharp_turn_deg
        self.route_match_m = route_match_m
        self.route_deviation_m = route_deviation_m
        self.geofence_mode = geofence_mode
        self.previous = None
        self.previous_bearing: float | None = None
        self._inside: dict[tuple[float, float, float], bool] = {}

    def reset(self):
        self.previous = None
        self.previous_bearing = None
        self._inside.clear()

    def check(self, point, all_tracks=None, geofences=(), current_track_id=None) -> list[Alert]:
        """
        Run every check for a freshly enriched point.

        Args:
            point: EnrichedPoint just produced by the session.
            all_tracks: Mapping of track id -> point sequence of stored tracks.
            geofences: Iterable of Geofence.
            current_track_id: Track being recorded, excluded from route deviation.

        Returns:
            Alerts in detection order.
        """
        alerts = []
        gap = self.check_gap(point)
        if gap:
            alerts.append(gap)

        if self.previous is not None:
            alerts.extend(self._check_motion(point))
            deviation = self.check_route_deviation(point, all_tracks or {}, current_track_id)
            if deviation:
                alerts.append(deviation)
        self.previous = point

        alerts.extend(self.check_geofences(point, geofences))

        for alert in alerts:
            logger.info(f"Alert [{alert.kind}] {alert.message}")
        return alerts

    def _alert(self, kind, message, point, value=None, **details) -> Alert:
        return Alert(
            kind=kind,
            message=message,
            lat=point.lat,
            lon=point.lon,
            value=value,
            ts=point.captured_at,
            details=details,
        )

    def check_gap(self, point) -> Alert | None:
        gap = point.gap_from_prev_sec
        if gap is None or gap <= self.gap_threshold_sec:
            return None
        return self._alert(GPS_GAP, f"GPS gap of {gap:.1f} s", point, value=gap)

    def _check_motion(self, point) -> list[Alert]:
        alerts = []
        prev = self.previous

        ds = point.filtered.speed_kmh - prev.filtered.speed_kmh
        if ds > self.speed_jump_kmh:
            alerts.append(
                self._alert(DEVIATION, f"Sudden speed increase +{ds:.1f} km/h", point, value=ds)
            )

        bearing = initial_bearing(prev, point)
        if self.previous_bearing is not None:
            diff = bearing_difference(self.previous_bearing, bearing)
            if abs(diff) > self.sharp_turn_deg:
                alerts.append(
                    self._alert(SHARP_TURN, "Sharp turn detected", point, value=diff, bearing=bearing)
                )
        self.previous_bearing = bearing
        return alerts

    def check_route_deviation(self, point, all_tracks, current_track_id=None) -> Alert | None:
        """Alert when the point is far from every comparable stored track"""
        nearest = math.inf
        compared = 0
        for track_id, track in all_tracks.items():
            if track_id == current_track_id or len(track) < ROUTE_MIN_POINTS:
                continue
            compared += 1
            d = min_distance_to_track(point, track, match_m=self.route_match_m)
            nearest = min(nearest, d)
            if nearest <= self.route_deviation_m:
                return None

        if compared == 0:
            return None
        return self._alert(
            DEVIATION,
            "Route deviation detected",
            point,
            value=nearest,
            tracks_compared=compared,
        )

    def check_geofences(self, point, geofences) -> list[Alert]:
        alerts = []
        for fence in geofences:
            inside = distance(point, fence) <= fence.radius_m
            key = (fence.lat, fence.lon, fence.radius_m)
            was_inside = self._inside.get(key, True)
            self._inside[key] = inside
            if inside:
                continue
            if self.geofence_mode == ON_EXIT and not was_inside:
                continue
            alerts.append(
                self._alert(GEOFENCE, "Left geofence", point, fence_id=fence.id, radius_m=fence.radius_m)
            )
        return alerts
