"""Recording orchestration: session lifecycle, enrichment and persistence"""

import asyncio
import logging
import random
import string
import time

from ..config import Settings, get_settings
from ..database import Database
from .anomaly import AnomalyDetector
from .pipeline import POWER_MODES, TrackingSession
from .records import GENERIC, Alert

logger = logging.getLogger(__name__)


class RecordingError(Exception):
    """Raised when the recorder is used out of order"""


def build_detector(settings: Settings) -> AnomalyDetector:
    """Anomaly detector configured from settings"""
    return AnomalyDetector(
        gap_threshold_sec=settings.gap_threshold_sec,
        speed_jump_kmh=settings.speed_jump_kmh,
        sharp_turn_deg=settings.sharp_turn_deg,
        route_match_m=settings.route_match_m,
        route_deviation_m=settings.route_deviation_m,
        geofence_mode=settings.geofence_alert_mode,
    )


def new_track_id(prefix: str = "t") -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


class RecordingService:
    """Feeds fixes of the active recording through a TrackingSession"""

    def __init__(self, db: Database, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.session = TrackingSession(
            scenario=self.settings.default_scenario,
            power_mode=self.settings.power_mode,
            detector=build_detector(self.settings),
        )
        self.track_id: str | None = None
        self.history: dict[str, list] = {}
        self._lock = asyncio.Lock()

    @property
    def recording(self) -> bool:
        return self.track_id is not None

    async def start(self, scenario: str | None = None, power_mode: str | None = None) -> str:
        """Start a new recording and return its track id"""
        async with self._lock:
            if self.recording:
                raise RecordingError(f"Already recording track {self.track_id}")
            if power_mode:
                self.set_power_mode(power_mode)

            scenario = scenario or self.settings.default_scenario
            # route deviation compares against tracks stored before this recording
            self.history = await self.db.get_all_tracks()
            self.session.reset(scenario=scenario)

            track_id = new_track_id()
            await self.db.create_track(track_id, scenario=scenario)
            self.track_id = track_id

        logger.info(f"▶️  Recording started: {track_id} (scenario={scenario})")
        return track_id

    async def stop(self) -> str:
        """Stop the active recording; the last enriched point stays as final state"""
        async with self._lock:
            if not self.recording:
                raise RecordingError("No active recording")
            track_id = self.track_id
            self.track_id = None
            self.history = {}

            alert = Alert(kind=GENERIC, message="Recording stopped", ts=int(time.time() * 1000))
            await self.db.save_alerts(track_id, [alert])

        logger.info(
            f"⏹️  Recording stopped: {track_id} ({self.session.points_processed} points)"
        )
        return track_id

    async def ingest(self, fix):
        """
        Enrich one fix of the active recording.

        Returns:
            (point, alerts); point is None when the fix was skipped in
            battery mode.
        """
        async with self._lock:
            if not self.recording:
                raise RecordingError("No active recording")

            point = self.session.ingest(fix)
            if point is None:
                return None, []

            await self.db.append_point(self.track_id, point)

            geofences = await self.db.list_geofences()
            alerts = self.session.check_anomalies(
                point, self.history, geofences, current_track_id=self.track_id
            )
            await self.db.save_alerts(self.track_id, alerts)
            return point, alerts

    def set_power_mode(self, mode: str):
        if mode not in POWER_MODES:
            raise RecordingError(f"Unknown power mode: {mode}")
        self.session.power_mode = mode
        logger.info(f"Power mode: {mode}")

    def status(self) -> dict:
        return {
            "recording": self.recording,
            "track_id": self.track_id,
            "scenario": self.session.scenario,
            "power_mode": self.session.power_mode,
            "points_processed": self.session.points_processed,
        }
