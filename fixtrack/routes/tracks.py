"""Track routes"""

import logging
import time

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from ..config import get_settings
from ..database import Database
from ..schemas import SimulateIn
from ..services import activity_summary, case_summary, simulate_track, track_stats
from ..services.recorder import new_track_id

router = APIRouter()
logger = logging.getLogger(__name__)


async def _points_or_404(db: Database, track_id: str):
    if not await db.track_exists(track_id):
        raise HTTPException(status_code=404, detail=f"Unknown track: {track_id}")
    return await db.get_track(track_id)


@router.get("/tracks")
async def list_tracks(request: Request):
    """List stored tracks with point counts"""
    db: Database = request.app.state.db
    return await db.list_tracks()


@router.get("/tracks/{track_id}")
async def get_track(request: Request, track_id: str):
    """All enriched points of a track"""
    points = await _points_or_404(request.app.state.db, track_id)
    return {"track_id": track_id, "points": [p.to_dict() for p in points]}


@router.delete("/tracks/{track_id}")
async def delete_track(request: Request, track_id: str):
    """Delete a whole track"""
    db: Database = request.app.state.db
    recorder = request.app.state.recorder
    if recorder.track_id == track_id:
        raise HTTPException(status_code=400, detail="Cannot delete the track being recorded")
    if not await db.delete_track(track_id):
        raise HTTPException(status_code=404, detail=f"Unknown track: {track_id}")
    logger.info(f"Deleted track {track_id}")
    return {"deleted": track_id}


@router.get("/tracks/{track_id}/stats")
async def get_track_stats(request: Request, track_id: str):
    """Duration, distance, activity time and quality breakdown"""
    points = await _points_or_404(request.app.state.db, track_id)
    stats = track_stats(points)
    if stats is None:
        raise HTTPException(status_code=400, detail="Track too short for statistics")
    return stats


@router.get("/tracks/{track_id}/summary", response_class=PlainTextResponse)
async def get_case_summary(request: Request, track_id: str):
    """Plain-text forensic case summary"""
    db: Database = request.app.state.db
    points = await _points_or_404(db, track_id)
    if len(points) < 2:
        raise HTTPException(status_code=400, detail="Track too short for summary")
    alerts = await db.get_alerts(track_id=track_id)
    return case_summary(track_id, points, alerts, timezone=get_settings().timezone)


@router.post("/tracks/simulate")
async def simulate(request: Request, body: SimulateIn | None = None):
    """Store a synthetic circular track"""
    db: Database = request.app.state.db
    body = body or SimulateIn()
    track_id = new_track_id("sim")
    now_ms = int(time.time() * 1000)

    points = simulate_track(body.latitude, body.longitude, body.points, start_ts=now_ms)
    await db.create_track(track_id, scenario="SIMULATED", source="simulated")
    await db.append_points(track_id, points)
    logger.info(f"Simulated track {track_id} stored with {len(points)} points")
    return {"track_id": track_id, "points": len(points)}


@router.get("/activity-summary")
async def get_activity_summary(request: Request):
    """Seconds spent per activity across all tracks"""
    db: Database = request.app.state.db
    tracks = await db.get_all_tracks()
    return activity_summary(tracks)


@router.delete("/tracks")
async def clear_all(request: Request):
    """Delete all tracks, geofences and alerts"""
    db: Database = request.app.state.db
    if request.app.state.recorder.recording:
        raise HTTPException(status_code=400, detail="Stop the active recording first")
    await db.clear_all()
    logger.info("Cleared all tracks, geofences and alerts")
    return {"cleared": True}
