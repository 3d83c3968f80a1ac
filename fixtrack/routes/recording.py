"""Recording routes"""

import logging

from fastapi import APIRouter, HTTPException, Request

from ..schemas import FixIn, StartIn
from ..services.recorder import RecordingError, RecordingService

router = APIRouter()
logger = logging.getLogger(__name__)


def _recorder(request: Request) -> RecordingService:
    return request.app.state.recorder


@router.get("/recording")
async def recording_status(request: Request):
    """Current recording state"""
    return _recorder(request).status()


@router.post("/recording/start")
async def start_recording(request: Request, body: StartIn | None = None):
    """Start a new recording session"""
    recorder = _recorder(request)
    body = body or StartIn()
    try:
        track_id = await recorder.start(body.scenario, power_mode=body.power_mode)
    except RecordingError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"track_id": track_id, **recorder.status()}


@router.post("/recording/stop")
async def stop_recording(request: Request):
    """Stop the active recording"""
    recorder = _recorder(request)
    try:
        track_id = await recorder.stop()
    except RecordingError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"track_id": track_id, "points": recorder.session.points_processed}


@router.post("/recording/fixes")
async def ingest_fix(request: Request, fix: FixIn):
    """Enrich one location sample of the active recording"""
    recorder = _recorder(request)
    try:
        point, alerts = await recorder.ingest(fix.to_fix())
    except RecordingError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    if point is None:
        return {"skipped": True, "point": None, "alerts": []}
    return {
        "skipped": False,
        "point": point.to_dict(),
        "alerts": [alert.to_dict() for alert in alerts],
    }
