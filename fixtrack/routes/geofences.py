"""Geofence and alert routes"""

from fastapi import APIRouter, HTTPException, Request

from ..database import Database
from ..schemas import GeofenceIn

router = APIRouter()


def _fence_dict(fence):
    return {"id": fence.id, "latitude": fence.lat, "longitude": fence.lon, "radius_m": fence.radius_m}


@router.get("/geofences")
async def list_geofences(request: Request):
    db: Database = request.app.state.db
    return [_fence_dict(g) for g in await db.list_geofences()]


@router.post("/geofences")
async def add_geofence(request: Request, body: GeofenceIn):
    """Register a circular geofence"""
    db: Database = request.app.state.db
    fence = await db.add_geofence(body.latitude, body.longitude, body.radius_m)
    return _fence_dict(fence)


@router.delete("/geofences/{geofence_id}")
async def delete_geofence(request: Request, geofence_id: int):
    db: Database = request.app.state.db
    if not await db.delete_geofence(geofence_id):
        raise HTTPException(status_code=404, detail=f"Unknown geofence: {geofence_id}")
    return {"deleted": geofence_id}


@router.get("/alerts")
async def list_alerts(request: Request, track_id: str | None = None, kind: str | None = None):
    """Event log of raised alerts"""
    db: Database = request.app.state.db
    alerts = await db.get_alerts(track_id=track_id, kind=kind)
    return [alert.to_dict() for alert in alerts]
