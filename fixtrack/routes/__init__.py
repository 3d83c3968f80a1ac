"""Routes package"""

from .geofences import router as geofences_router
from .recording import router as recording_router
from .tracks import router as tracks_router

__all__ = ["geofences_router", "recording_router", "tracks_router"]
