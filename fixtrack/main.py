"""Main FastAPI application"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import get_settings
from .database import Database
from .routes import geofences_router, recording_router, tracks_router
from .services import suggest_power_mode
from .services.recorder import RecordingService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize application on startup"""
    settings = get_settings()

    # Create data directory for SQLite if needed
    if settings.is_sqlite:
        # Extract path from sqlite URL (e.g., sqlite+aiosqlite:///./data/db.db)
        db_path = settings.database_url.split("///")[-1]
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    db = Database(settings.database_url)
    await db.init_db()
    app.state.db = db
    logger.info(f"Database initialized: {settings.database_url}")

    app.state.recorder = RecordingService(db, settings)

    yield

    if app.state.recorder.recording:
        await app.state.recorder.stop()
    await db.close()
    logger.info("Database connection closed")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.include_router(recording_router)
    app.include_router(tracks_router)
    app.include_router(geofences_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        recorder = getattr(app.state, "recorder", None)
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "recording": bool(recorder and recorder.recording),
        }

    @app.get("/power-mode/suggest")
    async def power_mode_suggestion(level: float | None = None):
        """Suggested power mode for a battery level in 0..1"""
        suggested = suggest_power_mode(level)
        # non-finite levels are not valid JSON
        return {"level": level if suggested else None, "suggested": suggested}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
