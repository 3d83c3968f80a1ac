"""Database module using SQLAlchemy ORM"""

import json
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .models import AlertEvent, Base, Geofence, Track, TrackPoint
from .services.records import (
    Alert,
    EnrichedPoint,
    FilteredView,
    QualityAssessment,
    RawFix,
)
from .services.records import Geofence as GeofenceRecord


def _point_to_row(track_id: str, seq: int, point: EnrichedPoint) -> TrackPoint:
    return TrackPoint(
        track_id=track_id,
        seq=seq,
        raw_lat=point.raw.lat,
        raw_lon=point.raw.lon,
        raw_altitude=point.raw.altitude,
        accuracy=point.raw.accuracy,
        heading=point.raw.heading,
        raw_speed_ms=point.raw.speed,
        raw_timestamp=point.raw.timestamp,
        quality_score=point.quality.score,
        quality_flags=json.dumps(list(point.quality.flags)),
        confidence=point.confidence,
        suggested_action=point.suggested_action,
        filtered_lat=point.filtered.lat,
        filtered_lon=point.filtered.lon,
        filtered_altitude=point.filtered.altitude,
        filtered_speed_kmh=point.filtered.speed_kmh,
        activity=point.filtered.activity,
        is_quality_point=point.filtered.is_quality_point,
        captured_at=point.captured_at,
        scenario=point.scenario,
        gap_from_prev_sec=point.gap_from_prev_sec,
    )


def _row_to_point(row: TrackPoint) -> EnrichedPoint:
    return EnrichedPoint(
        raw=RawFix(
            lat=row.raw_lat,
            lon=row.raw_lon,
            accuracy=row.accuracy,
            timestamp=row.raw_timestamp,
            altitude=row.raw_altitude,
            heading=row.heading,
            speed=row.raw_speed_ms,
        ),
        quality=QualityAssessment(
            score=row.quality_score,
            flags=tuple(json.loads(row.quality_flags) if row.quality_flags else ()),
        ),
        filtered=FilteredView(
            lat=row.filtered_lat,
            lon=row.filtered_lon,
            altitude=row.filtered_altitude,
            speed_kmh=row.filtered_speed_kmh,
            activity=row.activity,
            is_quality_point=row.is_quality_point,
        ),
        confidence=row.confidence,
        suggested_action=row.suggested_action,
        captured_at=row.captured_at,
        scenario=row.scenario or "UNKNOWN",
        gap_from_prev_sec=row.gap_from_prev_sec,
    )


class Database:
    """Database handler using SQLAlchemy ORM - supports SQLite and PostgreSQL"""

    def __init__(self, database_url: str):
        self.database_url = database_url

        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}

        self.engine = create_async_engine(
            database_url,
            echo=False,
            connect_args=connect_args,
        )
        self.async_session = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def init_db(self):
        """Initialize database schema"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def create_track(self, track_id: str, scenario: str = "UNKNOWN", source: str = "recording"):
        """Create an empty track"""
        async with self.async_session() as session:
            session.add(Track(id=track_id, scenario=scenario, source=source))
            await session.commit()

    async def track_exists(self, track_id: str) -> bool:
        async with self.async_session() as session:
            result = await session.execute(select(Track.id).where(Track.id == track_id))
            return result.scalar_one_or_none() is not None

    async def append_points(self, track_id: str, points: list[EnrichedPoint]):
        """Append points to the end of a track"""
        async with self.async_session() as session:
            stmt = select(func.max(TrackPoint.seq)).where(TrackPoint.track_id == track_id)
            last_seq = (await session.execute(stmt)).scalar_one_or_none()
            seq = -1 if last_seq is None else last_seq
            for point in points:
                seq += 1
                session.add(_point_to_row(track_id, seq, point))
            await session.commit()

    async def append_point(self, track_id: str, point: EnrichedPoint):
        await self.append_points(track_id, [point])

    async def get_track(self, track_id: str) -> list[EnrichedPoint]:
        """Get all points of a track in recording order"""
        async with self.async_session() as session:
            stmt = (
                select(TrackPoint)
                .where(TrackPoint.track_id == track_id)
                .order_by(TrackPoint.seq.asc())
            )
            result = await session.execute(stmt)
            return [_row_to_point(row) for row in result.scalars().all()]

    async def get_all_tracks(self) -> dict[str, list[EnrichedPoint]]:
        """Snapshot of every stored track, keyed by track id"""
        async with self.async_session() as session:
            track_ids = (await session.execute(select(Track.id).order_by(Track.id))).scalars().all()
            tracks: dict[str, list[EnrichedPoint]] = {tid: [] for tid in track_ids}

            stmt = select(TrackPoint).order_by(TrackPoint.track_id, TrackPoint.seq.asc())
            result = await session.execute(stmt)
            for row in result.scalars().all():
                tracks.setdefault(row.track_id, []).append(_row_to_point(row))
            return tracks

    async def list_tracks(self) -> list[dict[str, Any]]:
        """Track ids with point counts"""
        async with self.async_session() as session:
            stmt = (
                select(
                    Track.id,
                    Track.scenario,
                    Track.source,
                    Track.created_at,
                    func.count(TrackPoint.id).label("points"),
                )
                .outerjoin(TrackPoint, TrackPoint.track_id == Track.id)
                .group_by(Track.id)
                .order_by(Track.id)
            )
            result = await session.execute(stmt)
            return [
                {
                    "id": row.id,
                    "scenario": row.scenario,
                    "source": row.source,
                    "created_at": row.created_at,
                    "points": row.points,
                }
                for row in result.all()
            ]

    async def delete_track(self, track_id: str) -> bool:
        """Delete a track and all its points in one transaction"""
        async with self.async_session() as session:
            async with session.begin():
                await session.execute(delete(TrackPoint).where(TrackPoint.track_id == track_id))
                result = await session.execute(delete(Track).where(Track.id == track_id))
            return result.rowcount > 0

    async def add_geofence(self, lat: float, lon: float, radius_m: float) -> GeofenceRecord:
        async with self.async_session() as session:
            fence = Geofence(latitude=lat, longitude=lon, radius_m=radius_m)
            session.add(fence)
            await session.commit()
            await session.refresh(fence)
            return GeofenceRecord(lat=fence.latitude, lon=fence.longitude, radius_m=fence.radius_m, id=fence.id)

    async def list_geofences(self) -> list[GeofenceRecord]:
        async with self.async_session() as session:
            result = await session.execute(select(Geofence).order_by(Geofence.id))
            return [
                GeofenceRecord(lat=g.latitude, lon=g.longitude, radius_m=g.radius_m, id=g.id)
                for g in result.scalars().all()
            ]

    async def delete_geofence(self, geofence_id: int) -> bool:
        async with self.async_session() as session:
            result = await session.execute(delete(Geofence).where(Geofence.id == geofence_id))
            await session.commit()
            return result.rowcount > 0

    async def clear_geofences(self):
        async with self.async_session() as session:
            await session.execute(delete(Geofence))
            await session.commit()

    async def save_alerts(self, track_id: str | None, alerts: list[Alert]):
        """Append alerts to the event log"""
        if not alerts:
            return
        async with self.async_session() as session:
            for alert in alerts:
                session.add(
                    AlertEvent(
                        track_id=track_id,
                        kind=alert.kind,
                        message=alert.message,
                        latitude=alert.lat,
                        longitude=alert.lon,
                        value=alert.value,
                        details=json.dumps(alert.details, default=str),
                        ts=alert.ts,
                    )
                )
            await session.commit()

    async def get_alerts(self, track_id: str | None = None, kind: str | None = None) -> list[Alert]:
        """Get logged alerts in the order they were raised"""
        async with self.async_session() as session:
            stmt = select(AlertEvent)
            if track_id:
                stmt = stmt.where(AlertEvent.track_id == track_id)
            if kind:
                stmt = stmt.where(AlertEvent.kind == kind)
            stmt = stmt.order_by(AlertEvent.id.asc())

            result = await session.execute(stmt)
            return [
                Alert(
                    kind=event.kind,
                    message=event.message,
                    lat=event.latitude,
                    lon=event.longitude,
                    value=event.value,
                    ts=event.ts,
                    details=json.loads(event.details) if event.details else {},
                )
                for event in result.scalars().all()
            ]

    async def clear_all(self):
        """Delete every track, point, geofence and alert"""
        async with self.async_session() as session:
            async with session.begin():
                for model in (TrackPoint, Track, Geofence, AlertEvent):
                    await session.execute(delete(model))

    async def close(self):
        """Close database connection"""
        await self.engine.dispose()
