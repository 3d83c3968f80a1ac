"""SQLAlchemy ORM models"""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Track(Base):
    """A recorded track; points are append-only"""

    __tablename__ = "tracks"

    id = Column(String, primary_key=True)
    scenario = Column(String, default="UNKNOWN")
    source = Column(String, default="recording")
    created_at = Column(DateTime, server_default=func.now())


class TrackPoint(Base):
    """One enriched point: raw fix, quality and filtered values"""

    __tablename__ = "track_points"

    id = Column(Integer, primary_key=True, autoincrement=True)
    track_id = Column(String, ForeignKey("tracks.id", ondelete="CASCADE"), nullable=False)
    seq = Column(Integer, nullable=False)

    raw_lat = Column(Float, nullable=False)
    raw_lon = Column(Float, nullable=False)
    raw_altitude = Column(Float)
    accuracy = Column(Float, nullable=False)
    heading = Column(Float)
    raw_speed_ms = Column(Float)
    raw_timestamp = Column(Integer, nullable=False)

    quality_score = Column(Integer, nullable=False)
    quality_flags = Column(Text)
    confidence = Column(Float, nullable=False)
    suggested_action = Column(String, nullable=False)

    filtered_lat = Column(Float, nullable=False)
    filtered_lon = Column(Float, nullable=False)
    filtered_altitude = Column(Float)
    filtered_speed_kmh = Column(Float, nullable=False)
    activity = Column(String, nullable=False)
    is_quality_point = Column(Boolean, nullable=False)

    captured_at = Column(Integer, nullable=False)
    scenario = Column(String)
    gap_from_prev_sec = Column(Float)

    __table_args__ = (Index("idx_track_seq", "track_id", "seq", unique=True),)


class Geofence(Base):
    """Circular geofence"""

    __tablename__ = "geofences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    radius_m = Column(Float, nullable=False)


class AlertEvent(Base):
    """Event log entry for an alert raised while recording"""

    __tablename__ = "alert_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    track_id = Column(String)
    kind = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)
    value = Column(Float)
    details = Column(Text)
    ts = Column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_alert_track", "track_id"),
        Index("idx_alert_kind", "kind"),
    )
