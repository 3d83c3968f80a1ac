"""Tests for database operations"""

import pytest

from fixtrack.database import Database
from fixtrack.services.pipeline import TrackingSession
from fixtrack.services.records import Alert
from fixtrack.services.simulator import simulate_track


@pytest.fixture
async def db():
    """Create test database"""
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.init_db()
    yield database
    await database.close()


@pytest.mark.asyncio
async def test_append_and_get_track(db, make_point):
    """Points come back in order and unchanged"""
    await db.create_track("t1", scenario="WALK")
    first = make_point(lat=1.0, ts=1000, altitude=12.5, gap=None)
    second = make_point(lat=1.001, ts=2000, altitude=None, gap=1.0)
    await db.append_point("t1", first)
    await db.append_point("t1", second)

    points = await db.get_track("t1")
    assert points == [first, second]


@pytest.mark.asyncio
async def test_quality_flags_roundtrip(db, make_fix):
    session = TrackingSession()
    session.process(make_fix(ts=0))
    point = session.process(make_fix(lat=0.001, ts=1000, accuracy=150))

    await db.create_track("t1")
    await db.append_point("t1", point)
    (stored,) = await db.get_track("t1")
    assert stored.quality.flags == point.quality.flags
    assert "position_spike" in stored.quality.flags


@pytest.mark.asyncio
async def test_list_and_get_all_tracks(db):
    await db.create_track("a")
    await db.create_track("b")
    await db.append_points("a", simulate_track(n=12))

    listed = {t["id"]: t["points"] for t in await db.list_tracks()}
    assert listed == {"a": 12, "b": 0}

    tracks = await db.get_all_tracks()
    assert len(tracks["a"]) == 12
    assert tracks["b"] == []
    assert await db.track_exists("a") is True
    assert await db.track_exists("zzz") is False


@pytest.mark.asyncio
async def test_delete_track(db):
    await db.create_track("a")
    await db.append_points("a", simulate_track(n=5))

    assert await db.delete_track("a") is True
    assert await db.get_track("a") == []
    assert await db.track_exists("a") is False
    assert await db.delete_track("a") is False


@pytest.mark.asyncio
async def test_geofences(db):
    fence = await db.add_geofence(10.0, 20.0, 150.0)
    assert fence.id is not None
    assert (fence.lat, fence.lon, fence.radius_m) == (10.0, 20.0, 150.0)

    assert await db.list_geofences() == [fence]
    assert await db.delete_geofence(fence.id) is True
    assert await db.list_geofences() == []
    assert await db.delete_geofence(fence.id) is False


@pytest.mark.asyncio
async def test_alerts(db):
    await db.save_alerts(
        "t1",
        [
            Alert(kind="gps_gap", message="GPS gap of 12.0 s", lat=1.0, lon=2.0, value=12.0, ts=1),
            Alert(kind="geofence", message="Left geofence", ts=2, details={"fence_id": 3}),
        ],
    )
    await db.save_alerts("t2", [Alert(kind="generic", message="Recording stopped", ts=3)])

    alerts = await db.get_alerts()
    assert [a.kind for a in alerts] == ["gps_gap", "geofence", "generic"]
    assert alerts[1].details == {"fence_id": 3}

    assert len(await db.get_alerts(track_id="t1")) == 2
    assert [a.ts for a in await db.get_alerts(kind="geofence")] == [2]


@pytest.mark.asyncio
async def test_clear_all(db):
    await db.create_track("a")
    await db.append_points("a", simulate_track(n=3))
    await db.add_geofence(0, 0, 10)
    await db.save_alerts("a", [Alert(kind="generic", message="x", ts=1)])

    await db.clear_all()
    assert await db.list_tracks() == []
    assert await db.list_geofences() == []
    assert await db.get_alerts() == []
