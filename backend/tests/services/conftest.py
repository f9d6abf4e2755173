"""Service test fixtures — async DB, seeded users/tracks, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB sessions
    - db_manager patched so the readiness probe sees the test engine
    - Concurrency tests use file_session_factory: one connection per session

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for service
      and route tests (FOR UPDATE is a no-op there; the in-process
      aggregate_lock still serializes same-user writers)
    - Objects touched after a rolled-back write must be refreshed first:
      rollback expires every instance in the session
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
from app.models.track import Track
from app.models.user import User
import app.infrastructure.database as db_module
from app.main import app

FAR_FUTURE_RESET = datetime(2099, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def file_session_factory(tmp_path):
    """File-backed SQLite: each session checks out its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'race.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def settings():
    """Default settings, independent of the process environment."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        monthly_vote_allowance=10,
        conflict_retry_attempts=1,
    )


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Seed helpers ────────────────────────────────────────────────

async def seed_user(db: AsyncSession, **fields) -> User:
    fields.setdefault("votes_reset_date", FAR_FUTURE_RESET)
    user = User(**fields)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def seed_track(db: AsyncSession, artist: User, **fields) -> Track:
    fields.setdefault("title", "Untitled")
    track = Track(artist_id=artist.id, **fields)
    db.add(track)
    await db.commit()
    await db.refresh(track)
    return track


@pytest.fixture
async def artist(test_db):
    """Artist with 5 premium and 100 standard credits."""
    return await seed_user(
        test_db, display_name="artist", premium_credits=5, standard_credits=100,
    )


@pytest.fixture
async def listener(test_db):
    """Listener with the full monthly allowance."""
    return await seed_user(
        test_db, display_name="listener", monthly_votes_remaining=10,
    )


@pytest.fixture
async def track(test_db, artist):
    return await seed_track(test_db, artist, title="First Light")


@pytest.fixture
def make_user(test_db):
    """Factory: `await make_user(premium_credits=3, ...)`."""
    async def _make(**fields) -> User:
        return await seed_user(test_db, **fields)
    return _make


@pytest.fixture
def make_track(test_db):
    """Factory: `await make_track(artist, title=..., boost_pool=...)`."""
    async def _make(artist: User, **fields) -> Track:
        return await seed_track(test_db, artist, **fields)
    return _make
