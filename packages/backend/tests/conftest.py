"""Test fixtures — a fresh in-memory database per test.

Learn: Each test gets its own SQLite engine (aiosqlite, StaticPool so
every session shares the one in-memory connection) with the schema
created from the ORM models. The app's get_db is overridden to hand out
a new session per request, exactly like production, so tests exercise
the real commit/load behavior. Nothing leaks between tests because the
whole database disappears with the engine.
"""

import os

# Point the app's own engine at SQLite before anything imports inkpost
os.environ.setdefault("INKPOST_DATABASE_URL", "sqlite+aiosqlite://")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from inkpost.config import settings
from inkpost.db.engine import get_db
from inkpost.db.models import Base
from inkpost.main import app

TEST_DB_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture()
async def session_factory():
    """Session factory bound to a brand-new in-memory database."""
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A single session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory, tmp_path, monkeypatch):
    """HTTP client with get_db overridden and uploads going to a temp dir.

    Learn: Auth is NOT mocked. Tests that need a user sign up, log in,
    and send the real token, so the auth gate runs for every request.
    """
    monkeypatch.setattr(settings, "image_dir", str(tmp_path / "images"))

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
