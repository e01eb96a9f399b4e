"""
Pytest fixtures for the farm sync server tests.

Every test gets its own SQLite file database (through aiosqlite), a session
factory bound to it, and an httpx client talking to the FastAPI app in
process with the get_db dependency pointed at that database.
"""

import os

# Must be set before farmsync.core.config is imported.
os.environ.setdefault("DB_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

from datetime import datetime, timedelta

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from farmsync.db.base import get_db, init_models
from farmsync.main import app


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'farmsync.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


class TickingClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current += self.step
        return now


@pytest.fixture
def clock(monkeypatch):
    """Replace the server clock in every service that stamps rows."""
    ticking = TickingClock(datetime(2026, 1, 1, 12, 0, 0))
    monkeypatch.setattr("farmsync.domain.sync.service.utcnow", ticking)
    monkeypatch.setattr("farmsync.domain.sales.service.utcnow", ticking)
    return ticking
