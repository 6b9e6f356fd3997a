"""
Shared fixtures.

Every test gets its own SQLite file under ``tmp_path``. DATABASE_URL gets a
default before any ``orderdesk`` import because the app module reads
settings at import time.
"""

import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./orderdesk-test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from orderdesk.core.config import get_settings
from orderdesk.database import Base, gateway
from orderdesk import models  # noqa: F401


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "orders.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{path}")
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()


@pytest.fixture
async def session(db_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as db:
        yield db
    await engine.dispose()


@pytest.fixture
def client(db_path):
    from orderdesk.main import app

    with TestClient(app) as test_client:
        yield test_client
    assert not gateway.is_connected


@pytest.fixture
def sync_engine(db_path):
    """Plain synchronous engine for inspecting what the API wrote."""
    engine = create_engine(f"sqlite:///{db_path}")
    yield engine
    engine.dispose()


class FakeClock:
    """Hands out strictly increasing timestamps, one minute apart."""

    def __init__(self):
        self.current = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.current = self.current + timedelta(minutes=1)
        return self.current


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr("orderdesk.repositories.orders.utc_now", fake)
    return fake
