import asyncio

import pytest
from pydantic import ValidationError as SettingsError

from orderdesk.core.config import get_settings
from orderdesk.database import DatabaseGateway, ping_db


async def test_concurrent_connects_share_one_engine(db_path):
    gw = DatabaseGateway()

    engines = await asyncio.gather(*(gw.connect() for _ in range(10)))

    assert all(engine is engines[0] for engine in engines)
    assert await gw.connect() is engines[0]
    await gw.dispose()


async def test_dispose_allows_reconnect(db_path):
    gw = DatabaseGateway()
    first = await gw.connect()
    await gw.dispose()

    assert not gw.is_connected
    second = await gw.connect()
    assert second is not first
    await gw.dispose()


async def test_session_maker_uses_shared_engine(db_path):
    gw = DatabaseGateway()
    engine = await gw.connect()
    session_maker = await gw.session_maker()

    async with session_maker() as session:
        assert session.bind is engine
    await gw.dispose()


async def test_missing_store_location_fails(monkeypatch, db_path):
    monkeypatch.delenv("DATABASE_URL")
    get_settings.cache_clear()

    with pytest.raises(SettingsError):
        await DatabaseGateway().connect()


async def test_ping(db_path):
    from orderdesk.database import gateway

    assert await ping_db() is True
    await gateway.dispose()
