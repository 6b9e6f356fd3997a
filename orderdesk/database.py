"""
Database Connection Module

Owns the single process-wide SQLAlchemy async engine. The engine is created
lazily by the first caller of ``gateway.connect()``; concurrent first callers
wait on the same lock and all receive the same engine.
"""

import asyncio
import logging
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from orderdesk.core.config import get_settings

logger = logging.getLogger(__name__)


# Base class for all our models
class Base(DeclarativeBase):
    pass


class DatabaseGateway:
    """
    Connect-once accessor for the shared engine and session factory.

    ``connect()`` is safe to await from any number of concurrent requests:
    only the first one builds the engine, the rest get the memoized handle.
    ``dispose()`` closes the pool and forgets the handle so a later
    ``connect()`` starts over (used on shutdown and in tests).
    """

    def __init__(self) -> None:
        self._engine: Optional[AsyncEngine] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None
        self._lock: Optional[asyncio.Lock] = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> AsyncEngine:
        if self._engine is not None:
            return self._engine

        # Created inside the running loop; no await between check and assignment.
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            if self._engine is None:
                self._engine = self._create_engine()
                self._session_maker = async_sessionmaker(
                    bind=self._engine,
                    class_=AsyncSession,
                    expire_on_commit=False,  # Objects remain accessible after commit
                )
        return self._engine

    def _create_engine(self) -> AsyncEngine:
        settings = get_settings()
        options = {"echo": settings.database_echo}
        if not settings.uses_sqlite:
            options.update(
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
                pool_pre_ping=True,
            )

        engine = create_async_engine(settings.database_url, **options)
        logger.info(f"Database engine created ({engine.url.get_backend_name()})")
        return engine

    async def session_maker(self) -> async_sessionmaker[AsyncSession]:
        await self.connect()
        return self._session_maker

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_maker = None
        self._lock = None


gateway = DatabaseGateway()


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    session_maker = await gateway.session_maker()
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """
    Create all tables in database.
    Called once at application startup.
    """
    # Register the mapped tables on Base.metadata
    from orderdesk import models  # noqa: F401

    engine = await gateway.connect()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def ping_db() -> bool:
    """Return True when a trivial query succeeds through the shared engine."""
    try:
        engine = await gateway.connect()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
