"""
Murmur Backend — Database Handle
==================================

What:  Async SQLAlchemy engine, session factory and statement timeout,
       bundled in one explicitly constructed `Database` object.
How:   The app lifespan builds a Database from Settings on startup, stores it
       on `app.state.database`, and disposes it on shutdown. Services receive
       it through FastAPI dependencies; nothing here is module-global.
Who:   Services (sessions, bounded calls), health route (ping), Alembic (Base).

Session Semantics:
    `async with database.session() as session:` commits when the block exits
    cleanly, rolls back on any exception, and always closes the session.

Timeouts:
    `await database.bounded(session.execute(stmt))` cancels the round trip
    after `db_timeout_seconds` and raises StoreUnavailableError (→ 503).
    There are no retries.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, TypeVar

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from murmur.config import Settings
from murmur.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Base(DeclarativeBase):
    """Base class for all ORM models; its metadata drives Alembic."""
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured URL.

    Pool sizing only applies to server databases; SQLite (tests, local dev)
    uses SQLAlchemy's default pool for the aiosqlite driver.
    """
    options = {
        "echo": settings.log_level == "DEBUG",
        "pool_pre_ping": settings.db_pool_pre_ping,
    }
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **options)


class Database:
    """
    Store handle owned by the process entry point.

    Attributes:
        engine:          Async engine (connection pool)
        session_factory: Produces AsyncSession instances, expire_on_commit=False
        timeout:         Seconds allowed per bounded store call
    """

    def __init__(self, settings: Settings, engine: AsyncEngine | None = None):
        self.engine = engine or build_engine(settings)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self.timeout = settings.db_timeout_seconds

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Unit of work for one service operation.

        Commits on success, rolls back on any error, closes in every case.
        The exception is re-raised for the global handlers.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await self.bounded(session.commit())
            except BaseException:
                await session.rollback()
                raise

    async def bounded(self, awaitable: Awaitable[T]) -> T:
        """Await a store call, giving up after `self.timeout` seconds."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("Store call exceeded %.1fs timeout", self.timeout)
            raise StoreUnavailableError(
                retry_after=max(1, int(self.timeout)),
                context={"timeout_seconds": self.timeout},
            )

    async def ping(self) -> bool:
        """Run SELECT 1; used by the health check."""
        async with self.engine.connect() as conn:
            await self.bounded(conn.execute(text("SELECT 1")))
        return True

    async def create_all(self) -> None:
        """Create every mapped table that does not exist yet (DB_AUTO_CREATE)."""
        # Models must be imported so their tables are registered on Base.metadata
        import murmur.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close every pooled connection. Called on application shutdown."""
        await self.engine.dispose()
