from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.core.errors import StorageUnavailableError
from .config import Settings, get_settings, to_async_url

logger = logging.getLogger(__name__)


class Database:
    """
    Owner of the AsyncEngine and session factory.

    One instance is created per application (see src.api.main.create_app) and
    handed to whatever needs sessions; the engine is created lazily on first use
    so constructing a Database never touches the network.
    """

    def __init__(self, url: Optional[str] = None, *, echo: bool = False, settings: Optional[Settings] = None) -> None:
        self._url = to_async_url(url) if url else None
        self._settings = settings
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._session_maker: async_sessionmaker[AsyncSession] | None = None

    # PUBLIC_INTERFACE
    @property
    def url(self) -> str:
        """Async database URL, read from the database settings on first access when not given."""
        if self._url is None:
            settings = self._settings or get_settings()
            self._url = settings.async_database_url
            self.echo = self.echo or settings.SQL_ECHO
        return self._url

    def _ensure_engine_initialized(self) -> None:
        if self._engine is None:
            url = self.url
            kwargs = {"echo": self.echo}
            if not url.startswith("sqlite"):
                kwargs["pool_pre_ping"] = True
            self._engine = create_async_engine(url, **kwargs)
        if self._session_maker is None:
            self._session_maker = async_sessionmaker(
                bind=self._engine, expire_on_commit=False, autoflush=False, autocommit=False
            )

    # PUBLIC_INTERFACE
    @property
    def engine(self) -> AsyncEngine:
        """Return the AsyncEngine, creating it on first access."""
        self._ensure_engine_initialized()
        assert self._engine is not None
        return self._engine

    # PUBLIC_INTERFACE
    def session(self) -> AsyncSession:
        """Open a new AsyncSession; use as an async context manager."""
        self._ensure_engine_initialized()
        assert self._session_maker is not None
        return self._session_maker()

    # PUBLIC_INTERFACE
    async def dispose(self) -> None:
        """Dispose the engine's connection pool."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_maker = None


# PUBLIC_INTERFACE
@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Run the enclosed block as one all-or-nothing unit of work.

    Usage:
        async with transaction(session):
            ...  # every write here commits together or not at all

    Commits when the block exits cleanly and rolls back on any exception.
    Connectivity and schema failures from the driver surface as
    StorageUnavailableError; everything else propagates unchanged.
    """
    try:
        yield session
        await session.commit()
    except (OperationalError, InterfaceError) as exc:
        await session.rollback()
        logger.error("Storage failure, transaction rolled back: %s", exc.orig)
        raise StorageUnavailableError("Storage is unavailable") from exc
    except BaseException:
        await session.rollback()
        raise


# PUBLIC_INTERFACE
@asynccontextmanager
async def reading(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Run read-only queries with the same storage failure mapping as transaction().

    Nothing is committed; a driver connectivity or schema failure is rolled back
    and re-raised as StorageUnavailableError.
    """
    try:
        yield session
    except (OperationalError, InterfaceError) as exc:
        await session.rollback()
        logger.error("Storage failure during read: %s", exc.orig)
        raise StorageUnavailableError("Storage is unavailable") from exc
