from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from pydantic_settings import BaseSettings
from sqlalchemy import NullPool, QueuePool, StaticPool
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from commons.db.profiles import build_engine_options

logger = logging.getLogger(__name__)

# profiles and settings name the pool class, the engine wants the class
POOL_CLASSES = {
    "NullPool": NullPool,
    "QueuePool": QueuePool,
    "StaticPool": StaticPool,
}


def create_engine_from_options(database_url: str, options: dict[str, Any]) -> AsyncEngine:
    """
    Create an async engine from profile style options.

    Raises:
        ValueError: If ``poolclass`` names a pool that is not in POOL_CLASSES
    """
    options = dict(options)
    poolclass = options.get("poolclass")
    if isinstance(poolclass, str):
        if poolclass not in POOL_CLASSES:
            raise ValueError(f"Unknown poolclass {poolclass!r}, expected one of {sorted(POOL_CLASSES)}")
        options["poolclass"] = POOL_CLASSES[poolclass]
    return create_async_engine(database_url, **options)


class AsyncSessionManager:
    """
    Owns one engine and hands out request scoped async sessions bound to it.

    A session is committed (optionally), rolled back on error and always closed on exit.
    When ``max_concurrent_sessions`` is set, callers wait for a free slot.
    """

    def __init__(self, database_url: str, engine_options: dict[str, Any], max_concurrent_sessions: int | None = None):
        self.engine = create_engine_from_options(database_url, engine_options)
        self._factory = async_sessionmaker(
            bind=self.engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
        )
        self._sem = asyncio.Semaphore(max_concurrent_sessions) if max_concurrent_sessions else None
        self._active = 0

    @property
    def current_session_count(self) -> int:
        return self._active

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def _slot(self) -> AsyncGenerator[None, None]:
        if self._sem is None:
            yield
            return
        async with self._sem:
            yield

    @asynccontextmanager
    async def session(self, *, commit: bool = True) -> AsyncGenerator[AsyncSession, None]:
        async with self._slot():
            self._active += 1
            session = self._factory()
            try:
                yield session
                if commit:
                    await session.commit()
            except BaseException:
                # also covers cancellation of the request task
                await session.rollback()
                raise
            finally:
                await session.close()
                self._active -= 1


_manager: AsyncSessionManager | None = None
_db_url: str | None = None


def init_session_manager(settings: BaseSettings, app_name: str | None = None) -> AsyncSessionManager:
    """
    Initialize (or return) the global AsyncSessionManager from *settings*.

    Expected attributes on settings:
        DATABASE_URL: str
        SQLALCHEMY_ENGINE_OPTIONS: dict | None
        DB_PROFILE: str | None
        DB_MAX_CONCURRENT_SESSIONS: int | None

    Raises:
        ValueError: If DATABASE_URL is missing or differs from the previous initialization
    """
    global _manager, _db_url

    database_url = getattr(settings, "DATABASE_URL", None)
    if not database_url:
        raise ValueError("DATABASE_URL is not set in settings")

    if _manager:
        if database_url != _db_url:
            raise ValueError(
                f"init_session_manager() called with different DATABASE_URL (prev={_db_url}, new={database_url})"
            )
        return _manager

    engine_options = build_engine_options(
        profile=getattr(settings, "DB_PROFILE", None) or "dev",
        overrides=getattr(settings, "SQLALCHEMY_ENGINE_OPTIONS", None),
        app_name=app_name,
        dialect=make_url(database_url).get_backend_name(),
    )
    _manager = AsyncSessionManager(
        database_url=database_url,
        engine_options=engine_options,
        max_concurrent_sessions=getattr(settings, "DB_MAX_CONCURRENT_SESSIONS", None),
    )
    _db_url = database_url

    logger.info(
        "Global AsyncSessionManager initialized for %s: pool_size=%s max_overflow=%s",
        app_name,
        engine_options.get("pool_size"),
        engine_options.get("max_overflow"),
    )
    return _manager


def get_session_manager() -> AsyncSessionManager:
    assert _manager is not None, "Session manager not initialized. Call init_session_manager() first."
    return _manager


async def dispose_session_manager() -> None:
    """Dispose the engine and reset global state (for lifespan shutdown or tests)."""
    global _manager, _db_url
    if _manager:
        await _manager.dispose()
    _manager = _db_url = None
    logger.info("Global AsyncSessionManager disposed")


@asynccontextmanager
async def open_async_session(settings: BaseSettings, *, app_name: str | None = None) -> AsyncGenerator[AsyncSession, None]:
    """
    Session context manager for scripts and CLI commands.

        async with open_async_session(get_settings(), app_name="world_cities_loader") as session:
            ...
    """
    init_session_manager(settings, app_name=app_name)
    try:
        async with get_session_manager().session() as session:
            yield session
    finally:
        await dispose_session_manager()
