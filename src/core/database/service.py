"""
Database Service

Owns the single ``AsyncEngine`` of the process and hands out sessions. The
SQL skill store opens exactly one ``get_transaction()`` per unit of work, so
a reconciliation either lands completely or not at all.

>>> async with DatabaseService.get_transaction() as session:
...     player = await DatabaseService.get_locked_entity(session, PlayerCore, pid)
...     player.last_seen = now
...     # committed on exit, rolled back on exception

Under ``ENVIRONMENT=testing`` the engine uses ``NullPool`` so containers
can be torn down between tests without dangling connections. On PostgreSQL
every session gets ``SET LOCAL statement_timeout``.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Dict, Optional, Type, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from src.core.config.config import Config
from src.core.database.base import Base
from src.core.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class DatabaseInitializationError(RuntimeError):
    """DATABASE_URL is missing or the engine could not be created."""


class DatabaseNotInitializedError(RuntimeError):
    """A session was requested before ``DatabaseService.initialize()``."""


@dataclass(frozen=True)
class _EngineSettings:
    url: str
    statement_timeout_ms: int
    engine_kwargs: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_postgres(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def scheme(self) -> str:
        return self.url.split(":", 1)[0]

    @classmethod
    def from_config(cls, url: Optional[str]) -> "_EngineSettings":
        database_url = url or Config.DATABASE_URL
        if not database_url:
            raise DatabaseInitializationError("DATABASE_URL must be a non-empty string")

        kwargs: Dict[str, Any] = {"echo": Config.DATABASE_ECHO}
        if Config.is_testing():
            kwargs["poolclass"] = NullPool
        else:
            kwargs.update(
                pool_size=Config.DATABASE_POOL_SIZE,
                max_overflow=Config.DATABASE_MAX_OVERFLOW,
                pool_recycle=Config.DATABASE_POOL_RECYCLE,
                pool_timeout=Config.DATABASE_POOL_TIMEOUT,
                pool_pre_ping=True,
            )
        return cls(database_url, Config.DATABASE_STATEMENT_TIMEOUT_MS, kwargs)


class DatabaseService:
    """Class-level engine holder; never instantiated."""

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    _settings: Optional[_EngineSettings] = None
    _init_lock: Optional[asyncio.Lock] = None

    @classmethod
    def _lock(cls) -> asyncio.Lock:
        # Lazy so the lock binds to the running loop.
        if cls._init_lock is None:
            cls._init_lock = asyncio.Lock()
        return cls._init_lock

    @classmethod
    async def initialize(cls, url: Optional[str] = None) -> None:
        """
        Create the engine and session factory. Idempotent.

        ``url`` overrides ``Config.DATABASE_URL``; integration tests pass the
        URL of their throwaway container.
        """
        async with cls._lock():
            if cls._engine is not None:
                return

            settings = _EngineSettings.from_config(url)
            try:
                engine = create_async_engine(settings.url, **settings.engine_kwargs)
            except Exception as exc:
                logger.error(
                    "Engine creation failed",
                    extra={"url_scheme": settings.scheme, "error_type": type(exc).__name__},
                    exc_info=True,
                )
                raise DatabaseInitializationError(f"Database initialization failed: {exc}") from exc

            cls._engine = engine
            cls._settings = settings
            cls._session_factory = async_sessionmaker(
                bind=engine, class_=AsyncSession, expire_on_commit=False
            )
            logger.info(
                "DatabaseService initialized",
                extra={"url_scheme": settings.scheme, "testing_pool": Config.is_testing()},
            )

    @classmethod
    async def shutdown(cls) -> None:
        """Dispose the engine. Safe to call repeatedly."""
        async with cls._lock():
            if cls._engine is None:
                return
            try:
                await cls._engine.dispose()
            finally:
                cls._engine = None
                cls._session_factory = None
                cls._settings = None
            logger.info("DatabaseService shut down")

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._engine is not None

    @classmethod
    def _require_engine(cls) -> AsyncEngine:
        if cls._engine is None:
            raise DatabaseNotInitializedError(
                "Call DatabaseService.initialize() during startup before using the database"
            )
        return cls._engine

    # ========================================================================
    # Schema
    # ========================================================================

    @classmethod
    async def create_schema(cls) -> None:
        """Create missing tables (development and integration tests; no migrations)."""
        engine = cls._require_engine()

        # Importing the models registers their tables on Base.metadata.
        import src.database.models  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured", extra={"tables": sorted(Base.metadata.tables)})

    @classmethod
    async def drop_schema(cls) -> None:
        engine = cls._require_engine()
        import src.database.models  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Database schema dropped")

    # ========================================================================
    # Sessions
    # ========================================================================

    @classmethod
    async def _prepare(cls, session: AsyncSession) -> None:
        if cls._settings is not None and cls._settings.is_postgres:
            timeout = int(cls._settings.statement_timeout_ms)
            await session.execute(text(f"SET LOCAL statement_timeout = {timeout}"))

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """Session without automatic commit; use for reads."""
        cls._require_engine()
        assert cls._session_factory is not None

        async with cls._session_factory() as session:
            await cls._prepare(session)
            yield session

    @classmethod
    @asynccontextmanager
    async def get_transaction(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Atomic session: commit on normal exit, rollback and re-raise otherwise.

        Callers must not commit or roll back themselves.
        """
        cls._require_engine()
        assert cls._session_factory is not None

        started = time.perf_counter()
        async with cls._session_factory() as session:
            try:
                await cls._prepare(session)
                yield session
                await session.commit()
            except DBAPIError as exc:
                await session.rollback()
                logger.error(
                    "Driver error in transaction; rolled back",
                    extra={
                        "error_type": type(exc.orig).__name__ if exc.orig else type(exc).__name__,
                        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
                    },
                    exc_info=True,
                )
                raise
            except Exception:
                await session.rollback()
                raise

    @classmethod
    async def get_locked_entity(
        cls,
        session: AsyncSession,
        model: Type[T],
        primary_key: Any,
    ) -> Optional[T]:
        """``SELECT ... FOR UPDATE`` by primary key; use inside ``get_transaction()``."""
        return await session.get(model, primary_key, with_for_update=True)
