"""
Database Configuration for College Quest

Async SQLAlchemy engine and session management for the Supabase Postgres
database. Nothing connects until the first session is opened.
"""

import re
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
from urllib.parse import quote_plus

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from college_quest.config.settings import Settings, settings as default_settings
from college_quest.infrastructure.exceptions import ConfigurationError


ASYNC_DRIVER = "postgresql+asyncpg://"
SUPABASE_PROJECT_RE = re.compile(r"https?://([^.]+)\.supabase\.co")


def resolve_database_url(config: Optional[Settings] = None) -> str:
    """
    Async connection URL for the app and for alembic.

    DATABASE_URL wins when set (its scheme is switched to asyncpg). Otherwise
    the Supabase direct connection is derived from SUPABASE_URL and
    SUPABASE_PASSWORD.
    """
    config = config or default_settings

    if config.database_url:
        for scheme in ("postgresql://", "postgres://"):
            if config.database_url.startswith(scheme):
                return ASYNC_DRIVER + config.database_url[len(scheme):]
        return config.database_url

    if not config.supabase_password:
        raise ConfigurationError(
            "Either DATABASE_URL or (SUPABASE_URL + SUPABASE_PASSWORD) is required",
            missing_keys=["DATABASE_URL", "SUPABASE_PASSWORD"],
        )

    match = SUPABASE_PROJECT_RE.match(config.supabase_url)
    if not match:
        raise ConfigurationError(f"Invalid SUPABASE_URL format: {config.supabase_url}")

    password = quote_plus(config.supabase_password)
    return f"{ASYNC_DRIVER}postgres:{password}@db.{match.group(1)}.supabase.co:5432/postgres"


class DatabaseManager:
    """Owns the process-wide engine and session factory."""

    def __init__(self, url: Optional[str] = None):
        self._url = url
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(
                self._url or resolve_database_url(),
                echo=default_settings.database_echo,
                pool_size=default_settings.database_pool_size,
                max_overflow=default_settings.database_max_overflow,
                pool_timeout=default_settings.database_pool_timeout,
                pool_pre_ping=True,
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """One unit of work: commit on success, roll back on any exception."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session dependency."""
    async with get_db_manager().session_scope() as session:
        yield session


def get_session_context():
    """
    Session outside a request, e.g. from a maintenance script.

    Usage:
        async with get_session_context() as session:
            result = await session.execute(query)
    """
    return get_db_manager().session_scope()


async def init_db() -> None:
    """Open the pool and check connectivity (app startup)."""
    async with get_db_manager().session_factory() as session:
        await session.execute(text("SELECT 1"))


async def close_db() -> None:
    await get_db_manager().close()
