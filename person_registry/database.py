"""Database setup and session management."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from .config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def to_async_url(db_url: str) -> str:
    """Convert a configured database URL to its async driver form."""
    db_url = db_url.replace("postgresql+psycopg://", "postgresql+asyncpg://")
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if db_url.startswith("sqlite://"):
        db_url = db_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return db_url


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create the application engine with a bounded connection pool."""
    if not settings.db_url:
        raise ValueError("DB_URL not configured")

    db_url = to_async_url(settings.db_url)
    options: dict = {"echo": settings.env == "dev" and settings.log_level == "debug"}
    if make_url(db_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=0,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
        )
    return create_async_engine(db_url, **options)


class Database:
    """Pooled storage capability with an explicit lifecycle.

    Created once at startup and handed to the services that need it;
    ``dispose`` drains the pool at shutdown.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(create_engine_from_settings(settings))

    async def create_schema(self) -> None:
        """Create all tables known to the metadata (no-op for existing ones)."""
        from . import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Yield a session inside a single transaction.

        Commits when the block exits normally and rolls back on any
        exception, cancellation included.
        """
        async with self.session_factory() as session:
            async with session.begin():
                yield session

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            logger.warning("database.ping_failed", exc_info=True)
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the application's Database."""
    return request.app.state.database

