"""Shared test fixtures and configuration."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from person_registry.config import Settings
from person_registry.database import Base, Database
from person_registry.main import create_app
from person_registry.services.person import PersonMutationOrchestrator
import person_registry.models  # noqa: F401


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """File-backed SQLite database so separate sessions share state."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}",
        echo=False,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    db = Database(engine)
    yield db

    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with database.session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def orchestrator(database: Database) -> PersonMutationOrchestrator:
    return PersonMutationOrchestrator(database, step_timeout=5)


@pytest_asyncio.fixture
async def client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client bound to the test database."""
    app = create_app(
        settings=Settings(db_url="sqlite://", db_create_schema=False),
        database=database,
    )
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac


@pytest_asyncio.fixture
async def parent_ids(orchestrator: PersonMutationOrchestrator) -> tuple[int, int]:
    """Two existing people usable as parents or guardians."""
    mother = await orchestrator.create(
        {"first_name": "Grace", "is_alive": True, "current_sex": "F"}
    )
    father = await orchestrator.create(
        {"first_name": "Alan", "is_alive": False, "current_sex": "M"}
    )
    return mother, father
