"""Pytest configuration and fixtures for activity_logger.

DB fixtures use an in-memory SQLite database (aiosqlite) with SAVEPOINT
support enabled by activity_logger.infrastructure.persistence.database.
Each test gets a fresh schema; the session is rolled back after the test.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from activity_logger.infrastructure.persistence.database import Base, create_engine
from activity_logger.infrastructure.persistence.models import ActivityLog  # noqa: F401
from tests import sample_models  # noqa: F401


@pytest.fixture
async def db_engine() -> AsyncEngine:
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncSession:
    """Session for repository/integration tests. Rolls back after test."""
    session_factory = async_sessionmaker(
        bind=db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with session_factory() as session:
        yield session
        await session.rollback()
