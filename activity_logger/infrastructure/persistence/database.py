"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Engine and session factory are created lazily on first use (get_db /
get_db_transactional) so import does not trigger Settings validation.

Activity log batches are written inside SAVEPOINTs. pysqlite/aiosqlite do not
emit BEGIN themselves, which breaks SAVEPOINT handling, so SQLite engines get
the event hooks from the SQLAlchemy SQLite dialect docs.
"""

import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from activity_logger.core.config import get_settings
from activity_logger.domain.exceptions import SqlNotConfiguredException

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def _enable_sqlite_savepoints(async_engine: AsyncEngine) -> None:
    """Let the driver leave transactions to SQLAlchemy so SAVEPOINT works."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(async_engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


def create_engine(database_url: str, *, echo: bool = False, **kwargs: Any) -> AsyncEngine:
    """Build an async engine for database_url.

    SQLite URLs get SAVEPOINT support wired in; other backends get
    pool_pre_ping. Extra kwargs go straight to create_async_engine.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        async_engine = create_async_engine(url, echo=echo, **kwargs)
        _enable_sqlite_savepoints(async_engine)
        return async_engine
    kwargs.setdefault("pool_pre_ping", True)
    kwargs.setdefault("pool_recycle", 3600)
    return create_async_engine(url, echo=echo, **kwargs)


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    try:
        settings = get_settings()
    except ValidationError:
        logger.warning("Settings failed validation; database engine not created", exc_info=True)
        return
    options: dict[str, Any] = {}
    if make_url(settings.database_url).get_backend_name() != "sqlite":
        options["pool_size"] = (
            settings.db_pool_size if settings.db_pool_size is not None else 20
        )
        options["max_overflow"] = (
            settings.db_max_overflow if settings.db_max_overflow is not None else 30
        )
        if "postgresql" in settings.database_url and settings.db_command_timeout:
            options["connect_args"] = {"command_timeout": settings.db_command_timeout}
    engine = create_engine(settings.database_url, echo=settings.database_echo, **options)
    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db():
    """Yield a session for reads. Does not commit; use get_db_transactional for writes.

    Raises SqlNotConfiguredException when no engine could be built.
    """
    _ensure_engine()
    if AsyncSessionLocal is None:
        logger.error("SQL database not configured: set DATABASE_URL")
        raise SqlNotConfiguredException()
    async with AsyncSessionLocal() as session:
        yield session


async def get_db_transactional():
    """Yield a session inside a transaction: commit on success, roll back on exception.

    Activity log batches written through this session nest as SAVEPOINTs
    inside that transaction.
    """
    _ensure_engine()
    if AsyncSessionLocal is None:
        logger.error("SQL database not configured: set DATABASE_URL")
        raise SqlNotConfiguredException()
    async with AsyncSessionLocal() as session:
        async with session.begin():
            yield session
