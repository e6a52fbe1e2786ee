"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Schema (base tables and the search materialized view) is managed by Alembic
migrations. The engine and session factory are created lazily by
ensure_engine() so import does not trigger Settings validation; the app
lifespan calls it at startup so a missing or non-PostgreSQL DATABASE_URL
fails fast instead of on the first request.
"""

import logging
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from pkgsearch.core.config import get_settings
from pkgsearch.domain.exceptions import SqlNotConfiguredException

logger = logging.getLogger(__name__)

# Set by ensure_engine() on first use; avoids get_settings() at import time.
engine: Any = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use.

    Raises:
        SqlNotConfiguredException: DATABASE_URL is unset, invalid, or not PostgreSQL.
    """
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    if not settings.database_url:
        raise SqlNotConfiguredException("DATABASE_URL is not set")
    try:
        url = make_url(settings.database_url)
    except ArgumentError as e:
        raise SqlNotConfiguredException("DATABASE_URL is not a valid URL") from e
    if url.get_backend_name() != "postgresql":
        raise SqlNotConfiguredException(
            f"DATABASE_URL backend must be postgresql, got {url.get_backend_name()!r}"
        )

    connect_args: dict[str, Any] = {}
    if url.get_driver_name() == "asyncpg":
        connect_args["command_timeout"] = (
            settings.db_command_timeout if settings.db_command_timeout is not None else 30
        )
    engine = create_async_engine(
        url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size if settings.db_pool_size is not None else 10,
        max_overflow=(
            settings.db_max_overflow if settings.db_max_overflow is not None else 20
        ),
        pool_recycle=3600,
        # Search statements cross join the view with unnest(); that is intended.
        enable_from_linting=False,
        connect_args=connect_args,
    )
    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    logger.info("Database engine created for %s", url.render_as_string(hide_password=True))


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


async def get_db():
    """Database session dependency (one session per request).

    Yields a session and closes it on every exit path. Does not commit;
    search only reads, and refresh commits its own statement.
    """
    ensure_engine()
    assert AsyncSessionLocal is not None
    async with AsyncSessionLocal() as session:
        yield session


async def dispose_engine() -> None:
    """Dispose the engine (shutdown) and reset the lazy factory."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None
