"""Pytest configuration and fixtures for pkgsearch.

HTTP tests run against pkgsearch.main:app through ASGITransport (the
lifespan is not started, so no database is needed unless a test asks for
db_session). Repository tests use db_session and are marked requires_db.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

import pkgsearch.infrastructure.persistence.database as database
from pkgsearch.domain.exceptions import SqlNotConfiguredException
from pkgsearch.main import app


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI). Clears dependency overrides after the test."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after the test.

    Skips when DATABASE_URL is not a PostgreSQL URL. The schema must be
    migrated first: alembic upgrade head.
    """
    try:
        database.ensure_engine()
    except SqlNotConfiguredException as e:
        pytest.skip(f"Postgres not configured: {e.details.get('reason', e.message)}")
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
