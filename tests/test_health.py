"""Smoke tests for health and app wiring."""

from httpx import AsyncClient

from pkgsearch.core.config import get_settings


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200, status ok and the version."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == get_settings().app_version


async def test_unknown_route_returns_json_error(client: AsyncClient) -> None:
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json()["error"] == "HTTP_ERROR"
