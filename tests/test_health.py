"""Smoke tests for health and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json().get("status") == "ok"


async def test_readiness_reports_memory_backend(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "memory"}


async def test_response_carries_request_id(client: AsyncClient) -> None:
    """A valid X-Request-ID is echoed back; an unsafe one is replaced."""
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"

    response = await client.get("/api/v1/health", headers={"X-Request-ID": "bad id;drop"})
    assert response.headers["X-Request-ID"] != "bad id;drop"
    assert len(response.headers["X-Request-ID"]) == 36
