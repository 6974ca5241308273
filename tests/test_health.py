"""Tests for health check endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_liveness_endpoint(client: AsyncClient):
    """Test that liveness endpoint returns 200."""
    response = await client.get("/health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


@pytest.mark.asyncio
async def test_readiness_endpoint(client: AsyncClient):
    """Test that readiness endpoint reports the database check."""
    response = await client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] == "ok"


@pytest.mark.asyncio
async def test_info_endpoint(client: AsyncClient):
    response = await client.get("/info")

    assert response.status_code == 200
    data = response.json()
    assert data["app"] == "tipbase"
    assert data["audit_enabled"] is True


@pytest.mark.asyncio
async def test_unknown_route_is_problem_detail(client: AsyncClient):
    """Routing errors use the same error document as domain errors."""
    response = await client.get("/api/nowhere")

    assert response.status_code == 404
    data = response.json()
    assert data["status"] == 404
    assert data["instance"] == "/api/nowhere"
    assert data["type"].endswith("/errors/not_found")
