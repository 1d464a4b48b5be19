"""
Tests for the /health endpoint.

Verifies:
  - Returns HTTP 200 with status="ok" (API liveness check)
  - Returns expected JSON schema
  - Reports the Gemini state without failing when AI is off
  - Root / endpoint returns API metadata

All tests run in AI mock mode (set in conftest).
"""

import pytest

from gigmate.ai.hotspot_service import HotspotService
from gigmate.core.dependencies import get_hotspot_service
from gigmate.main import app


@pytest.mark.asyncio
async def test_health_returns_200(client):
    """Health endpoint must always return 200 if the API process is alive."""
    response = await client.get("/health")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_health_response_schema(client):
    response = await client.get("/health")
    data = response.json()

    assert data["status"] == "ok"
    assert data["version"] == "0.1.0"
    assert "gemini" in data
    assert "environment" in data


@pytest.mark.asyncio
async def test_health_reports_mock_mode(client):
    response = await client.get("/health")
    assert response.json()["gemini"] == "mock"


@pytest.mark.asyncio
async def test_health_disabled_without_client(client):
    """No key is reported as 'disabled', not as an unhealthy API."""
    app.dependency_overrides[get_hotspot_service] = lambda: HotspotService(None)

    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["gemini"] == "disabled"


@pytest.mark.asyncio
async def test_root_endpoint(client):
    """Root / must return API metadata with status=running."""
    response = await client.get("/")
    data = response.json()

    assert response.status_code == 200
    assert data["name"] == "GigMate API"
    assert data["status"] == "running"
