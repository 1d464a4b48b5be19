"""
pytest configuration and shared fixtures for the GigMate API tests.

Key concern: tests must not require a live Gemini API key or wait on
production timings. We achieve this by:
  1. Setting env vars BEFORE importing gigmate so Settings picks up mock
     mode, a short debounce, a short sensor wait and no retry back-off.
  2. Entering the app lifespan manually around the HTTPX client
     (ASGITransport does not run lifespan events by itself).

Scripted Gemini doubles live in helpers.py.
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("AI_MOCK_MODE", "true")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBOUNCE_MS", "20")
os.environ.setdefault("SENSOR_TIMEOUT_MS", "200")
os.environ.setdefault("RETRY_DELAY_MS", "0")


@pytest.fixture()
async def client():
    """
    HTTPX async test client wired to the FastAPI app, lifespan included.

    Usage:
        async def test_something(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    from gigmate.core.rate_limit import limiter
    from gigmate.main import app, lifespan

    # Reset in-memory rate-limit counters so tests are independent.
    limiter.reset()

    async with lifespan(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    app.dependency_overrides.clear()
