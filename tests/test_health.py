"""
Health, readiness and API root endpoint tests.
"""

import pytest
from httpx import AsyncClient

from okr_server.core.middleware import SECURITY_HEADERS


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Health endpoint should return status ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_ready_check(client: AsyncClient):
    """Ready endpoint should query the store and return status ready."""
    response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


@pytest.mark.asyncio
async def test_api_root(client: AsyncClient):
    """API v1 root should return version and endpoint list."""
    response = await client.get("/api/v1/")
    assert response.status_code == 200
    data = response.json()
    assert data["api"] == "v1"
    assert "/okrs" in data["endpoints"]


@pytest.mark.asyncio
async def test_security_headers_present(client: AsyncClient):
    """Every response carries the security headers."""
    response = await client.get("/health")
    for header, value in SECURITY_HEADERS.items():
        assert response.headers[header] == value


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    """An incoming X-Request-ID is echoed back."""
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


@pytest.mark.asyncio
async def test_request_id_generated_when_missing(client: AsyncClient):
    """A request id is generated when none is sent."""
    response = await client.get("/health")
    assert len(response.headers["X-Request-ID"]) == 32
