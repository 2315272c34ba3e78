import logging

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_ready_checks_database(client: AsyncClient):
    resp = await client.get("/ready")
    assert resp.status_code == 200
    assert resp.json()["checks"]["database"] == "ok"


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client: AsyncClient):
    resp = await client.get("/health", headers={"X-Correlation-ID": "abc-123"})
    assert resp.headers["X-Correlation-ID"] == "abc-123"
    assert resp.headers["X-Event-ID"]


@pytest.mark.asyncio
async def test_unknown_route_uses_error_body(client: AsyncClient):
    resp = await client.get("/api/nope")
    assert resp.status_code == 404
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_access_log_carries_tenant(client: AsyncClient, auth_headers, caplog):
    caplog.set_level(logging.INFO, logger="backend.app.middleware.trace")
    await client.get("/api/customers", headers=auth_headers("tenant-b"))
    await client.get("/health")

    access = [r.extra_data for r in caplog.records if r.name == "backend.app.middleware.trace"]
    assert access[0]["path"] == "/api/customers"
    assert access[0]["tenant_id"] == "tenant-b"
    assert access[1]["tenant_id"] is None
