"""Tests for health check endpoints."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from httpx import AsyncClient

from order_webhook.core.deps import get_auth_admin
from order_webhook.main import app


@pytest.mark.asyncio
async def test_root(plain_client: AsyncClient) -> None:
    """Test root endpoint returns service info."""
    response = await plain_client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert "version" in data
    assert data["webhook"] == "/webhook"


@pytest.mark.asyncio
async def test_liveness(plain_client: AsyncClient) -> None:
    """Test liveness probe endpoint."""
    response = await plain_client.get("/api/v1/health/live")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "alive"


@pytest.mark.asyncio
async def test_readiness(plain_client: AsyncClient) -> None:
    response = await plain_client.get("/api/v1/health/ready")
    assert response.json() == {"status": "ready"}


@pytest.mark.asyncio
async def test_readiness_without_secret(
    plain_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("order_webhook.core.config.settings.shopify_webhook_secret", "")

    response = await plain_client.get("/api/v1/health/ready")

    assert response.json() == {"status": "not ready"}


@pytest.mark.asyncio
async def test_health_without_supabase(client: AsyncClient) -> None:
    """Missing Supabase settings make the service unhealthy but still answer."""
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["checks"]["supabase"] == "not configured"
    assert "SUPABASE_URL" in data["checks"]["config"]


@pytest.mark.asyncio
async def test_health_pings_supabase(
    plain_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("order_webhook.core.config.settings.supabase_url", "https://p.supabase.co")
    monkeypatch.setattr("order_webhook.core.config.settings.supabase_service_role_key", "key")
    auth_admin = MagicMock()
    auth_admin.ping = AsyncMock(return_value=True)
    app.dependency_overrides[get_auth_admin] = lambda: auth_admin

    try:
        response = await plain_client.get("/api/v1/health")
    finally:
        app.dependency_overrides.clear()

    data = response.json()
    assert data["status"] == "healthy"
    assert data["checks"] == {"config": "healthy", "supabase": "healthy"}


@pytest.mark.asyncio
async def test_health_supabase_unreachable(
    plain_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("order_webhook.core.config.settings.supabase_url", "https://p.supabase.co")
    monkeypatch.setattr("order_webhook.core.config.settings.supabase_service_role_key", "key")
    auth_admin = MagicMock()
    auth_admin.ping = AsyncMock(side_effect=httpx.ConnectError("refused"))
    app.dependency_overrides[get_auth_admin] = lambda: auth_admin

    try:
        response = await plain_client.get("/api/v1/health")
    finally:
        app.dependency_overrides.clear()

    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["checks"]["supabase"].startswith("unhealthy")
