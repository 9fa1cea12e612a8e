"""Pytest configuration and fixtures for the order webhook test suite.

Provides:
- Disabled rate limiting
- Fixture pipeline config, in-memory identity provider and profile store
- Async test clients with the admission service overridden
- Shopify webhook signing helpers and sample order payloads
"""

import json
from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from order_webhook.core.deps import get_admission_service, get_auth_admin
from order_webhook.core.rate_limit import limiter
from order_webhook.integrations.memory import InMemoryIdentityProvider, InMemoryProfileStore
from order_webhook.integrations.shopify.webhooks import compute_signature
from order_webhook.main import app
from order_webhook.schemas.webhook import InboundWebhookRequest, PipelineConfig
from order_webhook.services.admission_service import WebhookAdmissionService

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SHOPIFY_TEST_SECRET = "test-shopify-webhook-secret"
ORDERS_CREATE = "orders/create"
WEBHOOK_URL = "/webhook"

# ---------------------------------------------------------------------------
# Disable rate limiting globally for tests
# ---------------------------------------------------------------------------
limiter.enabled = False


@pytest.fixture(autouse=True)
def set_test_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep settings deterministic regardless of the developer's .env."""
    monkeypatch.setattr("order_webhook.core.config.settings.shopify_webhook_secret", SHOPIFY_TEST_SECRET)
    monkeypatch.setattr("order_webhook.core.config.settings.supabase_url", "")
    monkeypatch.setattr("order_webhook.core.config.settings.supabase_service_role_key", "")


# ---------------------------------------------------------------------------
# Pipeline collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    """Default pipeline config: direct create, keyed by provider id."""
    return PipelineConfig(shopify_secret=SHOPIFY_TEST_SECRET, topic=ORDERS_CREATE)


@pytest.fixture
def identity() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider()


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def make_service(
    pipeline_config: PipelineConfig,
    identity: InMemoryIdentityProvider,
    profile_store: InMemoryProfileStore,
) -> Callable[..., WebhookAdmissionService]:
    """Factory building a service over the in-memory collaborators.

    Keyword arguments override fields of the default pipeline config.
    """

    def _make(**overrides: Any) -> WebhookAdmissionService:
        config = PipelineConfig(**{**pipeline_config.model_dump(), **overrides})
        return WebhookAdmissionService(config, identity, profile_store)

    return _make


@pytest.fixture
def service(make_service: Callable[..., WebhookAdmissionService]) -> WebhookAdmissionService:
    return make_service()


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(service: WebhookAdmissionService) -> AsyncGenerator[AsyncClient, None]:
    """Async test client whose webhook runs against the in-memory service."""
    app.dependency_overrides[get_admission_service] = lambda: service
    app.dependency_overrides[get_auth_admin] = lambda: None

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def plain_client() -> AsyncGenerator[AsyncClient, None]:
    """Minimal async test client with NO dependency overrides."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Shopify webhook helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def shopify_webhook_signature() -> Callable[[bytes], str]:
    """Generate a valid Shopify webhook HMAC signature for a given body.

    Usage:
        signature = shopify_webhook_signature(b'{"id": 123}')
        headers = {"X-Shopify-Hmac-Sha256": signature, ...}
    """

    def _sign(body: bytes) -> str:
        return compute_signature(body, SHOPIFY_TEST_SECRET)

    return _sign


@pytest.fixture
def shopify_webhook_headers(
    shopify_webhook_signature: Callable[[bytes], str],
) -> Callable[..., dict[str, str]]:
    """Generate complete Shopify webhook headers for a given body and topic.

    Usage:
        body = b'{"id": 123, "email": "a@b.com"}'
        headers = shopify_webhook_headers(body)
        response = await client.post("/webhook", content=body, headers=headers)
    """

    def _headers(body: bytes, topic: str = ORDERS_CREATE) -> dict[str, str]:
        return {
            "X-Shopify-Hmac-Sha256": shopify_webhook_signature(body),
            "X-Shopify-Topic": topic,
            "X-Shopify-Shop-Domain": "test-store.myshopify.com",
            "Content-Type": "application/json",
        }

    return _headers


@pytest.fixture
def signed_request(
    shopify_webhook_headers: Callable[..., dict[str, str]],
) -> Callable[..., InboundWebhookRequest]:
    """Build an InboundWebhookRequest from a dict or raw bytes, correctly signed."""

    def _build(payload: dict[str, Any] | bytes, topic: str = ORDERS_CREATE) -> InboundWebhookRequest:
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        return InboundWebhookRequest(raw_body=body, headers=shopify_webhook_headers(body, topic))

    return _build


@pytest.fixture
def sample_order() -> dict[str, Any]:
    """Order payload whose only usable email is on the customer block."""
    return {
        "email": "",
        "customer": {"first_name": "Jane", "last_name": "Doe", "email": "jane@x.com"},
        "id": 555,
    }


@pytest.fixture
def sample_shopify_order() -> dict[str, Any]:
    """A fuller Shopify order JSON as delivered by the orders/create webhook."""
    return {
        "id": 5551234567890,
        "name": "#1001",
        "email": "customer@example.com",
        "financial_status": "paid",
        "customer": {
            "id": 7001,
            "email": "customer@example.com",
            "first_name": "Jane",
            "last_name": "Doe",
            "default_address": {"email": None, "city": "New York"},
        },
        "billing_address": {"first_name": "Janet", "last_name": "Billing", "city": "New York"},
        "shipping_address": {"name": "Jane Q. Doe", "city": "New York", "province": "NY"},
        "line_items": [
            {"title": "Widget Pro", "product_id": 12345678, "quantity": 2},
            {"title": "Gift Card", "product_id": None, "quantity": 1},
        ],
    }
