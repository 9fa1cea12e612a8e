"""Per-client rate limiting for the webhook route (slowapi)."""

from slowapi import Limiter
from starlette.requests import Request

from order_webhook.core.config import settings


def client_ip(request: Request) -> str:
    """Address a delivery came from.

    Forwarding headers are only honoured when the service runs behind a proxy
    that sets them (``TRUST_PROXY_HEADERS``); otherwise a sender could pick its
    own rate-limit bucket.
    """
    if settings.trust_proxy_headers:
        forwarded = (
            request.headers.get("CF-Connecting-IP")
            or request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
        )
        if forwarded:
            return forwarded
    return request.client.host if request.client else "127.0.0.1"


def webhook_limit() -> str:
    """Current webhook limit, read per request so it follows settings."""
    return settings.webhook_rate_limit


limiter = Limiter(key_func=client_ip, enabled=settings.rate_limit_enabled)
