"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from order_webhook.api.v1.router import api_router
from order_webhook.api.v1.webhooks import shopify as shopify_webhooks
from order_webhook.core.config import settings
from order_webhook.core.exceptions import WebhookRejected
from order_webhook.core.logging_config import bind_delivery_context, setup_logging
from order_webhook.core.rate_limit import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging(debug=settings.debug)
    logger.info("Starting %s v%s", settings.project_name, settings.version)
    logger.info("Environment: %s", settings.environment)
    logger.info(
        "Webhook: path=%s topic=%s policy=%s key_by=%s",
        settings.webhook_path,
        settings.shopify_webhook_topic or "*",
        settings.provisioning_policy,
        settings.profile_key_by,
    )
    missing = settings.missing_required()
    if missing:
        logger.error("Missing required settings: %s", ", ".join(missing))
    yield
    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Sentry/GlitchTip init (before middleware)
    if settings.sentry_dsn:
        import sentry_sdk

        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url=f"{settings.api_v1_prefix}/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_middleware(SlowAPIMiddleware)

    # Request ID and Shopify delivery context for logs
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Response:
        rid = bind_delivery_context(request.headers)
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

    # Shopify webhook (no auth - verified via HMAC)
    app.include_router(
        shopify_webhooks.router,
        prefix=settings.webhook_path,
        tags=["webhooks"],
    )
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.exception_handler(WebhookRejected)
    async def webhook_rejected_handler(_request: Request, exc: WebhookRejected) -> JSONResponse:
        """Map pipeline rejections to the status Shopify acts on."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
        """Handle unhandled exceptions with proper JSON response."""
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # Root endpoint
    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with service information."""
        return {
            "name": settings.project_name,
            "version": settings.version,
            "webhook": settings.webhook_path,
            "health": f"{settings.api_v1_prefix}/health",
        }

    return app


app = create_app()
