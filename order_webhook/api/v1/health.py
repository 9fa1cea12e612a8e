"""Health check endpoints."""

from typing import Any

import httpx
from fastapi import APIRouter, Depends

from order_webhook.core.config import settings
from order_webhook.core.deps import get_auth_admin
from order_webhook.integrations.supabase.client import SupabaseAuthAdmin
from order_webhook.schemas.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    auth_admin: SupabaseAuthAdmin | None = Depends(get_auth_admin),
) -> dict[str, Any]:
    """
    Health check endpoint.

    Checks configuration and Supabase Auth reachability.
    """
    health_status: dict[str, Any] = {
        "status": "healthy",
        "version": settings.version,
        "environment": settings.environment,
        "checks": {},
    }

    missing = settings.missing_required()
    if missing:
        health_status["status"] = "unhealthy"
        health_status["checks"]["config"] = f"missing: {', '.join(missing)}"
    else:
        health_status["checks"]["config"] = "healthy"

    if auth_admin is None:
        health_status["checks"]["supabase"] = "not configured"
    else:
        try:
            ok = await auth_admin.ping()
            health_status["checks"]["supabase"] = "healthy" if ok else "unhealthy"
            if not ok:
                health_status["status"] = "unhealthy"
        except httpx.HTTPError as e:
            health_status["status"] = "unhealthy"
            health_status["checks"]["supabase"] = f"unhealthy: {str(e)}"

    return health_status


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness probe for Kubernetes/container orchestration.

    Simple check that the service is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check() -> dict[str, str]:
    """Readiness probe: the webhook can verify signatures."""
    if not settings.shopify_webhook_secret:
        return {"status": "not ready"}
    return {"status": "ready"}
