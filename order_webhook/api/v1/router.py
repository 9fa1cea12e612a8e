"""API v1 router combining all route modules."""

from fastapi import APIRouter

from order_webhook.api.v1 import health

api_router = APIRouter()

# Include health check routes (no prefix)
api_router.include_router(health.router)
