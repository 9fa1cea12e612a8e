"""Shopify order webhook receiver."""

from fastapi import APIRouter, Request

from order_webhook.core.deps import AdmissionService
from order_webhook.core.rate_limit import limiter, webhook_limit
from order_webhook.schemas.common import ErrorResponse
from order_webhook.schemas.webhook import InboundWebhookRequest, OutcomeStatus, WebhookAck

router = APIRouter()


@router.post(
    "",
    response_model=WebhookAck,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid webhook signature"},
        400: {"model": ErrorResponse, "description": "Malformed payload or missing email"},
        500: {"model": ErrorResponse, "description": "Identity or profile store failure"},
    },
)
@limiter.limit(webhook_limit)
async def receive_order_webhook(
    request: Request,
    service: AdmissionService,
) -> WebhookAck:
    """Handle an order webhook delivery.

    Rejections propagate as ``WebhookRejected`` and are turned into
    401/400/500 responses by the app's exception handler.
    """
    inbound = InboundWebhookRequest(
        raw_body=await request.body(),
        headers=dict(request.headers),
    )
    outcome = await service.handle(inbound)

    if outcome.status is OutcomeStatus.IGNORED:
        return WebhookAck(status="ignored", reason=outcome.reason)
    return WebhookAck(status="ok")
