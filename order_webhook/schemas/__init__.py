"""Pydantic schemas for the webhook pipeline and API responses."""

from order_webhook.schemas.common import ErrorResponse, HealthResponse
from order_webhook.schemas.webhook import (
    InboundWebhookRequest,
    NormalizedCustomer,
    OutcomeStatus,
    PipelineConfig,
    ProfileKey,
    ProfileKeyBy,
    ProvisioningPolicy,
    ProvisioningResult,
    WebhookAck,
    WebhookOutcome,
)

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    # Pipeline
    "InboundWebhookRequest",
    "NormalizedCustomer",
    "OutcomeStatus",
    "PipelineConfig",
    "ProfileKey",
    "ProfileKeyBy",
    "ProvisioningPolicy",
    "ProvisioningResult",
    "WebhookAck",
    "WebhookOutcome",
]
