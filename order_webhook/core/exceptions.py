"""Rejection kinds raised by the webhook admission pipeline.

Each rejection carries the HTTP status the sender should see. 4xx kinds are
permanent for a given delivery; 5xx kinds are collaborator failures that the
sender recovers from by redelivering (the pipeline is idempotent).
"""

from typing import Any

from fastapi import status


class WebhookRejected(Exception):
    """Base class for terminal pipeline rejections."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind: str = "rejected"
    detail: str = "Webhook rejected"

    def __init__(self, detail: str | None = None, payload: Any = None) -> None:
        self.detail = detail or self.detail
        self.payload = payload
        super().__init__(self.detail)


class Unauthorized(WebhookRejected):
    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "unauthorized"
    detail = "Invalid webhook signature"


class BadPayload(WebhookRejected):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "bad_payload"
    detail = "Malformed webhook payload"


class MissingEmail(WebhookRejected):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "missing_email"
    detail = "Order has no customer email"


class ProvisioningFailed(WebhookRejected):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind = "provisioning_failed"
    detail = "Error provisioning user"


class PersistenceFailed(WebhookRejected):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind = "persistence_failed"
    detail = "Error writing profile"
