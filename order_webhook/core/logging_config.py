"""Structured JSON logging with per-delivery context.

Every record carries the request id and, for Shopify deliveries, the webhook
id and shop domain. Shopify reuses the webhook id on redelivery, so retries of
one event can be grouped in the logs.
"""

import contextvars
import logging
import uuid
from collections.abc import Mapping

from pythonjsonlogger.json import JsonFormatter

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
webhook_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("webhook_id", default="")
shop_domain_var: contextvars.ContextVar[str] = contextvars.ContextVar("shop_domain", default="")

WEBHOOK_ID_HEADER = "X-Shopify-Webhook-Id"
SHOP_DOMAIN_HEADER = "X-Shopify-Shop-Domain"


class DeliveryContextFilter(logging.Filter):
    """Copy the current delivery context onto each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        record.webhook_id = webhook_id_var.get()  # type: ignore[attr-defined]
        record.shop_domain = shop_domain_var.get()  # type: ignore[attr-defined]
        return True


def bind_delivery_context(headers: Mapping[str, str]) -> str:
    """Set the context vars from inbound headers and return the request id."""
    request_id = headers.get("X-Request-ID") or generate_request_id()
    request_id_var.set(request_id)
    webhook_id_var.set(headers.get(WEBHOOK_ID_HEADER, ""))
    shop_domain_var.set(headers.get(SHOP_DOMAIN_HEADER, ""))
    return request_id


def setup_logging(*, debug: bool = False) -> None:
    """Configure the root logger with the JSON formatter and context filter."""
    handler = logging.StreamHandler()
    handler.setFormatter(
        JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s "
            "%(request_id)s %(webhook_id)s %(shop_domain)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
    )
    handler.addFilter(DeliveryContextFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    # httpx logs every request URL at INFO, which includes the Supabase host
    logging.getLogger("httpx").setLevel(logging.WARNING)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:16]
