"""Types flowing through the order webhook admission pipeline."""

import enum
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import Field, field_validator

from order_webhook.schemas.common import BaseSchema, FrozenSchema

if TYPE_CHECKING:
    from order_webhook.core.config import Settings


class ProvisioningPolicy(str, enum.Enum):
    """How a new customer gets an identity account."""

    DIRECT_CREATE = "direct_create"
    PASSWORDLESS_LINK = "passwordless_link"


class ProfileKeyBy(str, enum.Enum):
    """Which identifier keys the profile upsert."""

    EMAIL = "email"
    PROVIDER_ID = "provider_id"


class AddressSource(str, enum.Enum):
    """Address used as the name fallback when the customer block has none."""

    BILLING = "billing"
    SHIPPING = "shipping"


class OutcomeStatus(str, enum.Enum):
    """Terminal success states of the pipeline."""

    PROVISIONED = "provisioned"
    IGNORED = "ignored"


class PipelineConfig(FrozenSchema):
    """Immutable configuration snapshot handed to the pipeline at construction."""

    shopify_secret: str = Field(default="", repr=False)
    topic: str = "orders/create"
    product_ids: frozenset[str] = frozenset()
    name_address_source: AddressSource = AddressSource.BILLING
    provisioning_policy: ProvisioningPolicy = ProvisioningPolicy.DIRECT_CREATE
    key_by: ProfileKeyBy = ProfileKeyBy.PROVIDER_ID
    sign_in_redirect_url: str | None = None

    @field_validator("product_ids", mode="before")
    @classmethod
    def _stringify_product_ids(cls, value: Any) -> frozenset[str]:
        return frozenset(str(v) for v in value or ())

    @classmethod
    def from_settings(cls, settings: "Settings") -> "PipelineConfig":
        return cls(
            shopify_secret=settings.shopify_webhook_secret,
            topic=settings.shopify_webhook_topic,
            product_ids=settings.shopify_product_ids,
            name_address_source=AddressSource(settings.name_address_source),
            provisioning_policy=ProvisioningPolicy(settings.provisioning_policy),
            key_by=ProfileKeyBy(settings.profile_key_by),
            sign_in_redirect_url=settings.sign_in_redirect_url or None,
        )


class InboundWebhookRequest(FrozenSchema):
    """A webhook delivery exactly as received.

    ``raw_body`` is the untouched request body; the signature is computed over
    these bytes, never over re-serialized JSON.
    """

    raw_body: bytes
    headers: dict[str, str] = {}
    received_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("headers", mode="before")
    @classmethod
    def _lower_header_names(cls, value: Any) -> dict[str, str]:
        return {str(k).lower(): str(v) for k, v in dict(value or {}).items()}

    def header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)


class NormalizedCustomer(FrozenSchema):
    """Canonical customer record derived from an order payload."""

    email: str = Field(min_length=1)
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    source_order_id: int | str | None = None

    def profile_metadata(self) -> dict[str, str]:
        """Opaque metadata attached to the identity account."""
        return {"first_name": self.first_name, "full_name": self.full_name}


class ProvisioningResult(FrozenSchema):
    """Successful identity-provider response."""

    user_id: str | None = None
    already_existed: bool = False


class ProfileKey(FrozenSchema):
    """Column/value pair the profile upsert is keyed on."""

    column: str
    value: str


class WebhookOutcome(BaseSchema):
    """Result of a successfully admitted (or deliberately ignored) delivery."""

    status: OutcomeStatus
    reason: str | None = None
    email: str | None = None
    user_id: str | None = None
    already_existed: bool = False
    profile_key: ProfileKey | None = None

    @classmethod
    def ignored(cls, reason: str) -> "WebhookOutcome":
        return cls(status=OutcomeStatus.IGNORED, reason=reason)


class WebhookAck(BaseSchema):
    """Response body sent back to Shopify.

    Shopify only looks at the status code; the body is for humans and logs.
    """

    status: str
    reason: str | None = None
