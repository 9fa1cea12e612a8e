"""Order webhook admission pipeline.

Verify signature, filter topic, parse, normalize, filter products, provision
the identity, upsert the profile. Each delivery is handled independently and
nothing is retried here; Shopify redelivers on 5xx and the profile upsert
makes that converge, provided every delivery of an order resolves to the same
profile key.
"""

import json
import logging
from typing import Any

from order_webhook.core.exceptions import (
    BadPayload,
    MissingEmail,
    PersistenceFailed,
    ProvisioningFailed,
    Unauthorized,
)
from order_webhook.integrations.base import CollaboratorError, IdentityProvider, ProfileStore
from order_webhook.integrations.shopify.webhooks import HMAC_HEADER, TOPIC_HEADER, verify_webhook
from order_webhook.schemas.webhook import (
    InboundWebhookRequest,
    NormalizedCustomer,
    OutcomeStatus,
    PipelineConfig,
    ProfileKey,
    ProfileKeyBy,
    ProvisioningPolicy,
    ProvisioningResult,
    WebhookOutcome,
)
from order_webhook.services.normalization import matches_product_allowlist, normalize_order

logger = logging.getLogger(__name__)


class WebhookAdmissionService:
    """Admits Shopify order webhooks and provisions the ordering customer."""

    def __init__(
        self,
        config: PipelineConfig,
        identity: IdentityProvider,
        profiles: ProfileStore,
    ) -> None:
        self.config = config
        self.identity = identity
        self.profiles = profiles

    async def handle(self, request: InboundWebhookRequest) -> WebhookOutcome:
        """Run one delivery through the pipeline.

        Returns a provisioned or ignored outcome. Raises a ``WebhookRejected``
        subclass for every other terminal state.
        """
        self._verify(request)

        topic = request.header(TOPIC_HEADER)
        if self.config.topic and topic != self.config.topic:
            logger.info("Ignoring webhook topic %r", topic)
            return WebhookOutcome.ignored("topic")

        order = self._parse(request.raw_body)
        customer = self._normalize(order)

        if not matches_product_allowlist(order, self.config.product_ids):
            logger.info("Ignoring order %s: no allow-listed products", order.get("id"))
            return WebhookOutcome.ignored("product")

        provisioned = await self._provision(customer)
        key = await self._persist(customer, provisioned)

        logger.info(
            "Provisioned %s (user_id=%s, already_existed=%s)",
            customer.email,
            provisioned.user_id,
            provisioned.already_existed,
        )
        return WebhookOutcome(
            status=OutcomeStatus.PROVISIONED,
            email=customer.email,
            user_id=provisioned.user_id,
            already_existed=provisioned.already_existed,
            profile_key=key,
        )

    def _verify(self, request: InboundWebhookRequest) -> None:
        hmac_header = request.header(HMAC_HEADER)
        if not verify_webhook(request.raw_body, hmac_header, self.config.shopify_secret):
            if not self.config.shopify_secret:
                logger.error("Shopify webhook secret is not configured")
            logger.warning("Shopify HMAC mismatch (header present: %s)", bool(hmac_header))
            raise Unauthorized()

    def _parse(self, raw_body: bytes) -> dict[str, Any]:
        try:
            order = json.loads(raw_body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise BadPayload(f"Malformed webhook payload: {e}") from e

        if not isinstance(order, dict):
            raise BadPayload("Webhook payload must be a JSON object")
        return order

    def _normalize(self, order: dict[str, Any]) -> NormalizedCustomer:
        fields = normalize_order(order, self.config)
        if not fields["email"]:
            logger.warning("Order %s has no customer email; needs manual follow-up", order.get("id"))
            raise MissingEmail()
        return NormalizedCustomer(**fields)

    async def _provision(self, customer: NormalizedCustomer) -> ProvisioningResult:
        metadata = customer.profile_metadata()
        try:
            if self.config.provisioning_policy is ProvisioningPolicy.PASSWORDLESS_LINK:
                result = await self.identity.send_sign_in_link(
                    customer.email,
                    metadata,
                    redirect_to=self.config.sign_in_redirect_url,
                )
            else:
                result = await self.identity.create_user(
                    customer.email, metadata, pre_confirmed=True
                )

            # Rows keyed by provider id need the id on every delivery,
            # including redeliveries that only see "already exists"
            if self.config.key_by is ProfileKeyBy.PROVIDER_ID and not result.user_id:
                user_id = await self.identity.find_user_id(customer.email)
                if user_id:
                    logger.info("Resolved existing account for %s", customer.email)
                    result = result.model_copy(update={"user_id": user_id})
            return result
        except CollaboratorError as e:
            logger.error(
                "Identity provisioning failed for %s: status=%s payload=%s",
                customer.email,
                e.status_code,
                e.payload,
            )
            raise ProvisioningFailed(payload=e.payload) from e

    def profile_key(self, customer: NormalizedCustomer, provisioned: ProvisioningResult) -> ProfileKey:
        """Pick the identifier the profile row is keyed on."""
        if self.config.key_by is ProfileKeyBy.PROVIDER_ID:
            if provisioned.user_id:
                return ProfileKey(column="id", value=provisioned.user_id)
            logger.warning("No provider id for %s; keying profile by email", customer.email)
        return ProfileKey(column="email", value=customer.email)

    async def _persist(
        self,
        customer: NormalizedCustomer,
        provisioned: ProvisioningResult,
    ) -> ProfileKey:
        key = self.profile_key(customer, provisioned)
        fields: dict[str, Any] = {
            "email": customer.email,
            "first_name": customer.first_name,
            "full_name": customer.full_name,
            "source_order_id": customer.source_order_id,
        }
        if provisioned.user_id:
            fields["id"] = provisioned.user_id

        try:
            await self.profiles.upsert_profile(key, fields)
        except CollaboratorError as e:
            logger.error(
                "Profile upsert failed for %s: status=%s payload=%s",
                customer.email,
                e.status_code,
                e.payload,
            )
            raise PersistenceFailed(payload=e.payload) from e
        return key
