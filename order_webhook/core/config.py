"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # API
    api_v1_prefix: str = "/api/v1"
    project_name: str = "Order Webhook"
    version: str = "0.1.0"

    # Server
    host: str = "0.0.0.0"
    port: int = 10000
    webhook_path: str = "/webhook"

    # Shopify
    shopify_webhook_secret: str = ""
    shopify_webhook_topic: str = "orders/create"
    shopify_product_ids: list[int] = []  # JSON list in env, e.g. "[12345678]"
    name_address_source: Literal["billing", "shipping"] = "billing"

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_profiles_table: str = "profiles"
    supabase_timeout: float = 15.0

    # Provisioning
    provisioning_policy: Literal["direct_create", "passwordless_link"] = "direct_create"
    profile_key_by: Literal["email", "provider_id"] = "provider_id"
    sign_in_redirect_url: str = ""

    # Rate limiting
    rate_limit_enabled: bool = True
    webhook_rate_limit: str = "600/minute"
    trust_proxy_headers: bool = True

    # Error tracking
    sentry_dsn: str = ""

    @property
    def supabase_configured(self) -> bool:
        """Whether real Supabase adapters can be wired."""
        return bool(self.supabase_url and self.supabase_service_role_key)

    def missing_required(self) -> list[str]:
        """Names of required settings that are unset."""
        required = {
            "SHOPIFY_WEBHOOK_SECRET": self.shopify_webhook_secret,
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_SERVICE_ROLE_KEY": self.supabase_service_role_key,
        }
        return [name for name, value in required.items() if not value]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
