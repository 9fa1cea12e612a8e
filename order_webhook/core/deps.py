"""Dependency injection for FastAPI routes."""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from order_webhook.core.config import settings
from order_webhook.integrations.base import IdentityProvider, ProfileStore
from order_webhook.integrations.memory import InMemoryIdentityProvider, InMemoryProfileStore
from order_webhook.integrations.supabase.client import SupabaseAuthAdmin, SupabaseProfileStore
from order_webhook.schemas.webhook import PipelineConfig
from order_webhook.services.admission_service import WebhookAdmissionService

logger = logging.getLogger(__name__)


@lru_cache
def get_pipeline_config() -> PipelineConfig:
    """Snapshot of settings the pipeline runs with."""
    return PipelineConfig.from_settings(settings)


@lru_cache
def get_collaborators() -> tuple[IdentityProvider, ProfileStore]:
    """Identity provider and profile store for this process.

    Falls back to in-memory adapters when Supabase is not configured, so the
    service can run locally.
    """
    if not settings.supabase_configured:
        logger.warning("Supabase is not configured; using in-memory identity and profile store")
        return InMemoryIdentityProvider(), InMemoryProfileStore()

    identity = SupabaseAuthAdmin(
        settings.supabase_url,
        settings.supabase_service_role_key,
        timeout=settings.supabase_timeout,
    )
    profiles = SupabaseProfileStore(
        settings.supabase_url,
        settings.supabase_service_role_key,
        table=settings.supabase_profiles_table,
        timeout=settings.supabase_timeout,
    )
    return identity, profiles


def get_auth_admin() -> SupabaseAuthAdmin | None:
    """The Supabase auth adapter, if one is wired (used by health checks)."""
    identity, _ = get_collaborators()
    return identity if isinstance(identity, SupabaseAuthAdmin) else None


def get_admission_service(
    config: PipelineConfig = Depends(get_pipeline_config),
) -> WebhookAdmissionService:
    identity, profiles = get_collaborators()
    return WebhookAdmissionService(config, identity, profiles)


AdmissionService = Annotated[WebhookAdmissionService, Depends(get_admission_service)]


__all__ = [
    "AdmissionService",
    "get_admission_service",
    "get_auth_admin",
    "get_collaborators",
    "get_pipeline_config",
]
