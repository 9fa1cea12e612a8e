"""Interfaces for the external services the webhook pipeline drives."""

from typing import Any, Protocol

from order_webhook.schemas.webhook import ProfileKey, ProvisioningResult


class CollaboratorError(Exception):
    """An identity or storage call failed.

    ``payload`` holds whatever diagnostic body the service returned, for logs.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class IdentityProvider(Protocol):
    """Creates (or invites) authenticated users.

    Neither provisioning call is guaranteed to return the account id: an
    existing account or a sign-in link comes back without one, and
    ``find_user_id`` resolves it.
    """

    async def create_user(
        self,
        email: str,
        metadata: dict[str, Any],
        *,
        pre_confirmed: bool = True,
    ) -> ProvisioningResult:
        """Create a user; an existing account yields ``already_existed=True``."""
        ...

    async def send_sign_in_link(
        self,
        email: str,
        metadata: dict[str, Any],
        *,
        redirect_to: str | None = None,
    ) -> ProvisioningResult:
        """Send a passwordless sign-in link, creating the account if needed."""
        ...

    async def find_user_id(self, email: str) -> str | None:
        """Look up the id of an existing account by email."""
        ...


class ProfileStore(Protocol):
    """Persists customer profile rows."""

    async def upsert_profile(self, key: ProfileKey, fields: dict[str, Any]) -> None:
        """Insert or update the row identified by ``key``."""
        ...
