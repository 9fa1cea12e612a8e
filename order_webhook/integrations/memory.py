"""In-memory identity provider and profile store.

Used by the test-suite and for local runs without Supabase credentials.
Both record every call so callers can assert on call counts.
"""

import uuid
from typing import Any

from order_webhook.integrations.base import CollaboratorError
from order_webhook.schemas.webhook import ProfileKey, ProvisioningResult


class InMemoryIdentityProvider:
    """Identity provider keeping users in a dict keyed by email."""

    def __init__(self, *, fail_with: CollaboratorError | None = None) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []
        self.links_sent: list[tuple[str, str | None]] = []
        self.fail_with = fail_with

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def _create(self, email: str, metadata: dict[str, Any]) -> ProvisioningResult:
        if email in self.users:
            # GoTrue reports a duplicate without the existing account id
            return ProvisioningResult(already_existed=True)

        user_id = str(uuid.uuid4())
        self.users[email] = {"id": user_id, "email": email, "user_metadata": dict(metadata)}
        return ProvisioningResult(user_id=user_id)

    async def create_user(
        self,
        email: str,
        metadata: dict[str, Any],
        *,
        pre_confirmed: bool = True,
    ) -> ProvisioningResult:
        self.calls.append(("create_user", email))
        if self.fail_with:
            raise self.fail_with
        result = self._create(email, metadata)
        if not result.already_existed:
            self.users[email]["email_confirmed"] = pre_confirmed
        return result

    async def send_sign_in_link(
        self,
        email: str,
        metadata: dict[str, Any],
        *,
        redirect_to: str | None = None,
    ) -> ProvisioningResult:
        self.calls.append(("send_sign_in_link", email))
        if self.fail_with:
            raise self.fail_with
        self.links_sent.append((email, redirect_to))
        self._create(email, metadata)
        # Like GoTrue's /otp endpoint, the account id is not reported back
        return ProvisioningResult()

    async def find_user_id(self, email: str) -> str | None:
        self.calls.append(("find_user_id", email))
        if self.fail_with:
            raise self.fail_with
        user = self.users.get(email)
        return user["id"] if user else None


class InMemoryProfileStore:
    """Profile store with upsert semantics over a dict."""

    def __init__(self, *, fail_with: CollaboratorError | None = None) -> None:
        self._rows: dict[tuple[str, str], dict[str, Any]] = {}
        self.calls: list[ProfileKey] = []
        self.fail_with = fail_with

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def rows(self) -> list[dict[str, Any]]:
        return list(self._rows.values())

    def get(self, column: str, value: str) -> dict[str, Any] | None:
        return self._rows.get((column, value))

    async def upsert_profile(self, key: ProfileKey, fields: dict[str, Any]) -> None:
        self.calls.append(key)
        if self.fail_with:
            raise self.fail_with
        row = self._rows.setdefault((key.column, key.value), {})
        row.update(fields)
        row[key.column] = key.value
