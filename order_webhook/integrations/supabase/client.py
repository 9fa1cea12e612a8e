"""Supabase Auth admin and PostgREST adapters using httpx."""

import logging
from typing import Any

import httpx

from order_webhook.integrations.base import CollaboratorError
from order_webhook.schemas.webhook import ProfileKey, ProvisioningResult

logger = logging.getLogger(__name__)

# GoTrue answers duplicate sign-ups with 422 and one of these markers
_ALREADY_EXISTS_CODES = {"email_exists", "user_already_exists"}
_ALREADY_EXISTS_MESSAGES = ("already been registered", "already registered", "already exists")
_USER_LOOKUP_PAGE_SIZE = 50


def _response_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text."""
    try:
        return response.json()
    except ValueError:
        return response.text[:500]


def is_already_exists(status_code: int, body: Any) -> bool:
    """Whether a failed create-user response means the account already exists."""
    if status_code not in (400, 409, 422):
        return False
    if not isinstance(body, dict):
        return any(marker in str(body).lower() for marker in _ALREADY_EXISTS_MESSAGES)

    if body.get("error_code") in _ALREADY_EXISTS_CODES:
        return True
    message = str(body.get("msg") or body.get("message") or body.get("error_description") or "")
    return any(marker in message.lower() for marker in _ALREADY_EXISTS_MESSAGES)


class _SupabaseAPI:
    """Shared connection details for Supabase REST calls."""

    def __init__(self, url: str, service_role_key: str, timeout: float = 15.0) -> None:
        self.base_url = url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
            "Content-Type": "application/json",
        }

    async def _post(
        self,
        path: str,
        *,
        json: Any,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(headers=self.headers, timeout=self.timeout) as client:
                return await client.post(
                    f"{self.base_url}{path}",
                    json=json,
                    params=params,
                    headers=headers,
                )
        except httpx.HTTPError as e:
            raise CollaboratorError(f"Supabase request to {path} failed: {e}") from e

    async def _get(self, path: str, *, params: dict[str, str] | None = None) -> httpx.Response:
        try:
            async with httpx.AsyncClient(headers=self.headers, timeout=self.timeout) as client:
                return await client.get(f"{self.base_url}{path}", params=params)
        except httpx.HTTPError as e:
            raise CollaboratorError(f"Supabase request to {path} failed: {e}") from e


class SupabaseAuthAdmin(_SupabaseAPI):
    """Identity provider backed by the Supabase Auth (GoTrue) admin API."""

    async def create_user(
        self,
        email: str,
        metadata: dict[str, Any],
        *,
        pre_confirmed: bool = True,
    ) -> ProvisioningResult:
        """Create an auth user via ``POST /auth/v1/admin/users``."""
        response = await self._post(
            "/auth/v1/admin/users",
            json={
                "email": email,
                "email_confirm": pre_confirmed,
                "user_metadata": metadata,
            },
        )
        body = _response_body(response)

        if response.is_success:
            user_id = body.get("id") if isinstance(body, dict) else None
            return ProvisioningResult(user_id=str(user_id) if user_id else None)

        if is_already_exists(response.status_code, body):
            # The error body never carries the existing account's id
            logger.info("Auth user already exists for %s", email)
            return ProvisioningResult(already_existed=True)

        raise CollaboratorError(
            "Admin createUser failed",
            status_code=response.status_code,
            payload=body,
        )

    async def send_sign_in_link(
        self,
        email: str,
        metadata: dict[str, Any],
        *,
        redirect_to: str | None = None,
    ) -> ProvisioningResult:
        """Send a magic link via ``POST /auth/v1/otp``.

        GoTrue creates the account on first use and does not return its id.
        """
        params = {"redirect_to": redirect_to} if redirect_to else None
        response = await self._post(
            "/auth/v1/otp",
            json={"email": email, "create_user": True, "data": metadata},
            params=params,
        )
        if not response.is_success:
            raise CollaboratorError(
                "Magic link request failed",
                status_code=response.status_code,
                payload=_response_body(response),
            )
        return ProvisioningResult()

    async def find_user_id(self, email: str) -> str | None:
        """Resolve an account id via ``GET /auth/v1/admin/users``.

        GoTrue's ``filter`` is a substring match on email, so the result is
        narrowed to the exact (case-insensitive) address.
        """
        response = await self._get(
            "/auth/v1/admin/users",
            params={"filter": email, "per_page": str(_USER_LOOKUP_PAGE_SIZE)},
        )
        body = _response_body(response)
        if not response.is_success:
            raise CollaboratorError(
                "Admin listUsers failed",
                status_code=response.status_code,
                payload=body,
            )

        users = body.get("users") if isinstance(body, dict) else None
        wanted = email.lower()
        for user in users or []:
            if isinstance(user, dict) and str(user.get("email", "")).lower() == wanted:
                return str(user["id"]) if user.get("id") else None
        return None

    async def ping(self) -> bool:
        """Check the auth service health endpoint."""
        async with httpx.AsyncClient(headers=self.headers, timeout=self.timeout) as client:
            response = await client.get(f"{self.base_url}/auth/v1/health")
            return bool(response.is_success)


class SupabaseProfileStore(_SupabaseAPI):
    """Profile store backed by a PostgREST table."""

    def __init__(
        self,
        url: str,
        service_role_key: str,
        table: str = "profiles",
        timeout: float = 15.0,
    ) -> None:
        super().__init__(url, service_role_key, timeout)
        self.table = table

    async def upsert_profile(self, key: ProfileKey, fields: dict[str, Any]) -> None:
        """Upsert one row, merging on the key column."""
        row = {**fields, key.column: key.value}
        response = await self._post(
            f"/rest/v1/{self.table}",
            json=row,
            params={"on_conflict": key.column},
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )
        if not response.is_success:
            raise CollaboratorError(
                f"{self.table} upsert failed",
                status_code=response.status_code,
                payload=_response_body(response),
            )
