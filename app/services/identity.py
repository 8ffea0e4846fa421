"""
Client for the hosted identity provider (GoTrue-compatible REST API).

Credential storage, password hashing and session issuance live in the
provider. This client signs actors in and out, registers them, and runs
the privileged admin calls that need the service-role key. Admin calls
must only ever be made from server-side code paths.

Security: never log passwords, tokens or API keys.
"""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import httpx

from app.core.config import settings
from app.core.errors import AuthenticationError, IdentityProviderError
from app.core.security import Identity

logger = logging.getLogger(__name__)

# Status codes the provider uses for rejected credentials
_CREDENTIAL_ERRORS = (400, 401, 422)


@dataclass(frozen=True)
class AuthSession:
    """Tokens and identity returned by a successful sign-in."""

    access_token: str
    refresh_token: str
    identity: Identity


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if not isinstance(body, dict):
        return f"HTTP {response.status_code}"
    for key in ("error_description", "msg", "message", "error"):
        if body.get(key):
            return str(body[key])
    return f"HTTP {response.status_code}"


def _identity(user: dict[str, Any]) -> Identity:
    try:
        return Identity(
            id=UUID(str(user["id"])),
            email=str(user.get("email") or ""),
            metadata=dict(user.get("user_metadata") or {}),
        )
    except (KeyError, ValueError) as exc:
        raise IdentityProviderError("Malformed user in provider response") from exc


class IdentityProvider:
    """Async client for the identity provider."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        anon_key: str | None = None,
        service_role_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._anon_key = anon_key if anon_key is not None else settings.AUTH_ANON_KEY
        self._service_role_key = (
            service_role_key if service_role_key is not None else settings.AUTH_SERVICE_ROLE_KEY
        )
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.AUTH_URL).rstrip("/"),
            timeout=timeout or settings.AUTH_REQUEST_TIMEOUT,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, *, bearer: str | None = None, admin: bool = False) -> dict[str, str]:
        key = self._service_role_key if admin else self._anon_key
        headers = {"apikey": key}
        token = key if admin else bearer
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Identity provider unreachable: %s", exc.__class__.__name__)
            raise IdentityProviderError("Identity provider unreachable") from exc

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers=self._headers(),
        )
        if response.status_code in _CREDENTIAL_ERRORS:
            raise AuthenticationError(_error_message(response))
        if response.status_code != 200:
            raise IdentityProviderError(_error_message(response), response.status_code)

        body = response.json()
        return AuthSession(
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token", ""),
            identity=_identity(body["user"]),
        )

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> Identity:
        """Register a new identity. `metadata` is stored as user metadata."""
        response = await self._request(
            "POST",
            "/signup",
            json={"email": email, "password": password, "data": metadata},
            headers=self._headers(),
        )
        if response.status_code in _CREDENTIAL_ERRORS:
            raise AuthenticationError(_error_message(response))
        if response.status_code != 200:
            raise IdentityProviderError(_error_message(response), response.status_code)

        body = response.json()
        # With auto-confirm the provider wraps the user in a session
        return _identity(body.get("user") or body)

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session behind an access token."""
        response = await self._request(
            "POST",
            "/logout",
            headers=self._headers(bearer=access_token),
        )
        if response.status_code not in (200, 204, 401):
            raise IdentityProviderError(_error_message(response), response.status_code)

    async def create_identity(
        self, email: str, password: str, metadata: dict[str, Any]
    ) -> Identity:
        """Create a confirmed identity (admin)."""
        response = await self._request(
            "POST",
            "/admin/users",
            json={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": metadata,
            },
            headers=self._headers(admin=True),
        )
        if response.status_code not in (200, 201):
            raise IdentityProviderError(_error_message(response), response.status_code)
        return _identity(response.json())

    async def delete_identity(self, user_id: UUID) -> None:
        """Delete an identity (admin)."""
        response = await self._request(
            "DELETE",
            f"/admin/users/{user_id}",
            headers=self._headers(admin=True),
        )
        if response.status_code not in (200, 204):
            raise IdentityProviderError(_error_message(response), response.status_code)


async def discard_identity(provider: IdentityProvider, identity_id: UUID) -> None:
    """Remove an identity whose profile could not be created. Failures are logged only."""
    try:
        await provider.delete_identity(identity_id)
    except IdentityProviderError as exc:
        logger.error("Could not remove identity %s without a profile: %s", identity_id, exc.message)
    else:
        logger.info("Removed identity %s after profile creation failed", identity_id)
