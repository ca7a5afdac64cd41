"""Auth0 Management API v2 client (identity provider for tenant users)."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Any

import httpx

from app.application.dtos.user import IdentityUser
from app.core.config import Settings
from app.domain.exceptions import ExternalServiceException
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_temporary_password

logger = get_logger(__name__)

SERVICE_NAME = "auth0"
# Refresh the management token this long before Auth0 says it expires.
TOKEN_EXPIRY_MARGIN = timedelta(seconds=60)


def _to_identity_user(data: dict[str, Any]) -> IdentityUser:
    return IdentityUser(
        user_id=data["user_id"],
        email=data.get("email", ""),
        name=data.get("name"),
        blocked=bool(data.get("blocked", False)),
    )


def build_update_payload(changes: dict[str, Any]) -> dict[str, Any]:
    """Translate user attribute changes into a Management API PATCH body.

    Recognized keys: email, name, phone, is_active, role_ids. A changed email
    must be verified again.
    """
    payload: dict[str, Any] = {}
    user_metadata: dict[str, Any] = {}
    app_metadata: dict[str, Any] = {}
    if "email" in changes:
        payload["email"] = changes["email"]
        payload["email_verified"] = False
        payload["verify_email"] = True
    if "name" in changes:
        payload["name"] = changes["name"]
        user_metadata["full_name"] = changes["name"]
    if "phone" in changes:
        user_metadata["phone"] = changes["phone"]
    if "is_active" in changes:
        payload["blocked"] = not changes["is_active"]
        app_metadata["is_active"] = changes["is_active"]
    if "role_ids" in changes:
        app_metadata["role_ids"] = list(changes["role_ids"])
    if user_metadata:
        payload["user_metadata"] = user_metadata
    if app_metadata:
        payload["app_metadata"] = app_metadata
    return payload


class Auth0IdentityProvider:
    """Implements IIdentityProvider against one Auth0 tenant.

    Tokens come from the client-credentials grant and are cached until
    shortly before expiry. Transport and HTTP errors are raised as
    ExternalServiceException.
    """

    enabled = True

    def __init__(
        self,
        domain: str,
        client_id: str,
        client_secret: str,
        *,
        connection: str = "Username-Password-Authentication",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.domain = domain.removeprefix("https://").rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.connection = connection
        self.timeout = timeout
        self._transport = transport
        self._token: str | None = None
        self._token_expires_at: datetime | None = None
        self._token_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> Auth0IdentityProvider:
        secret = settings.auth0_client_secret
        return cls(
            settings.auth0_domain or "",
            settings.auth0_client_id or "",
            secret.get_secret_value() if secret else "",
            connection=settings.auth0_connection,
            timeout=settings.auth0_timeout_seconds,
        )

    @property
    def base_url(self) -> str:
        return f"https://{self.domain}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        )

    async def _get_token(self) -> str:
        async with self._token_lock:
            if (
                self._token is not None
                and self._token_expires_at is not None
                and utc_now() < self._token_expires_at - TOKEN_EXPIRY_MARGIN
            ):
                return self._token
            data = await self._send(
                "get_token",
                "POST",
                "/oauth/token",
                authenticated=False,
                json={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "audience": f"{self.base_url}/api/v2/",
                },
            )
            self._token = data["access_token"]
            self._token_expires_at = utc_now() + timedelta(
                seconds=int(data.get("expires_in", 86400))
            )
            return self._token

    async def _send(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> Any:
        headers = {}
        if authenticated:
            headers["Authorization"] = f"Bearer {await self._get_token()}"
        try:
            async with self._client() as client:
                response = await client.request(method, path, headers=headers, **kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Auth0 %s failed: status=%d", operation, e.response.status_code
            )
            raise ExternalServiceException(
                SERVICE_NAME, operation, f"HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("Auth0 %s failed: %s", operation, e)
            raise ExternalServiceException(SERVICE_NAME, operation, str(e)) from e
        if response.status_code == 204 or not response.content:
            return None
        if response.headers.get("content-type", "").startswith("application/json"):
            return response.json()
        return response.text

    async def get_user_by_email(self, email: str) -> IdentityUser | None:
        users = await self._send(
            "get_user_by_email",
            "GET",
            "/api/v2/users-by-email",
            params={"email": email.lower()},
        )
        if not users:
            return None
        return _to_identity_user(users[0])

    async def create_user(
        self,
        email: str,
        name: str,
        password: str | None,
        tenant_id: str,
        role_ids: tuple[str, ...],
    ) -> IdentityUser | None:
        """Create account; without a password a temporary one is set and the user resets it."""
        data = await self._send(
            "create_user",
            "POST",
            "/api/v2/users",
            json={
                "connection": self.connection,
                "email": email.lower(),
                "password": password or generate_temporary_password(),
                "name": name,
                "user_metadata": {"full_name": name, "tenant_id": tenant_id},
                "app_metadata": {
                    "tenant_id": tenant_id,
                    "role_ids": list(role_ids),
                    "is_active": True,
                },
                "email_verified": False,
                "verify_email": True,
            },
        )
        user = _to_identity_user(data)
        logger.info("Auth0 user %s created for tenant %s", user.user_id, tenant_id)
        return user

    async def update_user(
        self, user_id: str, changes: dict[str, Any]
    ) -> IdentityUser | None:
        payload = build_update_payload(changes)
        if not payload:
            return None
        data = await self._send(
            "update_user", "PATCH", f"/api/v2/users/{user_id}", json=payload
        )
        return _to_identity_user(data)

    async def delete_user(self, user_id: str) -> None:
        await self._send("delete_user", "DELETE", f"/api/v2/users/{user_id}")
        logger.info("Auth0 user %s deleted", user_id)

    async def send_password_reset(self, email: str) -> str | None:
        """Trigger the change-password email; Auth0 answers with a plain-text message."""
        result = await self._send(
            "send_password_reset",
            "POST",
            "/dbconnections/change_password",
            authenticated=False,
            json={
                "client_id": self.client_id,
                "email": email.lower(),
                "connection": self.connection,
            },
        )
        return result if isinstance(result, str) else None


class DisabledIdentityProvider:
    """Identity provider used when the integration is turned off. Every call is a no-op."""

    enabled = False

    async def get_user_by_email(self, email: str) -> IdentityUser | None:
        return None

    async def create_user(
        self,
        email: str,
        name: str,
        password: str | None,
        tenant_id: str,
        role_ids: tuple[str, ...],
    ) -> IdentityUser | None:
        return None

    async def update_user(
        self, user_id: str, changes: dict[str, Any]
    ) -> IdentityUser | None:
        return None

    async def delete_user(self, user_id: str) -> None:
        return None

    async def send_password_reset(self, email: str) -> str | None:
        return None


def create_identity_provider(
    settings: Settings,
) -> Auth0IdentityProvider | DisabledIdentityProvider:
    """Auth0 client when enabled in settings, otherwise the no-op provider."""
    if settings.identity_provider_enabled:
        return Auth0IdentityProvider.from_settings(settings)
    return DisabledIdentityProvider()
