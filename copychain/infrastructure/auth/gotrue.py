"""Identity providers - Supabase GoTrue REST client and a static token source.

Transient network errors are retried with exponential backoff; auth
rejections are not.
"""

import logging
import time
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from copychain.domain.errors import IdentityError
from copychain.domain.ports.session import AuthSession

logger = logging.getLogger(__name__)

_transient_retry = retry(
    retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True,
)


def session_from_payload(data: dict[str, Any]) -> AuthSession:
    """Build an AuthSession from a GoTrue token response."""
    access_token = data.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise IdentityError("Token response without access_token")
    expires_at = data.get("expires_at")
    if expires_at is None and data.get("expires_in") is not None:
        expires_at = time.time() + float(data["expires_in"])
    user = data.get("user") or {}
    return AuthSession(
        access_token=access_token,
        refresh_token=data.get("refresh_token"),
        expires_at=float(expires_at) if expires_at is not None else None,
        user_id=user.get("id"),
        email=user.get("email"),
    )


class GoTrueIdentity:
    """Supabase auth (GoTrue) over its REST API."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 15,
        client: httpx.AsyncClient | None = None,
        initial_session: AuthSession | None = None,
    ) -> None:
        self._base_url = f"{url.rstrip('/')}/auth/v1"
        self._headers = {"apikey": anon_key, "Content-Type": "application/json"}
        self._timeout = timeout
        self._client = client
        self._initial_session = initial_session

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create persistent async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout, headers=self._headers)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def current_session(self) -> AuthSession | None:
        return self._initial_session

    @_transient_retry
    async def _token(self, grant_type: str, body: dict[str, str]) -> AuthSession:
        resp = await self._get_client().post(
            f"{self._base_url}/token",
            params={"grant_type": grant_type},
            json=body,
            headers=self._headers,
        )
        if resp.status_code >= 400:
            logger.warning("GoTrue %s grant rejected: %s", grant_type, resp.status_code)
            raise IdentityError(self._error_message(resp))
        return session_from_payload(resp.json())

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        return await self._token("password", {"email": email, "password": password})

    async def refresh(self, session: AuthSession) -> AuthSession:
        if not session.refresh_token:
            raise IdentityError("Session has no refresh token")
        return await self._token("refresh_token", {"refresh_token": session.refresh_token})

    @_transient_retry
    async def get_user(self, access_token: str) -> dict[str, Any] | None:
        """User record for a bearer token; None if the token is not valid."""
        resp = await self._get_client().get(
            f"{self._base_url}/user",
            headers={**self._headers, "Authorization": f"Bearer {access_token}"},
        )
        if resp.status_code in (401, 403):
            return None
        if resp.status_code >= 400:
            raise IdentityError(self._error_message(resp))
        return resp.json()

    async def sign_out(self, session: AuthSession) -> None:
        try:
            resp = await self._get_client().post(
                f"{self._base_url}/logout",
                headers={**self._headers, "Authorization": f"Bearer {session.access_token}"},
            )
        except httpx.HTTPError as e:
            raise IdentityError(f"Sign out failed: {e}") from e
        if resp.status_code >= 400 and resp.status_code not in (401, 403):
            raise IdentityError(self._error_message(resp))

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            data = resp.json()
        except ValueError:
            return f"Identity error {resp.status_code}"
        if isinstance(data, dict):
            for key in ("error_description", "msg", "message", "error"):
                if isinstance(data.get(key), str):
                    return data[key]
        return f"Identity error {resp.status_code}"


class StaticTokenIdentity:
    """A fixed bearer token from configuration (dev, CLI, service accounts)."""

    def __init__(self, token: str) -> None:
        self._token = token

    async def current_session(self) -> AuthSession | None:
        if not self._token:
            return None
        return AuthSession(access_token=self._token)

    async def refresh(self, session: AuthSession) -> AuthSession:
        raise IdentityError("Static tokens cannot be refreshed")

    async def sign_out(self, session: AuthSession) -> None:
        return None
