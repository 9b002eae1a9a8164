"""Session Port - identity provider and the session events it drives."""

import time
from enum import Enum
from typing import Protocol

from pydantic import BaseModel


class AuthSession(BaseModel):
    """Bearer credential issued by the identity provider."""

    access_token: str
    refresh_token: str | None = None
    expires_at: float | None = None  # unix seconds; None = never expires
    user_id: str | None = None
    email: str | None = None

    def is_expired(self, leeway: float = 30.0) -> bool:
        if self.expires_at is None:
            return False
        return time.time() >= self.expires_at - leeway


class SessionEvent(str, Enum):
    """Notifications emitted when the session changes."""

    SIGNED_IN = "signed_in"
    TOKEN_REFRESHED = "token_refreshed"
    SIGNED_OUT = "signed_out"


class IdentityPort(Protocol):
    """Third-party identity service (GoTrue, static token)."""

    async def current_session(self) -> AuthSession | None:
        """Session available at startup, if any."""
        ...

    async def refresh(self, session: AuthSession) -> AuthSession:
        """Exchange an expired session for a fresh one."""
        ...

    async def sign_out(self, session: AuthSession) -> None:
        """Revoke the session remotely."""
        ...


class AccessTokenSource(Protocol):
    """What the generation gateway needs from the session component."""

    async def get_access_token(self) -> str | None:
        ...
