"""Bearer token verification for the copy backend."""

import hmac
import logging

import httpx

from copychain.domain.errors import IdentityError
from copychain.domain.ports.config import AuthConfig
from copychain.infrastructure.auth.gotrue import GoTrueIdentity

logger = logging.getLogger(__name__)


class TokenVerifier:
    """Accepts configured static tokens, else asks GoTrue who the token belongs to.

    With require_auth disabled every request is accepted.
    """

    def __init__(self, config: AuthConfig, identity: GoTrueIdentity | None = None) -> None:
        self._tokens = [t for t in config.api_tokens if t]
        self._require_auth = config.require_auth
        self._identity = identity

    async def verify(self, authorization: str | None) -> bool:
        if not self._require_auth:
            return True
        token = self.extract_bearer(authorization)
        if not token:
            return False
        if any(hmac.compare_digest(token, allowed) for allowed in self._tokens):
            return True
        if self._identity is None:
            return False
        try:
            user = await self._identity.get_user(token)
        except (IdentityError, httpx.HTTPError) as e:
            logger.warning("Token verification against identity provider failed: %s", e)
            return False
        return bool(user and user.get("id"))

    @staticmethod
    def extract_bearer(authorization: str | None) -> str | None:
        if not authorization:
            return None
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return token.strip()
