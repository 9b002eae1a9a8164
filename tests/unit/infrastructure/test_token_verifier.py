"""Tests for TokenVerifier."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from copychain.domain.errors import IdentityError
from copychain.domain.ports.config import AuthConfig
from copychain.infrastructure.auth.token_verifier import TokenVerifier


class TestExtractBearer:
    """Tests for TokenVerifier.extract_bearer."""

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc", "abc"),
            ("bearer  abc ", "abc"),
            ("Basic abc", None),
            ("Bearer ", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extract(self, header, expected):
        assert TokenVerifier.extract_bearer(header) == expected


class TestTokenVerifier:
    """Tests for TokenVerifier.verify."""

    @pytest.mark.asyncio
    async def test_auth_disabled_accepts_anything(self):
        verifier = TokenVerifier(AuthConfig(require_auth=False))
        assert await verifier.verify(None) is True

    @pytest.mark.asyncio
    async def test_static_tokens(self):
        verifier = TokenVerifier(AuthConfig(api_tokens=["secret"]))
        assert await verifier.verify("Bearer secret") is True
        assert await verifier.verify("Bearer other") is False
        assert await verifier.verify(None) is False

    @pytest.mark.asyncio
    async def test_identity_lookup(self):
        identity = MagicMock()
        identity.get_user = AsyncMock(side_effect=lambda token: {"id": "u1"} if token == "jwt" else None)
        verifier = TokenVerifier(AuthConfig(), identity)

        assert await verifier.verify("Bearer jwt") is True
        assert await verifier.verify("Bearer forged") is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [IdentityError("down"), httpx.ConnectError("down")])
    async def test_identity_errors_reject(self, error):
        identity = MagicMock()
        identity.get_user = AsyncMock(side_effect=error)
        verifier = TokenVerifier(AuthConfig(), identity)

        assert await verifier.verify("Bearer jwt") is False
