"""Tests for the OpenAI-compatible provider adapter."""

import json

import httpx
import pytest

from copychain.domain.errors import (
    CopyServiceError,
    ProviderNotConfiguredError,
    ProviderRateLimitedError,
    ProviderRejectedError,
)
from copychain.domain.ports.config import ProviderConfig, ProvidersConfig
from copychain.domain.ports.llm import LLMMessage
from copychain.infrastructure.llm.openai_compatible import (
    OpenAICompatibleProvider,
    ProviderRegistry,
)

MESSAGES = [
    LLMMessage(role="system", content="You are a copywriter"),
    LLMMessage(role="user", content="PRODUCT: course"),
]


def make_provider(handler, api_key="sk-test", name="deepseek"):
    config = ProviderConfig(base_url="https://api.deepseek.test/", model="deepseek-chat", api_key=api_key)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAICompatibleProvider(name, config, client=client)


class TestOpenAICompatibleProvider:
    """Tests for OpenAICompatibleProvider."""

    @pytest.mark.asyncio
    async def test_open_stream_request(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=b"data: [DONE]\n\n")

        provider = make_provider(handler)
        resp = await provider.open_stream(MESSAGES, temperature=0.8, max_tokens=8000)
        body = b"".join([chunk async for chunk in resp.aiter_bytes()])
        await resp.aclose()

        assert body == b"data: [DONE]\n\n"
        assert seen["url"] == "https://api.deepseek.test/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["model"] == "deepseek-chat"
        assert seen["body"]["stream"] is True
        assert seen["body"]["temperature"] == 0.8
        assert seen["body"]["max_tokens"] == 8000
        assert seen["body"]["messages"][0] == {"role": "system", "content": "You are a copywriter"}

    @pytest.mark.asyncio
    async def test_max_tokens_omitted_when_none(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=b"data: [DONE]\n\n")

        resp = await make_provider(handler).open_stream(MESSAGES, temperature=0.5)
        await resp.aclose()
        assert "max_tokens" not in seen["body"]

    @pytest.mark.asyncio
    async def test_missing_key(self):
        provider = make_provider(lambda r: httpx.Response(200), api_key="", name="openai")
        with pytest.raises(ProviderNotConfiguredError, match="OPENAI_API_KEY is not configured"):
            await provider.open_stream(MESSAGES, temperature=0.8)

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        provider = make_provider(lambda r: httpx.Response(429, json={"error": "slow down"}))
        with pytest.raises(ProviderRateLimitedError) as exc_info:
            await provider.open_stream(MESSAGES, temperature=0.8)
        assert exc_info.value.status_code == 429
        assert str(exc_info.value) == "Rate limit exceeded. Try again in a few moments."

    @pytest.mark.asyncio
    async def test_rejected(self):
        provider = make_provider(lambda r: httpx.Response(401, json={"error": "bad key"}))
        with pytest.raises(ProviderRejectedError) as exc_info:
            await provider.open_stream(MESSAGES, temperature=0.8)
        assert exc_info.value.status_code == 500
        assert exc_info.value.upstream_status == 401
        assert str(exc_info.value) == "Error from deepseek API: 401"
        assert "bad key" in exc_info.value.body

    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(CopyServiceError, match="deepseek API unreachable"):
            await make_provider(handler).open_stream(MESSAGES, temperature=0.8)


class TestProviderRegistry:
    """Tests for ProviderRegistry."""

    def test_get_caches_adapter(self):
        registry = ProviderRegistry(ProvidersConfig())
        assert registry.get("deepseek") is registry.get("deepseek")
        assert registry.get("openai").model == "gpt-4o"
        assert registry.default == "deepseek"

    def test_unknown_provider(self):
        with pytest.raises(CopyServiceError, match="Invalid provider"):
            ProviderRegistry(ProvidersConfig()).get("anthropic")
