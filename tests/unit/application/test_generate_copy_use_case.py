"""Tests for GenerateCopyUseCase."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from copychain.application.generation.dto import GenerateCopyRequest
from copychain.application.generation.use_case import GenerateCopyUseCase, delta_record
from copychain.domain.errors import ProviderNotConfiguredError, UnknownStepError
from copychain.domain.ports.config import GenerationConfig


class FakeUpstream:
    def __init__(self, chunks, error=None):
        self.chunks = chunks
        self.error = error
        self.closed = False

    async def aiter_bytes(self):
        for chunk in self.chunks:
            yield chunk
        if self.error:
            raise self.error

    async def aclose(self):
        self.closed = True


def upstream_body(*deltas, done=True):
    lines = [f"data: {json.dumps({'choices': [{'delta': {'content': d}}]})}\n\n" for d in deltas]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


@pytest.fixture
def provider():
    p = MagicMock()
    p.name = "deepseek"
    p.open_stream = AsyncMock(return_value=FakeUpstream([upstream_body("Hi")]))
    return p


@pytest.fixture
def registry(provider):
    r = MagicMock()
    r.get = MagicMock(return_value=provider)
    return r


@pytest.fixture
def use_case(registry):
    return GenerateCopyUseCase(registry, GenerationConfig(temperature=0.7, max_tokens=4000))


class TestOpenStream:
    """Prompt assembly and provider call."""

    @pytest.mark.asyncio
    async def test_builds_messages_and_calls_provider(self, use_case, registry, provider):
        request = GenerateCopyRequest(
            product_input="Course",
            step="usp",
            provider="openai",
            previous_context="## Avatar\nA",
            continue_from="partial",
            generation_context={"language_code": "en", "tone_formality": "casual"},
        )

        await use_case.open_stream(request)

        registry.get.assert_called_once_with("openai")
        args, kwargs = provider.open_stream.call_args
        messages = args[0]
        assert [m.role for m in messages] == ["system", "assistant", "user", "assistant", "user"]
        assert "Write ALL content in English." in messages[0].content
        assert messages[2].content.startswith("PRODUCT: Course")
        assert kwargs == {"temperature": 0.7, "max_tokens": 4000}

    @pytest.mark.asyncio
    async def test_unknown_step(self, use_case, provider):
        with pytest.raises(UnknownStepError):
            await use_case.open_stream(GenerateCopyRequest(product_input="x", step="bogus"))
        provider.open_stream.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_errors_propagate(self, use_case, provider):
        provider.open_stream.side_effect = ProviderNotConfiguredError("deepseek")
        with pytest.raises(ProviderNotConfiguredError, match="DEEPSEEK_API_KEY"):
            await use_case.open_stream(GenerateCopyRequest(product_input="x", step="avatar"))


class TestRelay:
    """Normalized re-emission of upstream deltas."""

    @pytest.mark.asyncio
    async def test_relays_deltas_then_done(self, use_case):
        raw = upstream_body("Olá", " mundo")
        upstream = FakeUpstream([raw[:25], raw[25:]])

        events = [e async for e in use_case.relay(upstream)]

        assert events == [delta_record("Olá"), delta_record(" mundo"), {"data": "[DONE]"}]
        assert json.loads(events[0]["data"]) == {"choices": [{"delta": {"content": "Olá"}}]}
        assert upstream.closed

    @pytest.mark.asyncio
    async def test_upstream_without_done(self, use_case):
        upstream = FakeUpstream([upstream_body("a", done=False)])
        events = [e async for e in use_case.relay(upstream)]
        assert events[-1] == {"data": "[DONE]"}

    @pytest.mark.asyncio
    async def test_broken_upstream_is_reraised(self, use_case):
        upstream = FakeUpstream([upstream_body("a", done=False)], error=httpx.ReadError("reset"))
        events = []

        with pytest.raises(httpx.ReadError):
            async for event in use_case.relay(upstream):
                events.append(event)

        assert events == [delta_record("a")]
        assert upstream.closed
