"""Generate-copy use case - prompt assembly, provider stream, normalized relay."""

import json
import logging
from collections.abc import AsyncIterator
from typing import Protocol

import httpx

from copychain.application.generation.dto import GenerateCopyRequest
from copychain.domain.entities.generation_context import GenerationContext
from copychain.domain.ports.config import GenerationConfig
from copychain.domain.ports.llm import CompletionStreamPort, UpstreamStream
from copychain.domain.services.prompt_builder import build_generation_messages, get_agent
from copychain.infrastructure.streaming.sse_parser import DONE_SENTINEL, iter_deltas

logger = logging.getLogger(__name__)


class ProviderLookup(Protocol):
    def get(self, name: str) -> CompletionStreamPort: ...


def delta_record(content: str) -> dict[str, str]:
    """One normalized SSE event for sse_starlette."""
    payload = {"choices": [{"delta": {"content": content}}]}
    return {"data": json.dumps(payload, ensure_ascii=False)}


class GenerateCopyUseCase:
    """Runs one step of the copy chain against the selected provider.

    open_stream() does everything that can fail with an HTTP error status
    (unknown step, missing key, upstream rejection) before any byte is sent
    to the caller; relay() then streams the parsed deltas.
    """

    def __init__(self, providers: ProviderLookup, generation: GenerationConfig) -> None:
        self._providers = providers
        self._generation = generation

    async def open_stream(self, request: GenerateCopyRequest) -> UpstreamStream:
        get_agent(request.step)
        ctx = GenerationContext.from_raw(request.generation_context)
        messages = build_generation_messages(
            request.step,
            request.product_input,
            ctx,
            previous_context=request.previous_context,
            continue_from=request.continue_from,
        )
        provider = self._providers.get(request.provider)
        logger.info(
            "Generating step=%s provider=%s language=%s continuation=%s",
            request.step,
            request.provider,
            ctx.language_code,
            bool(request.continue_from),
        )
        return await provider.open_stream(
            messages,
            temperature=self._generation.temperature,
            max_tokens=self._generation.max_tokens,
        )

    async def relay(self, upstream: UpstreamStream) -> AsyncIterator[dict[str, str]]:
        """Re-emit upstream deltas as normalized records, then [DONE].

        An upstream failure mid-stream is re-raised so the response body is
        cut off; the caller sees a broken read, never a clean end.
        """
        try:
            async for delta in iter_deltas(upstream.aiter_bytes()):
                yield delta_record(delta)
        except httpx.HTTPError as e:
            logger.warning("Upstream stream broke mid-relay: %s", e)
            raise
        finally:
            await upstream.aclose()
        yield {"data": DONE_SENTINEL}
