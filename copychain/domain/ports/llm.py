"""LLM Port - streamed chat completions from an upstream provider."""

from typing import AsyncIterator, Protocol

from pydantic import BaseModel


class LLMMessage(BaseModel):
    """Single message in a conversation."""

    role: str  # "system" | "user" | "assistant"
    content: str


class UpstreamStream(Protocol):
    """An opened, successful provider response whose body is still unread."""

    def aiter_bytes(self) -> AsyncIterator[bytes]:
        """Raw SSE bytes as they arrive."""
        ...

    async def aclose(self) -> None:
        """Release the connection."""
        ...


class CompletionStreamPort(Protocol):
    """Interface for OpenAI-compatible providers (DeepSeek, OpenAI)."""

    name: str

    async def open_stream(
        self,
        messages: list[LLMMessage],
        temperature: float,
        max_tokens: int | None = None,
    ) -> UpstreamStream:
        """Start a streamed completion; raise ProviderRejectedError on non-2xx."""
        ...
