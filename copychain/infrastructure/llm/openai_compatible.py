"""OpenAI-compatible provider adapter - DeepSeek and OpenAI chat completions."""

import logging

import httpx

from copychain.domain.errors import (
    CopyServiceError,
    ProviderNotConfiguredError,
    ProviderRateLimitedError,
    ProviderRejectedError,
)
from copychain.domain.ports.config import ProviderConfig, ProvidersConfig
from copychain.domain.ports.llm import LLMMessage

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider:
    """Implements CompletionStreamPort via POST {base_url}/chat/completions."""

    def __init__(
        self,
        name: str,
        config: ProviderConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize with provider config."""
        self.name = name
        self._config = config
        self._base_url = config.base_url.rstrip("/")
        self._headers = {"Content-Type": "application/json"}
        if config.api_key:
            self._headers["Authorization"] = f"Bearer {config.api_key}"
        self._client = client

    @property
    def model(self) -> str:
        return self._config.model

    @property
    def is_configured(self) -> bool:
        return bool(self._config.api_key)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create persistent async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout,
                headers=self._headers,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client (call during app shutdown)."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _chat_body(
        self,
        messages: list[LLMMessage],
        temperature: float,
        max_tokens: int | None,
    ) -> dict:
        """Build streaming request body; max_tokens only when set."""
        body: dict = {
            "model": self._config.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
            "stream": True,
        }
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        return body

    async def open_stream(
        self,
        messages: list[LLMMessage],
        temperature: float,
        max_tokens: int | None = None,
    ) -> httpx.Response:
        """Start a streamed completion. Caller owns the returned response and must aclose() it."""
        if not self.is_configured:
            raise ProviderNotConfiguredError(self.name)
        body = self._chat_body(messages, temperature, max_tokens)
        client = self._get_client()
        request = client.build_request(
            "POST",
            f"{self._base_url}/chat/completions",
            json=body,
            headers=self._headers,
        )
        try:
            resp = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error("LLM API %s unreachable: %s", self.name, e)
            raise CopyServiceError(f"{self.name} API unreachable") from e

        if resp.status_code >= 400:
            err_body = await resp.aread()
            await resp.aclose()
            err_text = err_body.decode("utf-8", errors="replace")
            logger.error(
                "LLM API error %s from %s: %s",
                resp.status_code,
                self.name,
                err_text[:500],
            )
            if resp.status_code == 429:
                raise ProviderRateLimitedError(self.name, err_text[:500])
            raise ProviderRejectedError(self.name, resp.status_code, err_text[:500])
        return resp


class ProviderRegistry:
    """One adapter per provider name, created on first use."""

    def __init__(self, config: ProvidersConfig) -> None:
        self._config = config
        self._providers: dict[str, OpenAICompatibleProvider] = {}

    @property
    def default(self) -> str:
        return self._config.default

    def get(self, name: str) -> OpenAICompatibleProvider:
        if name not in self._providers:
            provider_config = self._config.get(name)
            if provider_config is None:
                raise CopyServiceError(f"Invalid provider: {name}")
            self._providers[name] = OpenAICompatibleProvider(name, provider_config)
        return self._providers[name]

    def register(self, provider: OpenAICompatibleProvider) -> None:
        """Use a prebuilt adapter (custom client or transport) for its name."""
        self._providers[provider.name] = provider

    async def close(self) -> None:
        for provider in self._providers.values():
            await provider.close()
        self._providers.clear()
