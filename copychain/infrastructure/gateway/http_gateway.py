"""Remote generation gateway - authenticated POST to /generate-copy, raw byte stream back."""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from copychain.domain.entities.cancellation import CancellationHandle
from copychain.domain.errors import (
    GenerationCancelled,
    RequestRejected,
    StreamUnavailable,
    TransportFailure,
    Unauthenticated,
)
from copychain.domain.ports.gateway import GenerationRequest
from copychain.domain.ports.session import AccessTokenSource

logger = logging.getLogger(__name__)


async def _next_chunk(chunks: AsyncIterator[bytes]) -> bytes | None:
    """Next body chunk, None at EOF."""
    try:
        return await anext(chunks)
    except StopAsyncIteration:
        return None


def _describe(exc: httpx.HTTPError) -> str:
    return str(exc) or exc.__class__.__name__


class HttpGenerationGateway:
    """Single-attempt transport: no retries, no backoff.

    Every failure surfaces to the caller before or while the stream is read.
    """

    def __init__(
        self,
        url: str,
        session: AccessTokenSource,
        timeout: float = 300,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._session = session
        self._timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create persistent async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @asynccontextmanager
    async def open_stream(
        self,
        request: GenerationRequest,
        handle: CancellationHandle,
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """POST the request and yield an iterator over raw body chunks."""
        token = await self._session.get_access_token()
        if not token:
            raise Unauthenticated()
        if handle.cancelled:
            raise GenerationCancelled()

        client = self._get_client()
        try:
            async with client.stream(
                "POST",
                self._url,
                json=request.to_wire(),
                headers={"Authorization": f"Bearer {token}"},
            ) as resp:
                if not resp.is_success:
                    message = await self._rejection_message(resp)
                    logger.error("Generation API error %s: %s", resp.status_code, message[:500])
                    raise RequestRejected(message, resp.status_code)
                if resp.status_code == 204 or resp.headers.get("content-length") == "0":
                    raise StreamUnavailable()
                chunks = self._iter_chunks(resp, handle)
                try:
                    yield chunks
                finally:
                    await chunks.aclose()
        except httpx.HTTPError as exc:
            logger.warning("Generation request to %s failed: %s", self._url, _describe(exc))
            raise TransportFailure(_describe(exc)) from exc

    async def _rejection_message(self, resp: httpx.Response) -> str:
        """Server-supplied {error} message, or a status fallback."""
        body = await resp.aread()
        try:
            data = json.loads(body)
        except ValueError:
            return "Request failed"
        message = data.get("error") if isinstance(data, dict) else None
        if isinstance(message, str) and message:
            return message
        return f"Error {resp.status_code}"

    async def _iter_chunks(
        self,
        resp: httpx.Response,
        handle: CancellationHandle,
    ) -> AsyncIterator[bytes]:
        """Body chunks until EOF; a cancelled handle abandons the pending read."""
        chunks = resp.aiter_bytes()
        cancelled = asyncio.ensure_future(handle.wait())
        try:
            while True:
                if handle.cancelled:
                    raise GenerationCancelled()
                pending = asyncio.ensure_future(_next_chunk(chunks))
                done, _ = await asyncio.wait(
                    {pending, cancelled},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if pending not in done:
                    pending.cancel()
                    # let the abandoned read unwind before the response is closed
                    await asyncio.wait({pending})
                    raise GenerationCancelled()
                try:
                    chunk = pending.result()
                except httpx.HTTPError as exc:
                    raise TransportFailure(_describe(exc)) from exc
                if chunk is None:
                    return
                yield chunk
        finally:
            cancelled.cancel()
