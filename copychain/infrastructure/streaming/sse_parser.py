"""Token-stream parser - SSE chat-completion chunks to text deltas.

Input is the raw byte stream of an OpenAI-compatible streaming response:

    data: {"choices":[{"delta":{"content":"Hel"}}]}

    : keep-alive comment
    data: [DONE]

Each ``choices[0].delta.content`` string is emitted once, in arrival order.
Output does not depend on how the bytes were chunked in transit.
"""

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


def extract_delta(record: Any) -> str | None:
    """Return choices[0].delta.content if it is a non-empty string."""
    try:
        content = record["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    if isinstance(content, str) and content:
        return content
    return None


class SSEDeltaParser:
    """Incremental, finite, non-restartable SSE delta decoder.

    Bytes are decoded as UTF-8 incrementally and kept in a partial-line
    buffer; JSON is parsed only on complete lines. A complete line that is not
    valid JSON is held once and retried joined with the next non-blank line,
    which recovers a record broken by a stray newline. If the retry fails too
    the held line is dropped. Once ``[DONE]`` is seen or ``finish()`` has run,
    further input is ignored.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._pending: str | None = None
        self._done = False
        self.dropped_records = 0

    @property
    def done(self) -> bool:
        return self._done

    def feed(self, chunk: bytes) -> list[str]:
        """Consume one transport chunk; return the deltas it completed."""
        if self._done:
            return []
        self._buffer += self._decoder.decode(chunk)
        deltas: list[str] = []
        while not self._done:
            newline = self._buffer.find("\n")
            if newline == -1:
                break
            line = self._buffer[:newline]
            self._buffer = self._buffer[newline + 1 :]
            self._handle_line(line, deltas)
        return deltas

    def finish(self) -> list[str]:
        """Drain whatever is left after the transport ended."""
        if self._done:
            return []
        self._buffer += self._decoder.decode(b"", final=True)
        residual, self._buffer = self._buffer, ""
        deltas: list[str] = []
        for line in residual.split("\n"):
            if self._done:
                break
            self._handle_line(line, deltas)
        if self._pending is not None:
            self._drop_pending()
        self._done = True
        return deltas

    def _handle_line(self, line: str, deltas: list[str]) -> None:
        if line.endswith("\r"):
            line = line[:-1]
        if not line.strip() or line.startswith(":"):
            return

        if self._pending is not None:
            held, self._pending = self._pending, None
            try:
                record = json.loads(held + line)
            except json.JSONDecodeError:
                if held:
                    self._pending = held + line  # only for the log line
                    self._drop_pending()
            else:
                self._emit(record, deltas)
                return

        if not line.startswith("data:"):
            return
        payload = line[5:].strip()
        if not payload:
            # a stray newline right after "data:"; the JSON may follow on the next line
            self._pending = ""
            return
        if payload == DONE_SENTINEL:
            self._done = True
            return
        try:
            record = json.loads(payload)
        except json.JSONDecodeError:
            self._pending = payload
            return
        self._emit(record, deltas)

    def _emit(self, record: Any, deltas: list[str]) -> None:
        delta = extract_delta(record)
        if delta is not None:
            deltas.append(delta)

    def _drop_pending(self) -> None:
        if not self._pending:
            self._pending = None
            return
        logger.debug("Dropping malformed SSE record: %s", self._pending[:100])
        self._pending = None
        self.dropped_records += 1


async def iter_deltas(
    chunks: AsyncIterable[bytes],
    parser: SSEDeltaParser | None = None,
) -> AsyncIterator[str]:
    """Lazily turn a byte-chunk stream into text deltas.

    Stops at ``[DONE]`` without reading further chunks, otherwise drains the
    residual buffer once the stream ends.
    """
    parser = parser or SSEDeltaParser()
    async for chunk in chunks:
        for delta in parser.feed(chunk):
            yield delta
        if parser.done:
            return
    for delta in parser.finish():
        yield delta
