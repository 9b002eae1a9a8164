"""SSE stream decoding."""

from copychain.infrastructure.streaming.sse_parser import SSEDeltaParser, extract_delta, iter_deltas

__all__ = ["SSEDeltaParser", "extract_delta", "iter_deltas"]
