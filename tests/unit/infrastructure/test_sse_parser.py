"""Tests for the token-stream parser."""

import json

import pytest

from copychain.infrastructure.streaming.sse_parser import (
    SSEDeltaParser,
    extract_delta,
    iter_deltas,
)


def record(content):
    return "data: " + json.dumps({"choices": [{"delta": {"content": content}}]}) + "\n"


PAYLOAD = (
    ": keep-alive\n"
    + record("Olá")
    + "\n"
    + record(", mundo")
    + 'data: {"choices":[{"delta":{"role":"assistant"}}]}\n'
    + record(" ✨ 🚀")
    + "event: ping\n"
    + "data: [DONE]\n"
    + record("after done")
).encode("utf-8")


def feed_all(chunks):
    parser = SSEDeltaParser()
    out = []
    for chunk in chunks:
        out.extend(parser.feed(chunk))
    out.extend(parser.finish())
    return out


async def agen(chunks):
    for chunk in chunks:
        yield chunk


class TestExtractDelta:
    """Tests for extract_delta."""

    def test_content(self):
        assert extract_delta({"choices": [{"delta": {"content": "hi"}}]}) == "hi"

    @pytest.mark.parametrize(
        "rec",
        [
            {"choices": [{"delta": {"content": ""}}]},
            {"choices": [{"delta": {"content": None}}]},
            {"choices": [{"delta": {"content": 5}}]},
            {"choices": [{"delta": {}}]},
            {"choices": []},
            {},
            [],
            "text",
        ],
    )
    def test_ignored_shapes(self, rec):
        assert extract_delta(rec) is None


class TestSSEDeltaParser:
    """Tests for SSEDeltaParser."""

    def test_single_chunk(self):
        assert feed_all([PAYLOAD]) == ["Olá", ", mundo", " ✨ 🚀"]

    def test_chunk_boundary_invariance(self):
        """One byte at a time (splitting multi-byte characters) gives the same deltas."""
        whole = feed_all([PAYLOAD])
        bytewise = feed_all([PAYLOAD[i : i + 1] for i in range(len(PAYLOAD))])
        sevens = feed_all([PAYLOAD[i : i + 7] for i in range(0, len(PAYLOAD), 7)])
        assert bytewise == whole
        assert sevens == whole

    def test_done_stops_permanently(self):
        parser = SSEDeltaParser()
        parser.feed(b"data: [DONE]\n")
        assert parser.done
        assert parser.feed(record("late").encode()) == []
        assert parser.finish() == []

    def test_crlf_lines(self):
        body = record("a").replace("\n", "\r\n") + "data: [DONE]\r\n"
        assert feed_all([body.encode()]) == ["a"]

    def test_residual_line_drained_on_finish(self):
        parser = SSEDeltaParser()
        line = record("tail").rstrip("\n").encode()
        assert parser.feed(line) == []
        assert parser.finish() == ["tail"]
        assert parser.done

    def test_non_data_lines_ignored(self):
        body = b"id: 1\nevent: message\nretry: 100\n" + record("x").encode()
        assert feed_all([body]) == ["x"]

    def test_split_write_recovered(self):
        """A record broken by a stray newline is rejoined with the next line."""
        body = (
            'data: {"choices":[{"delta":{"content":"He\n'
            'llo"}}]}\n'
            + record(" there")
        ).encode()
        parser = SSEDeltaParser()
        out = parser.feed(body) + parser.finish()
        assert out == ["Hello", " there"]
        assert parser.dropped_records == 0

    def test_split_write_across_chunks(self):
        first = b'data: {"choices":[{"delta":{"content":"par\n'
        second = b'tial"}}]}\ndata: [DONE]\n'
        assert feed_all([first, second]) == ["partial"]

    def test_empty_data_line_rejoined(self):
        """JSON pushed onto the next line by a newline right after "data:"."""
        parser = SSEDeltaParser()
        assert parser.feed(b"data: \n") == []
        assert parser.feed(b'{"choices":[{"delta":{"content":"A"}}]}\n\n') == ["A"]
        assert parser.dropped_records == 0

    def test_empty_data_line_then_normal_record(self):
        body = b"data:\n\n" + record("B").encode()
        parser = SSEDeltaParser()
        assert parser.feed(body) == ["B"]
        assert parser.dropped_records == 0

    def test_uncompletable_line_dropped(self):
        body = ("data: {invalid json\n" + record("next") + "data: [DONE]\n").encode()
        parser = SSEDeltaParser()
        out = parser.feed(body)
        assert out == ["next"]
        assert parser.done
        assert parser.dropped_records == 1

    def test_uncompletable_line_at_stream_end(self):
        parser = SSEDeltaParser()
        out = parser.feed(record("ok").encode() + b"data: {broken\n")
        out += parser.finish()
        assert out == ["ok"]
        assert parser.dropped_records == 1


class TestIterDeltas:
    """Tests for iter_deltas."""

    @pytest.mark.asyncio
    async def test_yields_in_order(self):
        out = [d async for d in iter_deltas(agen([PAYLOAD[:20], PAYLOAD[20:]]))]
        assert out == ["Olá", ", mundo", " ✨ 🚀"]

    @pytest.mark.asyncio
    async def test_stops_reading_after_done(self):
        consumed = []

        async def chunks():
            for chunk in [record("a").encode(), b"data: [DONE]\n", record("b").encode()]:
                consumed.append(chunk)
                yield chunk

        out = [d async for d in iter_deltas(chunks())]
        assert out == ["a"]
        assert len(consumed) == 2

    @pytest.mark.asyncio
    async def test_stream_end_without_done(self):
        body = record("x").encode() + record("y").rstrip("\n").encode()
        out = [d async for d in iter_deltas(agen([body]))]
        assert out == ["x", "y"]
