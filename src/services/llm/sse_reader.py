"""Read token deltas from an OpenAI-compatible ``text/event-stream`` body."""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any


logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def parse_delta(payload: str) -> str | None:
    """Return ``choices[0].delta.content`` from one JSON chunk, if present.

    Returns ``None`` for malformed JSON or chunks without content (role
    announcements, finish markers, usage frames).
    """
    try:
        chunk: Any = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("Skipping malformed SSE data line (%d chars)", len(payload))
        return None
    try:
        content = chunk["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    if isinstance(content, str) and content:
        return content
    return None


def _parse_line(line: str) -> str | None:
    line = line.rstrip("\r")
    if not line or line.startswith(":"):
        return None
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX) :]
    if payload.strip() == DONE_SENTINEL:
        return None
    return parse_delta(payload)


async def stream_tokens(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Yield content deltas from a streamed chat completion body.

    Bytes are decoded incrementally so a multi-byte character split across
    reads survives, and the trailing partial line of each read is carried
    over to the next. Deltas come out in the order they were received; a
    malformed line is skipped without ending the stream.

    Args:
        chunks: The raw response body, e.g. ``httpx.Response.aiter_bytes()``.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""
    async for chunk in chunks:
        buffer += decoder.decode(chunk)
        *lines, buffer = buffer.split("\n")
        for line in lines:
            delta = _parse_line(line)
            if delta is not None:
                yield delta

    buffer += decoder.decode(b"", final=True)
    if buffer:
        delta = _parse_line(buffer)
        if delta is not None:
            yield delta
