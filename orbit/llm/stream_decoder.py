"""
Decodes a newline-delimited ``data:`` stream into ``StreamChunk`` objects.

Design goals:
  - Keep a single byte buffer.  Fragments are appended and only *complete*
    lines are consumed; a trailing partial line waits for the next fragment,
    so a record split across network reads still decodes whole.
  - Buffer bytes rather than text so a multi-byte UTF-8 character split
    across fragments is never mangled.
  - ``data: [DONE]`` ends the stream.  Anything after it is ignored.
  - A ``data:`` record whose payload is not valid JSON is *skipped*.  The
    count is kept in ``skipped`` so callers can inspect it.
"""

from __future__ import annotations

import json
import logging
from typing import AsyncIterable, AsyncIterator

from orbit.llm.types import StreamChunk

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


def extract_delta(payload: object) -> str:
    """Pull the text delta out of a parsed record, or ``""``."""
    if not isinstance(payload, dict):
        return ""

    choices = payload.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        delta = choices[0].get("delta")
        if isinstance(delta, dict):
            content = delta.get("content")
            return content if isinstance(content, str) else ""
        return ""

    delta = payload.get("delta")
    return delta if isinstance(delta, str) else ""


class StreamDecoder:
    """Buffers raw fragments and emits ``StreamChunk`` objects."""

    def __init__(self) -> None:
        self._buf = b""
        self._done = False
        self.skipped = 0

    @property
    def done(self) -> bool:
        return self._done

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def feed(self, fragment: bytes | str) -> list[StreamChunk]:
        """
        Feed one raw fragment.

        Returns the chunks completed by this fragment.  Once the terminal
        sentinel has been seen, further input is ignored.
        """
        if self._done:
            return []
        if isinstance(fragment, str):
            fragment = fragment.encode("utf-8")
        self._buf += fragment

        chunks: list[StreamChunk] = []
        while not self._done and b"\n" in self._buf:
            raw, self._buf = self._buf.split(b"\n", 1)
            chunk = self._decode_line(raw)
            if chunk is not None:
                chunks.append(chunk)
        return chunks

    def finish(self) -> list[StreamChunk]:
        """
        Flush at end of input: decode any unterminated last line and emit the
        terminal chunk if the sentinel never arrived.
        """
        if self._done:
            return []
        chunks: list[StreamChunk] = []
        if self._buf:
            raw, self._buf = self._buf, b""
            chunk = self._decode_line(raw)
            if chunk is not None:
                chunks.append(chunk)
        if not self._done:
            self._done = True
            chunks.append(StreamChunk(done=True))
        return chunks

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _decode_line(self, raw: bytes) -> StreamChunk | None:
        line = raw.decode("utf-8", errors="replace").rstrip("\r")

        # Blank lines, ":" comments and other fields are keep-alives.
        if not line.startswith(DATA_PREFIX):
            return None

        data_str = line[len(DATA_PREFIX):].strip()
        if data_str == DONE_SENTINEL:
            self._done = True
            return StreamChunk(done=True)

        try:
            payload = json.loads(data_str)
        except (json.JSONDecodeError, ValueError):
            self.skipped += 1
            logger.debug("Skipping malformed stream record: %s", data_str[:200])
            return None

        text = extract_delta(payload)
        if not text:
            return None
        return StreamChunk(delta=text)


async def decode_stream(
    fragments: AsyncIterable[bytes | str],
) -> AsyncIterator[StreamChunk]:
    """Decode an async byte stream; the last chunk always has ``done=True``."""
    decoder = StreamDecoder()
    async for fragment in fragments:
        for chunk in decoder.feed(fragment):
            yield chunk
        if decoder.done:
            return
    for chunk in decoder.finish():
        yield chunk
