"""Reassembly of server-sent-event frames from arbitrarily chunked input."""

from __future__ import annotations

import codecs
import inspect
from typing import AsyncIterable, AsyncIterator, Iterable, List, Union

Chunk = Union[bytes, bytearray, str]
ChunkSource = Union[AsyncIterable[Chunk], Iterable[Chunk]]

FRAME_SEPARATOR = "\n\n"


class StreamFrameReader:
    """Buffers partial reads and emits only complete, blank-line separated frames."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, chunk: Chunk) -> List[str]:
        if isinstance(chunk, (bytes, bytearray)):
            chunk = self._decoder.decode(bytes(chunk))
        self._buffer = (self._buffer + chunk).replace("\r\n", "\n")
        *frames, self._buffer = self._buffer.split(FRAME_SEPARATOR)
        return [frame for frame in frames if frame.strip()]

    def flush(self) -> List[str]:
        """Return whatever is left once the input is exhausted."""

        remainder = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        remainder = remainder.replace("\r\n", "\n")
        return [frame for frame in remainder.split(FRAME_SEPARATOR) if frame.strip()]

    @property
    def pending(self) -> str:
        return self._buffer


async def iterate_chunks(source: ChunkSource) -> AsyncIterator[Chunk]:
    """Iterate sync or async chunk sources with the same ``async for``."""

    if hasattr(source, "__aiter__"):
        async for chunk in source:  # type: ignore[union-attr]
            yield chunk
    else:
        for chunk in source:  # type: ignore[union-attr]
            yield chunk


async def read_frames(source: ChunkSource) -> AsyncIterator[str]:
    """Drive a StreamFrameReader over ``source``, flushing once at the end."""

    reader = StreamFrameReader()
    try:
        async for chunk in iterate_chunks(source):
            for frame in reader.feed(chunk):
                yield frame
        for frame in reader.flush():
            yield frame
    finally:
        await close_source(source)


async def close_source(source: ChunkSource) -> None:
    closer = getattr(source, "aclose", None) or getattr(source, "close", None)
    if closer is None:
        return
    result = closer()
    if inspect.isawaitable(result):
        await result
