"""Translate Anthropic Messages streaming events into the simplified chat wire format.

The chat client only understands four payloads: ``{"text"}``,
``{"thinking", "text"?}``, ``{"tool_use"}`` and the ``[DONE]`` sentinel.
This relay sits on the server side, reads the upstream event stream with
the same frame reader the client uses, and re-emits those payloads.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from ..streaming.frames import ChunkSource, StreamFrameReader, iterate_chunks

DONE_LINE = "data: [DONE]\n\n"


def sse_line(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


@dataclass(slots=True)
class UsageLog:
    format: str = ""
    personality: str = ""
    mode: str = ""
    team_size: int = 0
    thinking_enabled: bool = False
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0


class AnthropicStreamRelay:
    def __init__(
        self,
        *,
        usage: Optional[UsageLog] = None,
        debug_logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.usage = usage or UsageLog()
        self._reader = StreamFrameReader()
        self._debug_logger = debug_logger
        self._is_thinking = False
        self._is_tool_use = False
        self._tool_name = ""
        self._tool_id = ""
        self._tool_input = ""
        self._done_sent = False

    def _debug(self, message: str) -> None:
        if self._debug_logger:
            self._debug_logger(message)

    def feed(self, chunk) -> List[str]:
        lines: List[str] = []
        for frame in self._reader.feed(chunk):
            lines.extend(self._translate_frame(frame))
        return lines

    def flush(self) -> List[str]:
        lines: List[str] = []
        for frame in self._reader.flush():
            lines.extend(self._translate_frame(frame))
        lines.extend(self._done())
        return lines

    def _done(self) -> List[str]:
        if self._done_sent:
            return []
        self._done_sent = True
        return [DONE_LINE]

    def _translate_frame(self, frame: str) -> List[str]:
        lines: List[str] = []
        for raw in frame.split("\n"):
            if not raw.startswith("data:"):
                continue
            data = raw[len("data:"):].strip()
            if data == "[DONE]":
                lines.extend(self._done())
                continue
            try:
                event = json.loads(data)
            except ValueError:
                continue
            if isinstance(event, dict):
                lines.extend(self._translate_event(event))
        return lines

    def _translate_event(self, event: Dict[str, Any]) -> List[str]:
        event_type = event.get("type")

        if event_type == "message_start":
            usage = (event.get("message") or {}).get("usage") or {}
            self.usage.input_tokens = usage.get("input_tokens") or 0
            self.usage.cache_creation_input_tokens = usage.get("cache_creation_input_tokens") or 0
            self.usage.cache_read_input_tokens = usage.get("cache_read_input_tokens") or 0
            return []

        if event_type == "message_delta":
            usage = event.get("usage") or {}
            self.usage.output_tokens = usage.get("output_tokens") or 0
            return []

        if event_type == "content_block_start":
            block = event.get("content_block") or {}
            if block.get("type") == "thinking":
                self._is_thinking = True
                return [sse_line({"thinking": True, "text": ""})]
            if block.get("type") == "tool_use":
                self._is_tool_use = True
                self._tool_name = block.get("name") or ""
                self._tool_id = block.get("id") or ""
                self._tool_input = ""
            return []

        if event_type == "content_block_delta":
            delta = event.get("delta") or {}
            if delta.get("thinking"):
                return [sse_line({"thinking": True, "text": delta["thinking"]})]
            if delta.get("text"):
                return [sse_line({"text": delta["text"]})]
            if delta.get("partial_json") and self._is_tool_use:
                self._tool_input += delta["partial_json"]
            return []

        if event_type == "content_block_stop":
            if self._is_thinking:
                self._is_thinking = False
                return [sse_line({"thinking": False})]
            if self._is_tool_use:
                return self._finish_tool_use()
            return []

        if event_type == "message_stop":
            self._debug("ai_usage " + json.dumps({"type": "ai_usage", **asdict(self.usage)}))
            return self._done()

        if event_type == "error":
            self._debug(f"Upstream error event: {event.get('error')}")
        return []

    def _finish_tool_use(self) -> List[str]:
        raw_input, name, tool_id = self._tool_input, self._tool_name, self._tool_id
        self._is_tool_use = False
        self._tool_name = self._tool_id = self._tool_input = ""
        try:
            tool_input = json.loads(raw_input) if raw_input else {}
        except ValueError:
            self._debug(f"Failed to parse tool input for {name}: {raw_input[:200]}")
            return []
        return [sse_line({"tool_use": {"id": tool_id, "name": name, "input": tool_input}})]


async def relay_stream(
    upstream: ChunkSource,
    relay: Optional[AnthropicStreamRelay] = None,
) -> AsyncIterator[str]:
    """Yield simplified SSE lines for an upstream Anthropic byte stream."""

    relay = relay or AnthropicStreamRelay()
    async for chunk in iterate_chunks(upstream):
        for line in relay.feed(chunk):
            yield line
    for line in relay.flush():
        yield line
