"""Decode frame payloads into tagged stream events."""

from __future__ import annotations

import json
from typing import Any, List, Optional

from ..models import Done, StreamEvent, TextDelta, ThinkingChange, ToolCall, ToolUse

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
TEAM_TOOL_NAME = "modify_team"


def interpret_frame(frame: str) -> List[StreamEvent]:
    """Map every data line of one frame to events, dropping the rest."""

    events: List[StreamEvent] = []
    for line in frame.split("\n"):
        events.extend(interpret_line(line))
    return events


def interpret_line(line: str) -> List[StreamEvent]:
    if not line.startswith(DATA_PREFIX):
        return []
    data = line[len(DATA_PREFIX):]
    if data.startswith(" "):
        data = data[1:]
    if data.strip() == DONE_SENTINEL:
        return [Done()]
    try:
        payload = json.loads(data)
    except ValueError:
        return []
    return interpret_payload(payload)


def interpret_payload(payload: Any) -> List[StreamEvent]:
    if not isinstance(payload, dict):
        return []

    if "tool_use" in payload:
        tool_use = _tool_use(payload["tool_use"])
        return [tool_use] if tool_use else []

    text = payload.get("text")
    if not isinstance(text, str):
        text = ""

    thinking = payload.get("thinking")
    if thinking is True:
        return [ThinkingChange(thinking=True, text=text)]
    if thinking is False:
        # a closing thinking flag may still carry visible text
        events: List[StreamEvent] = [ThinkingChange(thinking=False)]
        if text:
            events.append(TextDelta(text=text))
        return events

    return [TextDelta(text=text)] if text else []


def _tool_use(block: Any) -> Optional[ToolUse]:
    if not isinstance(block, dict) or block.get("name") != TEAM_TOOL_NAME:
        return None
    try:
        call = ToolCall.from_input(block.get("input") or {})
    except ValueError:
        return None
    tool_id = block.get("id")
    return ToolUse(call=call, tool_id=str(tool_id) if tool_id else None)
