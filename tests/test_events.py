"""Tests for frame payload interpretation."""

from __future__ import annotations

import json

from poke_chat.models import ActionType, Done, TextDelta, ThinkingChange, ToolUse
from poke_chat.streaming.events import interpret_frame, interpret_line, interpret_payload


def _data(payload) -> str:
    return f"data: {json.dumps(payload)}"


def test_done_sentinel() -> None:
    assert interpret_line("data: [DONE]") == [Done()]
    assert interpret_line("data:[DONE]") == [Done()]


def test_text_payload() -> None:
    assert interpret_line(_data({"text": "hi"})) == [TextDelta(text="hi")]
    assert interpret_line(_data({"text": ""})) == []


def test_thinking_transitions() -> None:
    assert interpret_payload({"thinking": True, "text": "hmm"}) == [ThinkingChange(thinking=True, text="hmm")]
    assert interpret_payload({"thinking": False}) == [ThinkingChange(thinking=False)]


def test_thinking_end_with_text_emits_both_events() -> None:
    events = interpret_payload({"thinking": False, "text": "Answer"})

    assert events == [ThinkingChange(thinking=False), TextDelta(text="Answer")]


def test_modify_team_tool_use() -> None:
    events = interpret_payload(
        {
            "tool_use": {
                "id": "toolu_1",
                "name": "modify_team",
                "input": {"action_type": "add_pokemon", "slot": 4, "pokemon": "Great Tusk", "reason": "Ground"},
            }
        }
    )

    assert len(events) == 1
    event = events[0]
    assert isinstance(event, ToolUse)
    assert event.tool_id == "toolu_1"
    assert event.call.action_type is ActionType.ADD
    assert event.call.slot == 4
    assert event.call.update.pokemon == "Great Tusk"
    assert event.call.reason == "Ground"


def test_unknown_tool_and_bad_input_are_dropped() -> None:
    assert interpret_payload({"tool_use": {"name": "other_tool", "input": {}}}) == []
    assert interpret_payload({"tool_use": {"name": "modify_team", "input": {"action_type": "swap"}}}) == []
    assert interpret_payload({"tool_use": "nope"}) == []


def test_non_data_lines_and_malformed_json_are_ignored() -> None:
    frame = "event: message\n: keep-alive\ndata: {not json\n" + _data({"text": "ok"})

    assert interpret_frame(frame) == [TextDelta(text="ok")]
    assert interpret_line(_data([1, 2])) == []
    assert interpret_line(_data({"other": 1})) == []
