"""Tests for the streaming action pipeline."""

from __future__ import annotations

import asyncio
import json

import pytest

from poke_chat.models import (
    PokemonSet,
    StreamCompleted,
    Team,
    TextUpdate,
    ThinkingUpdate,
    ToolCallSeen,
)
from poke_chat.streaming import ActionPipeline, consume_stream


def _sse(payload) -> str:
    return f"data: {json.dumps(payload)}\n\n"


GREAT_TUSK_STREAM = (
    _sse({"text": "Let's improve "})
    + _sse({"text": "your team"})
    + _sse(
        {
            "tool_use": {
                "id": "toolu_1",
                "name": "modify_team",
                "input": {
                    "action_type": "add_pokemon",
                    "slot": 4,
                    "pokemon": "Great Tusk",
                    "moves": ["Headlong Rush", "Ice Spinner", "Knock Off", "Rapid Spin"],
                    "reason": "Adds a Ground type",
                },
            }
        }
    )
    + "data: [DONE]\n\n"
)


def _four_member_team() -> Team:
    return Team(slots=[PokemonSet(pokemon=name) for name in ("Garchomp", "Gholdengo", "Dragapult", "Kingambit")])


async def _collect(pipeline, chunks, team, **kwargs):
    return [event async for event in pipeline.events(chunks, team, **kwargs)]


def test_text_and_tool_use_produce_final_action() -> None:
    events = asyncio.run(_collect(ActionPipeline(), [GREAT_TUSK_STREAM.encode()], _four_member_team()))

    texts = [event.content for event in events if isinstance(event, TextUpdate)]
    assert texts == ["Let's improve ", "Let's improve your team"]

    seen = [event for event in events if isinstance(event, ToolCallSeen)]
    assert [(event.pokemon, event.index) for event in seen] == [("Great Tusk", 0)]

    completed = events[-1]
    assert isinstance(completed, StreamCompleted)
    result = completed.result
    assert result.content == "Let's improve your team"
    action = result.action
    assert action.slot == 4
    assert action.is_valid
    assert action.preview[4].pokemon == "Great Tusk"


def test_result_is_independent_of_chunking() -> None:
    encoded = GREAT_TUSK_STREAM.encode()
    whole = asyncio.run(_collect(ActionPipeline(), [encoded], _four_member_team()))[-1].result

    for size in (1, 3, 7, 64):
        chunks = [encoded[i : i + size] for i in range(0, len(encoded), size)]
        result = asyncio.run(_collect(ActionPipeline(), chunks, _four_member_team()))[-1].result
        assert result.content == whole.content
        assert [a.to_dict() for a in result.actions] == [a.to_dict() for a in whole.actions]


def test_stream_without_done_is_finalized() -> None:
    stream = _sse({"text": "partial"}) + 'data: {"text": " end"}'

    events = asyncio.run(_collect(ActionPipeline(), [stream], Team()))

    assert isinstance(events[-1], StreamCompleted)
    assert events[-1].result.content == "partial end"
    assert events[-1].result.actions == []


def test_frames_after_done_are_ignored() -> None:
    stream = _sse({"text": "a"}) + "data: [DONE]\n\n" + _sse({"text": "b"})

    events = asyncio.run(_collect(ActionPipeline(), [stream], Team()))

    assert events[-1].result.content == "a"


def test_thinking_is_accumulated_separately() -> None:
    stream = (
        _sse({"thinking": True, "text": ""})
        + _sse({"thinking": True, "text": "Ground "})
        + _sse({"thinking": True, "text": "weakness"})
        + _sse({"thinking": False})
        + _sse({"text": "Answer"})
    )

    events = asyncio.run(_collect(ActionPipeline(), [stream], Team()))

    updates = [event for event in events if isinstance(event, ThinkingUpdate)]
    assert updates[-1].is_thinking is False
    assert updates[-2].thinking == "Ground weakness"
    result = events[-1].result
    assert result.thinking == "Ground weakness"
    assert result.content == "Answer"


def test_team_callable_is_read_at_finalization() -> None:
    state = {"team": Team()}

    async def chunks():
        yield _sse({"tool_use": {"name": "modify_team", "input": {"action_type": "add_pokemon", "pokemon": "Great Tusk"}}})
        state["team"] = Team(slots=[PokemonSet(pokemon="Garchomp")])
        yield "data: [DONE]\n\n"

    events = asyncio.run(_collect(ActionPipeline(), chunks(), lambda: state["team"]))

    assert events[-1].result.action.slot == 1


def test_transport_error_propagates() -> None:
    async def failing():
        yield _sse({"text": "a"})
        raise RuntimeError("connection reset")

    with pytest.raises(RuntimeError, match="connection reset"):
        asyncio.run(_collect(ActionPipeline(), failing(), Team()))


def test_cancellation_stops_without_result() -> None:
    cancel = asyncio.Event()

    async def chunks():
        yield _sse({"text": "a"})
        cancel.set()
        yield _sse({"text": "b"})
        yield "data: [DONE]\n\n"

    events = asyncio.run(_collect(ActionPipeline(), chunks(), Team(), cancel=cancel))

    assert not any(isinstance(event, StreamCompleted) for event in events)
    assert [event.content for event in events if isinstance(event, TextUpdate)] == ["a"]


def test_consume_stream_invokes_callbacks() -> None:
    chunks_seen: list[str] = []
    tools_seen: list[tuple[str, int]] = []
    completed = []

    result = asyncio.run(
        consume_stream(
            ActionPipeline(),
            [GREAT_TUSK_STREAM],
            _four_member_team(),
            on_chunk=chunks_seen.append,
            on_tool_use=lambda pokemon, index: tools_seen.append((pokemon, index)),
            on_complete=completed.append,
        )
    )

    assert chunks_seen[-1] == "Let's improve your team"
    assert tools_seen == [("Great Tusk", 0)]
    assert completed == [result]


def test_consume_stream_routes_errors_to_callback() -> None:
    errors = []

    async def failing():
        raise RuntimeError("boom")
        yield b""  # pragma: no cover

    result = asyncio.run(consume_stream(ActionPipeline(), failing(), Team(), on_error=errors.append))

    assert result is None
    assert [str(err) for err in errors] == ["boom"]
