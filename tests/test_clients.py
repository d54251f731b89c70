"""Tests for the streaming and blocking chat clients."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest
import requests

from poke_chat.clients import (
    ChatClient,
    ChatStreamClient,
    ChatStreamError,
    build_chat_body,
    clean_response_content,
    extract_action_block,
    team_from_wire,
)
from poke_chat.config import load_settings
from poke_chat.models import ActionType, PokemonSet, Team


def _team() -> Team:
    return Team(slots=[PokemonSet(pokemon="Garchomp", tera_type="Steel")])


def test_build_chat_body_uses_wire_names_and_caps_history() -> None:
    history = [{"role": "user", "content": str(i)} for i in range(15)]

    body = build_chat_body("hi", _team(), chat_history=history, personality="coach")

    assert body["team"] == [{"pokemon": "Garchomp", "moves": [], "teraType": "Steel"}, None, None, None, None, None]
    assert body["format"] == "gen9ou"
    assert len(body["chatHistory"]) == 10
    assert body["chatHistory"][0]["content"] == "5"
    assert body["personality"] == "coach"
    assert body["enableThinking"] is False


def test_chat_body_keeps_slot_positions_around_holes() -> None:
    team = Team(slots=[None, PokemonSet(pokemon="Garchomp"), PokemonSet(pokemon="Gholdengo")])

    body = build_chat_body("hi", team)

    assert [member and member["pokemon"] for member in body["team"]] == [None, "Garchomp", "Gholdengo", None, None, None]
    rebuilt = team_from_wire(body["team"], body["format"])
    assert rebuilt[0] is None
    assert rebuilt[1].pokemon == "Garchomp"
    assert rebuilt[2].pokemon == "Gholdengo"


def test_team_from_wire_rejects_more_than_six_slots() -> None:
    with pytest.raises(ValueError):
        team_from_wire([{"pokemon": f"Mon{i}"} for i in range(7)], "gen9ou")


def _stream_client(handler) -> ChatStreamClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ChatStreamClient(url="http://chat.test/stream", client=client, settings=load_settings())


async def _drain(client: ChatStreamClient) -> bytes:
    return b"".join([chunk async for chunk in client.stream_chat("hi", _team())])


def test_stream_client_yields_response_body() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, content=b'data: {"text": "ok"}\n\ndata: [DONE]\n\n')

    body = asyncio.run(_drain(_stream_client(handler)))

    assert body == b'data: {"text": "ok"}\n\ndata: [DONE]\n\n'
    assert seen["body"]["message"] == "hi"


def test_stream_client_surfaces_error_field() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "Claude API key not configured"})

    with pytest.raises(ChatStreamError, match="Claude API key not configured"):
        asyncio.run(_drain(_stream_client(handler)))


def test_stream_client_wraps_connection_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ChatStreamError):
        asyncio.run(_drain(_stream_client(handler)))


ACTION_REPLY = (
    "Swap in a scarf.\n"
    '[ACTION]{"type": "update_item", "slot": 0, "payload": {"item": "Choice Scarf"}, "reason": "Speed"}[/ACTION]'
)


def test_extract_action_block_maps_legacy_types() -> None:
    call = extract_action_block(ACTION_REPLY)

    assert call.action_type is ActionType.UPDATE
    assert call.slot == 0
    assert call.update.item == "Choice Scarf"
    assert clean_response_content(ACTION_REPLY) == "Swap in a scarf."
    assert extract_action_block("[ACTION]{broken[/ACTION]") is None
    assert extract_action_block("no action") is None


class FakeResponse:
    def __init__(self, status_code: int, payload) -> None:
        self.status_code = status_code
        self._payload = payload
        self.ok = status_code < 400
        self.text = json.dumps(payload)

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json=None, timeout=None, headers=None):
        self.calls.append({"url": url, "json": json})
        if self.error:
            raise self.error
        return self.response


def test_chat_client_synthesizes_embedded_action() -> None:
    session = FakeSession(FakeResponse(200, {"content": ACTION_REPLY}))
    client = ChatClient(base_url="http://chat.test/api/ai/", session=session)

    result = client.send_message("faster?", _team(), provider="gemini")

    assert session.calls[0]["url"] == "http://chat.test/api/ai/gemini"
    assert result.content == "Swap in a scarf."
    assert result.action.preview[0].item == "Choice Scarf"
    assert result.action.is_valid


def test_chat_client_errors() -> None:
    failing = ChatClient(base_url="http://chat.test", session=FakeSession(FakeResponse(500, {"error": "down"})))
    with pytest.raises(ChatStreamError, match="down"):
        failing.send_message("hi", _team())

    offline = ChatClient(base_url="http://chat.test", session=FakeSession(error=requests.ConnectionError("no route")))
    with pytest.raises(ChatStreamError, match="no route"):
        offline.send_message("hi", _team())
