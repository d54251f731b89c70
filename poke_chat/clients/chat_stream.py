"""Async HTTP transport for the streaming chat endpoint."""

from __future__ import annotations

import json
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from ..config import ChatSettings, load_settings
from ..models import TEAM_SIZE, PokemonSet, Team

MAX_HISTORY_MESSAGES = 10


class ChatStreamError(RuntimeError):
    """Raised when the chat endpoint refuses the request or the connection fails."""


def member_to_wire(member: PokemonSet) -> Dict[str, Any]:
    """Serialize a member the way the chat endpoints expect (camelCase teraType)."""

    data = member.to_dict()
    if "tera_type" in data:
        data["teraType"] = data.pop("tera_type")
    return data


def team_to_wire(team: Team) -> List[Optional[Dict[str, Any]]]:
    """All six slots in order, with ``None`` for empty ones so slot numbers survive the trip."""

    return [member_to_wire(member) if member is not None else None for member in team.slots]


def team_from_wire(members: List[Optional[Dict[str, Any]]], format_id: str) -> Team:
    if len(members) > TEAM_SIZE:
        raise ValueError(f"Team cannot have more than {TEAM_SIZE} slots")
    return Team(
        format=format_id,
        slots=[PokemonSet.from_dict(member) if member else None for member in members],
    )


def build_chat_body(
    message: str,
    team: Team,
    *,
    mode: str = "singles",
    chat_history: Optional[List[Dict[str, str]]] = None,
    personality: Optional[str] = None,
    enable_thinking: bool = False,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "message": message,
        "team": team_to_wire(team),
        "format": team.format,
        "mode": mode,
        "enableThinking": enable_thinking,
        "chatHistory": list(chat_history or [])[-MAX_HISTORY_MESSAGES:],
    }
    if personality:
        body["personality"] = personality
    return body


def error_message(text: str, status_code: int) -> str:
    try:
        payload = json.loads(text)
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return text or f"AI request failed: {status_code}"


class ChatStreamClient:
    """Posts a chat turn and yields the raw response body chunks as they arrive."""

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[ChatSettings] = None,
        user_agent: str = "poke-chat/0.1",
    ) -> None:
        self.settings = settings or load_settings()
        self.url = url or self.settings.stream_url
        self.user_agent = user_agent
        self._client = client

    async def stream_chat(
        self,
        message: str,
        team: Team,
        *,
        chat_history: Optional[List[Dict[str, str]]] = None,
        personality: Optional[str] = None,
        enable_thinking: bool = False,
    ) -> AsyncIterator[bytes]:
        body = build_chat_body(
            message,
            team,
            mode=self.settings.mode,
            chat_history=chat_history,
            personality=personality,
            enable_thinking=enable_thinking,
        )
        client = self._client or httpx.AsyncClient(timeout=self.settings.timeout)
        try:
            async with client.stream(
                "POST",
                self.url,
                json=body,
                headers={"User-Agent": self.user_agent, "Accept": "text/event-stream"},
            ) as response:
                if response.status_code >= 400:
                    text = (await response.aread()).decode("utf-8", errors="replace")
                    raise ChatStreamError(error_message(text, response.status_code))
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.HTTPError as exc:
            raise ChatStreamError(str(exc)) from exc
        finally:
            if self._client is None:
                await client.aclose()
