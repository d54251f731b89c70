"""Blocking client for non-streaming chat providers that embed [ACTION] blocks."""

from __future__ import annotations

import json
import re
from typing import Callable, Dict, List, Optional

import requests

from ..actions import ActionSynthesizer
from ..config import ChatSettings, load_settings
from ..models import StreamResult, Team, ToolCall
from .chat_stream import ChatStreamError, build_chat_body, error_message

ACTION_BLOCK_RE = re.compile(r"\[ACTION\]([\s\S]*?)\[/ACTION\]")


def extract_action_block(content: str) -> Optional[ToolCall]:
    """Parse the first ``[ACTION]{json}[/ACTION]`` block, if any."""

    match = ACTION_BLOCK_RE.search(content)
    if not match:
        return None
    try:
        return ToolCall.from_action_block(json.loads(match.group(1).strip()))
    except ValueError:
        return None


def clean_response_content(content: str) -> str:
    return ACTION_BLOCK_RE.sub("", content).strip()


class ChatClient:
    """Sends one chat turn and synthesizes any embedded action."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        settings: Optional[ChatSettings] = None,
        synthesizer: Optional[ActionSynthesizer] = None,
        user_agent: str = "poke-chat/0.1",
        debug_logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.base_url = (base_url or self.settings.api_url).rstrip("/")
        self.session = session or requests.Session()
        self.synthesizer = synthesizer or ActionSynthesizer()
        self.user_agent = user_agent
        self._debug_logger = debug_logger

    def _debug(self, message: str) -> None:
        if self._debug_logger:
            self._debug_logger(message)

    def send_message(
        self,
        message: str,
        team: Team,
        *,
        provider: str = "cloudflare",
        chat_history: Optional[List[Dict[str, str]]] = None,
    ) -> StreamResult:
        body = build_chat_body(message, team, mode=self.settings.mode, chat_history=chat_history)
        url = f"{self.base_url}/{provider}"
        try:
            response = self.session.post(
                url,
                json=body,
                timeout=self.settings.timeout,
                headers={"User-Agent": self.user_agent},
            )
        except requests.RequestException as exc:
            raise ChatStreamError(str(exc)) from exc
        if not response.ok:
            raise ChatStreamError(error_message(response.text, response.status_code))

        data = response.json()
        raw_content = data.get("content") or data.get("message") or ""
        call = extract_action_block(raw_content)
        self._debug(f"{provider} replied with {len(raw_content)} chars; action block: {bool(call)}")
        actions = self.synthesizer.synthesize([call] if call else [], team)
        return StreamResult(content=clean_response_content(raw_content), actions=actions)
