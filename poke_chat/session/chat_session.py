"""One user's chat: team, transcript, history and the pending-action queue."""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import AsyncIterator, Callable, Dict, List, Optional, Protocol

from ..actions import ActionSynthesizer
from ..clients.chat_api import ChatClient
from ..clients.chat_stream import ChatStreamError
from ..models import Action, StreamResult, Team
from ..stores import ChatLog, HistoryStore, TeamStore
from ..streaming import ActionPipeline, consume_stream
from ..validation import Validator
from .transaction import TransactionController


class ChatTransport(Protocol):
    def stream_chat(
        self,
        message: str,
        team: Team,
        *,
        chat_history: Optional[List[Dict[str, str]]] = None,
    ) -> AsyncIterator[bytes]: ...


class ChatSession:
    def __init__(
        self,
        transport: ChatTransport,
        *,
        session_id: Optional[str] = None,
        team: Optional[Team] = None,
        validator: Optional[Validator] = None,
        history_limit: int = 10,
        clock: Callable[[], float] = time.time,
        debug_logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.id = session_id or str(uuid.uuid4())
        self.transport = transport
        self.history_limit = history_limit
        self.team_store = TeamStore(team)
        self.history = HistoryStore()
        self.chat_log = ChatLog()
        synthesizer = ActionSynthesizer(validator, debug_logger=debug_logger)
        self.pipeline = ActionPipeline(synthesizer, debug_logger=debug_logger)
        self.controller = TransactionController(
            self.team_store,
            self.history,
            self.chat_log,
            synthesizer=synthesizer,
            debug_logger=debug_logger,
        )
        self._clock = clock
        self.last_active = clock()
        self._cancel: Optional[asyncio.Event] = None

    def touch(self) -> None:
        self.last_active = self._clock()

    @property
    def team(self) -> Team:
        return self.team_store.get()

    @property
    def pending(self) -> Optional[Action]:
        return self.controller.pending

    def import_team(self, team: Team, label: str = "Imported team") -> None:
        self.team_store.replace(team)
        self.history.push_state(team, label, "import")
        self.controller.rebase_pending()

    async def send(
        self,
        prompt: str,
        *,
        on_chunk: Optional[Callable[[str], None]] = None,
        on_thinking: Optional[Callable[[bool, str], None]] = None,
        on_tool_use: Optional[Callable[[str, int], None]] = None,
    ) -> Optional[StreamResult]:
        """Stream one reply; returns None when a newer send superseded this one."""

        self.cancel()
        cancel = asyncio.Event()
        self._cancel = cancel
        chat_history = self._begin_turn(prompt)
        chunks = self.transport.stream_chat(prompt, self.team_store.get(), chat_history=chat_history)
        try:
            result = await consume_stream(
                self.pipeline,
                chunks,
                self.team_store.get,
                on_chunk=on_chunk,
                on_thinking=on_thinking,
                on_tool_use=on_tool_use,
                cancel=cancel,
            )
        except ChatStreamError as exc:
            self.chat_log.append("assistant", f"Error: {exc}")
            raise
        finally:
            if self._cancel is cancel:
                self._cancel = None

        if result is None or cancel.is_set():
            return None
        self._finish_turn(result)
        return result

    def ask(self, prompt: str, client: ChatClient, *, provider: str = "cloudflare") -> StreamResult:
        """One blocking turn through a non-streaming provider endpoint."""

        self.cancel()
        chat_history = self._begin_turn(prompt)
        try:
            result = client.send_message(prompt, self.team_store.get(), provider=provider, chat_history=chat_history)
        except ChatStreamError as exc:
            self.chat_log.append("assistant", f"Error: {exc}")
            raise
        self._finish_turn(result)
        return result

    def _begin_turn(self, prompt: str) -> List[Dict[str, str]]:
        self.touch()
        chat_history = self.chat_log.recent(self.history_limit)
        self.chat_log.append("user", prompt)
        self.controller.remember_prompt(prompt)
        return chat_history

    def _finish_turn(self, result: StreamResult) -> None:
        self.chat_log.append("assistant", result.content, action=result.action)
        self.controller.load(result.actions)

    def apply(self) -> Action:
        self.touch()
        return self.controller.apply()

    def dismiss(self) -> Action:
        self.touch()
        return self.controller.dismiss()

    async def retry(self, **callbacks) -> Optional[StreamResult]:
        prompt = self.controller.retry()
        return await self.send(prompt, **callbacks)

    def cancel(self) -> None:
        """Stop delivering results from any in-flight response."""

        if self._cancel is not None:
            self._cancel.set()
            self._cancel = None

    def close(self) -> None:
        self.cancel()
