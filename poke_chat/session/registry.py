"""Explicit registry of live chat sessions with bounded lifetime."""

from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional

from .chat_session import ChatSession


class SessionLimitError(RuntimeError):
    """Raised when no more sessions can be created."""


class SessionRegistry:
    """Creates, looks up and destroys sessions; idle sessions expire after ``ttl`` seconds."""

    def __init__(
        self,
        factory: Callable[[Optional[str]], ChatSession],
        *,
        max_sessions: int = 100,
        ttl: float = 3600.0,
        clock: Callable[[], float] = time.time,
        debug_logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._factory = factory
        self.max_sessions = max_sessions
        self.ttl = ttl
        self._clock = clock
        self._sessions: Dict[str, ChatSession] = {}
        self._debug_logger = debug_logger

    def _debug(self, message: str) -> None:
        if self._debug_logger:
            self._debug_logger(message)

    def create(self, session_id: Optional[str] = None) -> ChatSession:
        if session_id is not None and session_id in self._sessions:
            raise ValueError(f"Session {session_id} already exists")
        self.prune()
        if len(self._sessions) >= self.max_sessions:
            raise SessionLimitError(f"Session limit reached ({self.max_sessions})")
        session = self._factory(session_id)
        self._sessions[session.id] = session
        self._debug(f"Created session {session.id}")
        return session

    def get(self, session_id: str) -> ChatSession:
        session = self._sessions.get(session_id)
        if session is None or self._expired(session):
            if session is not None:
                self.destroy(session_id)
            raise KeyError(session_id)
        session.touch()
        return session

    def get_or_create(self, session_id: str) -> ChatSession:
        try:
            return self.get(session_id)
        except KeyError:
            return self.create(session_id)

    def destroy(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        self._debug(f"Destroyed session {session_id}")
        return True

    def prune(self) -> int:
        """Destroy every session idle for longer than ``ttl``."""

        expired: List[str] = [sid for sid, s in self._sessions.items() if self._expired(s)]
        for session_id in expired:
            self.destroy(session_id)
        return len(expired)

    def _expired(self, session: ChatSession) -> bool:
        return self._clock() - session.last_active > self.ttl

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
