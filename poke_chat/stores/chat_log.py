"""Chat transcript kept alongside a session."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..models import Action

ROLES = ("user", "assistant", "system")


@dataclass(slots=True)
class ChatMessage:
    role: str
    content: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    action: Optional[Action] = None


class ChatLog:
    def __init__(self) -> None:
        self._messages: List[ChatMessage] = []

    def append(self, role: str, content: str, action: Optional[Action] = None) -> ChatMessage:
        if role not in ROLES:
            raise ValueError(f"Unknown chat role: {role}")
        message = ChatMessage(role=role, content=content, action=action)
        self._messages.append(message)
        return message

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    def recent(self, limit: int = 10, *, roles: tuple[str, ...] = ("user", "assistant")) -> List[Dict[str, str]]:
        """Most recent messages in the ``{role, content}`` shape sent upstream."""

        selected = [m for m in self._messages if m.role in roles]
        return [{"role": m.role, "content": m.content} for m in selected[-limit:]] if limit > 0 else []

    def clear(self) -> None:
        self._messages = []
