"""Environment-driven settings for the chat clients and servers."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Optional

from dotenv import load_dotenv

# Load default .env first, then overlay .env.local so user-specific keys win.
load_dotenv()
load_dotenv(".env.local", override=True)


@dataclass(slots=True, frozen=True)
class ChatSettings:
    stream_url: str = "http://127.0.0.1:8000/api/ai/claude/stream"
    api_url: str = "http://127.0.0.1:8000/api/ai"
    format: str = "gen9ou"
    mode: str = "singles"
    timeout: float = 60.0
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    anthropic_url: str = "https://api.anthropic.com/v1/messages"
    max_sessions: int = 100
    session_ttl: float = 3600.0
    history_limit: int = 10


def load_settings(**overrides: Any) -> ChatSettings:
    """Build settings from the environment; keyword overrides win."""

    defaults = ChatSettings()
    settings = ChatSettings(
        stream_url=os.getenv("POKE_CHAT_STREAM_URL", defaults.stream_url),
        api_url=os.getenv("POKE_CHAT_API_URL", defaults.api_url),
        format=os.getenv("POKE_CHAT_FORMAT", defaults.format),
        mode=os.getenv("POKE_CHAT_MODE", defaults.mode),
        timeout=float(os.getenv("POKE_CHAT_TIMEOUT", defaults.timeout)),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        anthropic_model=os.getenv("ANTHROPIC_MODEL", defaults.anthropic_model),
        max_sessions=int(os.getenv("POKE_CHAT_MAX_SESSIONS", defaults.max_sessions)),
        session_ttl=float(os.getenv("POKE_CHAT_SESSION_TTL", defaults.session_ttl)),
    )
    return replace(settings, **overrides) if overrides else settings
