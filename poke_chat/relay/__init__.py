"""Server-side relay from the upstream model API to the chat wire format."""

from .anthropic import AnthropicStreamRelay, UsageLog, relay_stream
from .prompts import (
    TEAM_TOOLS,
    build_anthropic_request,
    build_system_prompt,
    build_user_message,
    format_team_for_prompt,
)

__all__ = [
    "AnthropicStreamRelay",
    "TEAM_TOOLS",
    "build_anthropic_request",
    "UsageLog",
    "build_system_prompt",
    "build_user_message",
    "format_team_for_prompt",
    "relay_stream",
]
