"""Shared dataclasses for the team-building chat pipeline."""

from .actions import (
    Action,
    ActionType,
    MemberUpdate,
    ToolCall,
    ValidationError,
    ValidationResult,
)
from .events import (
    Done,
    PipelineEvent,
    StreamCompleted,
    StreamEvent,
    StreamResult,
    TextDelta,
    TextUpdate,
    ThinkingChange,
    ThinkingUpdate,
    ToolCallSeen,
    ToolUse,
)
from .team import STAT_KEYS, TEAM_SIZE, PokemonSet, Team

__all__ = [
    "Action",
    "ActionType",
    "Done",
    "MemberUpdate",
    "PipelineEvent",
    "PokemonSet",
    "STAT_KEYS",
    "StreamCompleted",
    "StreamEvent",
    "StreamResult",
    "TEAM_SIZE",
    "Team",
    "TextDelta",
    "TextUpdate",
    "ThinkingChange",
    "ThinkingUpdate",
    "ToolCall",
    "ToolCallSeen",
    "ToolUse",
    "ValidationError",
    "ValidationResult",
]
