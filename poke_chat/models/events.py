"""Tagged events decoded from the chat stream and emitted by the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .actions import Action, ToolCall


@dataclass(slots=True, frozen=True)
class TextDelta:
    text: str


@dataclass(slots=True, frozen=True)
class ThinkingChange:
    thinking: bool
    text: str = ""


@dataclass(slots=True, frozen=True)
class ToolUse:
    call: ToolCall
    tool_id: Optional[str] = None


@dataclass(slots=True, frozen=True)
class Done:
    pass


StreamEvent = Union[TextDelta, ThinkingChange, ToolUse, Done]


@dataclass(slots=True)
class StreamResult:
    """Final outcome of one response cycle."""

    content: str
    thinking: str = ""
    actions: List[Action] = field(default_factory=list)

    @property
    def action(self) -> Optional[Action]:
        return self.actions[0] if self.actions else None


# Events yielded by ActionPipeline.events()


@dataclass(slots=True, frozen=True)
class TextUpdate:
    content: str


@dataclass(slots=True, frozen=True)
class ThinkingUpdate:
    is_thinking: bool
    thinking: str


@dataclass(slots=True, frozen=True)
class ToolCallSeen:
    pokemon: str
    index: int


@dataclass(slots=True, frozen=True)
class StreamCompleted:
    result: StreamResult


PipelineEvent = Union[TextUpdate, ThinkingUpdate, ToolCallSeen, StreamCompleted]
