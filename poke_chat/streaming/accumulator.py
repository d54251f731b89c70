"""Ordered collection of tool calls observed during one response."""

from __future__ import annotations

from typing import List

from ..models import ToolCall


class ToolCallAccumulator:
    """Keeps every ``modify_team`` call in arrival order; repeats are sequential edits."""

    def __init__(self) -> None:
        self._calls: List[ToolCall] = []
        self._finalized = False

    def add(self, call: ToolCall) -> int:
        if self._finalized:
            raise RuntimeError("Cannot add tool calls after the response was finalized")
        self._calls.append(call)
        return len(self._calls) - 1

    def finalize(self) -> List[ToolCall]:
        self._finalized = True
        return list(self._calls)

    def __len__(self) -> int:
        return len(self._calls)
