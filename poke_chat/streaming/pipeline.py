"""Action pipeline: stream chunks in, text updates and synthesized Actions out."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Callable, Optional, Union

from ..actions import ActionSynthesizer
from ..models import (
    Done,
    PipelineEvent,
    StreamCompleted,
    StreamResult,
    Team,
    TextDelta,
    TextUpdate,
    ThinkingChange,
    ThinkingUpdate,
    ToolCallSeen,
    ToolUse,
)
from .accumulator import ToolCallAccumulator
from .events import interpret_frame
from .frames import ChunkSource, read_frames

TeamSource = Union[Team, Callable[[], Team]]


class ActionPipeline:
    """Consumes one streamed response and yields tagged pipeline events.

    Frames are interpreted strictly in arrival order. ``[DONE]`` stops the
    read; a stream that ends without it is finalized the same way. Actions
    are synthesized against the team as it stands at finalization.
    """

    def __init__(
        self,
        synthesizer: Optional[ActionSynthesizer] = None,
        *,
        debug_logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.synthesizer = synthesizer or ActionSynthesizer(debug_logger=debug_logger)
        self._debug_logger = debug_logger

    def _debug(self, message: str) -> None:
        if self._debug_logger:
            self._debug_logger(message)

    async def events(
        self,
        chunks: ChunkSource,
        team: TeamSource,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[PipelineEvent]:
        content = ""
        thinking = ""
        accumulator = ToolCallAccumulator()
        saw_done = False

        frames = read_frames(chunks)
        try:
            async for frame in frames:
                if cancel is not None and cancel.is_set():
                    break
                for event in interpret_frame(frame):
                    if isinstance(event, Done):
                        saw_done = True
                        break
                    if isinstance(event, TextDelta):
                        content += event.text
                        yield TextUpdate(content=content)
                    elif isinstance(event, ThinkingChange):
                        thinking += event.text
                        yield ThinkingUpdate(is_thinking=event.thinking, thinking=thinking)
                    elif isinstance(event, ToolUse):
                        index = accumulator.add(event.call)
                        yield ToolCallSeen(pokemon=event.call.update.pokemon or "", index=index)
                if saw_done:
                    break
        finally:
            await frames.aclose()

        if cancel is not None and cancel.is_set():
            self._debug("Stream cancelled; discarding partial response")
            return
        if not saw_done:
            self._debug("Stream ended without [DONE]; finalizing accumulated output")

        current = team() if callable(team) else team
        actions = self.synthesizer.synthesize(accumulator.finalize(), current)
        self._debug(f"Stream complete: {len(content)} chars, {len(actions)} actions")
        yield StreamCompleted(result=StreamResult(content=content, thinking=thinking, actions=actions))


async def consume_stream(
    pipeline: ActionPipeline,
    chunks: ChunkSource,
    team: TeamSource,
    *,
    on_chunk: Optional[Callable[[str], None]] = None,
    on_thinking: Optional[Callable[[bool, str], None]] = None,
    on_tool_use: Optional[Callable[[str, int], None]] = None,
    on_complete: Optional[Callable[[StreamResult], None]] = None,
    on_error: Optional[Callable[[Exception], None]] = None,
    cancel: Optional[asyncio.Event] = None,
) -> Optional[StreamResult]:
    """Callback-style wrapper around :meth:`ActionPipeline.events`."""

    result: Optional[StreamResult] = None
    try:
        async for event in pipeline.events(chunks, team, cancel=cancel):
            if isinstance(event, TextUpdate):
                if on_chunk:
                    on_chunk(event.content)
            elif isinstance(event, ThinkingUpdate):
                if on_thinking:
                    on_thinking(event.is_thinking, event.thinking)
            elif isinstance(event, ToolCallSeen):
                if on_tool_use:
                    on_tool_use(event.pokemon, event.index)
            elif isinstance(event, StreamCompleted):
                result = event.result
                if on_complete:
                    on_complete(result)
    except Exception as exc:
        if on_error is None:
            raise
        on_error(exc)
        return None
    return result
