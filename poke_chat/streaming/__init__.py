"""Streaming response consumption: framing, event decoding, tool-call collection."""

from .accumulator import ToolCallAccumulator
from .events import interpret_frame, interpret_line
from .frames import StreamFrameReader, read_frames
from .pipeline import ActionPipeline, consume_stream

__all__ = [
    "ActionPipeline",
    "StreamFrameReader",
    "ToolCallAccumulator",
    "consume_stream",
    "interpret_frame",
    "interpret_line",
    "read_frames",
]
