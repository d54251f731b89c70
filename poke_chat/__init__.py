"""Streaming team-building chat: turns model tool calls into reviewable team edits."""

from .actions.synthesizer import ActionSynthesizer
from .parsers.smogon import export_team, parse_team
from .session import ChatSession, SessionRegistry, TransactionController
from .streaming import ActionPipeline

__all__ = [
    "ActionPipeline",
    "ActionSynthesizer",
    "ChatSession",
    "SessionRegistry",
    "TransactionController",
    "export_team",
    "parse_team",
]
