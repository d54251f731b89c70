"""In-memory stores the transaction controller commits into."""

from .chat_log import ChatLog, ChatMessage
from .history import HistoryEntry, HistoryStore, TeamDiff
from .team_store import TeamStore

__all__ = [
    "ChatLog",
    "ChatMessage",
    "HistoryEntry",
    "HistoryStore",
    "TeamDiff",
    "TeamStore",
]
