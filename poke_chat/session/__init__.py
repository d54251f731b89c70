"""Chat sessions, their registry, and the pending-action controller."""

from .chat_session import ChatSession, ChatTransport
from .registry import SessionLimitError, SessionRegistry
from .transaction import PendingActionError, TransactionController, TransactionState

__all__ = [
    "ChatSession",
    "ChatTransport",
    "PendingActionError",
    "SessionLimitError",
    "SessionRegistry",
    "TransactionController",
    "TransactionState",
]
