"""HTTP clients for the chat endpoints."""

from .chat_api import ChatClient, clean_response_content, extract_action_block
from .chat_stream import ChatStreamClient, ChatStreamError, build_chat_body, team_from_wire, team_to_wire

__all__ = [
    "ChatClient",
    "ChatStreamClient",
    "ChatStreamError",
    "build_chat_body",
    "clean_response_content",
    "extract_action_block",
    "team_from_wire",
    "team_to_wire",
]
