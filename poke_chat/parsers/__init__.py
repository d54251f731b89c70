"""Team text import/export."""

from .smogon import export_team, parse_team

__all__ = ["export_team", "parse_team"]
