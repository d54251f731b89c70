"""FastMCP server exposing team-edit validation and preview tools."""

from __future__ import annotations

from typing import Annotated, Any, Dict, List

from fastmcp import FastMCP

from .actions import ActionSynthesizer
from .models import Team, ToolCall
from .parsers import export_team, parse_team
from .validation import PokemonValidator

app = FastMCP("poke-chat", version="0.1.0")
_validator = PokemonValidator()
_synthesizer = ActionSynthesizer(_validator)


def validation_report(payload: Dict[str, Any]) -> Dict[str, Any]:
    result = _validator.validate(payload)
    return {
        "valid": result.valid,
        "errors": [{"field": err.field, "message": err.message} for err in result.errors],
    }


def preview_changes(team_text: str, tool_calls: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Fold tool inputs over the parsed team; inputs that do not parse are listed under ``skipped``."""

    team = parse_team(team_text) if team_text.strip() else Team()
    calls: List[ToolCall] = []
    skipped: List[str] = []
    for raw in tool_calls:
        try:
            calls.append(ToolCall.from_input(raw))
        except ValueError as exc:
            skipped.append(str(exc))

    actions = _synthesizer.synthesize(calls, team)
    final = actions[-1].preview if actions else team
    return {
        "actions": [action.to_dict() for action in actions],
        "skipped": skipped,
        "final_team": export_team(final),
    }


@app.tool()
def validate_pokemon_set(
    payload: Annotated[Dict[str, Any], "Pokemon fields: pokemon, moves, evs, ivs, nature, ..."],
) -> Dict[str, Any]:
    """Check EV/IV bounds, nature and move count for a Pokemon payload."""

    return validation_report(payload)


@app.tool()
def preview_team_changes(
    team_text: Annotated[str, "Smogon/Showdown export text (may be empty)"],
    tool_calls: Annotated[List[Dict[str, Any]], "modify_team inputs, in order"],
) -> Dict[str, Any]:
    """Fold modify_team calls over a team and return each resulting Action."""

    return preview_changes(team_text, tool_calls)


def run() -> None:
    """Entry point for `python -m poke_chat.server` or console script."""

    print("[poke-chat] Starting MCP server. Press Ctrl+C to stop.")
    app.run()


if __name__ == "__main__":
    run()
