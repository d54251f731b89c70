"""Prompt text and the ``modify_team`` tool schema sent to the model."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models import STAT_KEYS, Team

MAX_HISTORY_MESSAGES = 10

_STAT_SCHEMA = {"type": "object", "properties": {stat: {"type": "number"} for stat in STAT_KEYS}}

TEAM_TOOLS: List[Dict[str, Any]] = [
    {
        "name": "modify_team",
        "description": (
            "Modify the user's Pokemon team. Use this tool to add, replace, update, or remove Pokemon.\n\n"
            "Action types:\n"
            '- "add_pokemon": Add a new Pokemon to an empty slot\n'
            '- "replace_pokemon": Replace an existing Pokemon entirely\n'
            '- "update_pokemon": Update specific fields of an existing Pokemon (moves, item, ability, etc.)\n'
            '- "remove_pokemon": Remove a Pokemon from the team\n\n'
            "For granular updates, supply only the fields that change (e.g. only item, or one move with move_slot)."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "action_type": {
                    "type": "string",
                    "enum": ["add_pokemon", "replace_pokemon", "update_pokemon", "remove_pokemon"],
                    "description": "The type of modification to make",
                },
                "slot": {"type": "number", "description": "Team slot (0-5). For add_pokemon, use the next empty slot."},
                "reason": {"type": "string", "description": "Brief explanation of why this change is being made"},
                "pokemon": {"type": "string", "description": "Pokemon species name (e.g., 'Great Tusk')"},
                "moves": {"type": "array", "items": {"type": "string"}, "description": "Array of up to 4 move names"},
                "ability": {"type": "string", "description": "Pokemon's ability"},
                "item": {"type": "string", "description": "Held item"},
                "nature": {"type": "string", "description": "Pokemon's nature (e.g., 'Jolly', 'Modest')"},
                "tera_type": {"type": "string", "description": "Tera type for terastallization"},
                "evs": {**_STAT_SCHEMA, "description": "EV spread (should total 508-510)"},
                "ivs": {**_STAT_SCHEMA, "description": "IV spread (0-31 per stat)"},
                "move_slot": {"type": "number", "description": "For single move updates, which slot (0-3) to change"},
            },
            "required": ["action_type", "slot", "reason"],
        },
    }
]


def format_team_for_prompt(team: Team) -> str:
    if team.is_empty():
        return "No Pokemon in team yet."

    blocks: List[str] = []
    for index, member in enumerate(team.slots):
        if member is None:
            blocks.append(f"Slot {index}: (empty)")
            continue
        parts = [f"Slot {index}: {member.pokemon}"]
        if member.item:
            parts.append(f"@ {member.item}")
        if member.ability:
            parts.append(f"({member.ability})")
        if member.tera_type:
            parts.append(f"[Tera: {member.tera_type}]")
        if member.moves:
            parts.append(f"\n   Moves: {', '.join(member.moves)}")
        evs = " / ".join(f"{value} {stat.upper()}" for stat, value in member.evs.items() if value)
        if evs:
            parts.append(f"\n   EVs: {evs}")
        if member.nature:
            parts.append(f"\n   Nature: {member.nature}")
        blocks.append(" ".join(parts))
    return "\n\n".join(blocks)


def build_system_prompt(format_id: str, team_size: int, mode: str = "singles") -> str:
    style = "doubles (VGC)" if mode == "vgc" else "singles"
    open_slots = max(0, 6 - team_size)
    return (
        f"You are a Pokemon competitive team building assistant for {format_id.upper()} {style}.\n\n"
        "Help the user build and improve their team. Explain your reasoning clearly and concisely. "
        "When you recommend a concrete change, call the modify_team tool once per change, in the "
        "order the changes should be applied. Only include fields relevant to the change. "
        "Use the slot numbers exactly as listed in the current team; empty slots keep their number.\n\n"
        f"The team currently has {team_size} Pokemon and {open_slots} open slots."
    )


def build_user_message(message: str, team: Team) -> str:
    return f"Current Team:\n{format_team_for_prompt(team)}\n\nUser's Question: {message}"


def build_anthropic_request(
    message: str,
    team: Team,
    *,
    model: str,
    mode: str = "singles",
    enable_thinking: bool = False,
    chat_history: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    """Request body for a streamed Messages call with the team tool attached."""

    history = [
        {"role": entry["role"], "content": entry.get("content", "")}
        for entry in (chat_history or [])[-MAX_HISTORY_MESSAGES:]
        if entry.get("role") in ("user", "assistant")
    ]
    body: Dict[str, Any] = {
        "model": model,
        "max_tokens": 16000 if enable_thinking else 4096,
        "stream": True,
        "system": [
            {
                "type": "text",
                "text": build_system_prompt(team.format, len(team.pokemon), mode),
                "cache_control": {"type": "ephemeral"},
            }
        ],
        "messages": [*history, {"role": "user", "content": build_user_message(message, team)}],
        "tools": TEAM_TOOLS,
    }
    if enable_thinking:
        body["thinking"] = {"type": "enabled", "budget_tokens": 4000}
    return body
