"""Parser and exporter for Smogon/Showdown-style Pokemon team text."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List

from ..models import STAT_KEYS, TEAM_SIZE, PokemonSet, Team

STAT_LABELS = {"hp": "HP", "atk": "Atk", "def": "Def", "spa": "SpA", "spd": "SpD", "spe": "Spe"}


def parse_team(raw_text: str, *, name: str | None = None, format_hint: str = "gen9ou") -> Team:
    """Parse a Smogon-format team export into a six-slot Team."""

    cleaned = raw_text.strip()
    if not cleaned:
        raise ValueError("Team text is empty")

    entries = _split_entries(cleaned)
    if len(entries) > TEAM_SIZE:
        raise ValueError(f"Team cannot have more than {TEAM_SIZE} Pokemon")
    team = Team(format=format_hint, name=name)
    for entry in entries:
        team.add_pokemon(_parse_entry(entry))

    return team


def export_team(team: Team) -> str:
    """Render the filled slots of ``team`` back to Showdown text."""

    return "\n\n".join(_export_member(member) for member in team.pokemon)


def _export_member(member: PokemonSet) -> str:
    header = member.pokemon
    if member.item:
        header += f" @ {member.item}"
    lines = [header]
    if member.ability:
        lines.append(f"Ability: {member.ability}")
    if member.tera_type:
        lines.append(f"Tera Type: {member.tera_type}")
    if member.evs:
        lines.append(f"EVs: {_format_spread(member.evs)}")
    if member.nature:
        lines.append(f"{member.nature} Nature")
    if member.ivs:
        lines.append(f"IVs: {_format_spread(member.ivs)}")
    lines.extend(f"- {move}" for move in member.moves)
    return "\n".join(lines)


def _format_spread(spread: Dict[str, int]) -> str:
    return " / ".join(f"{spread[stat]} {STAT_LABELS[stat]}" for stat in STAT_KEYS if stat in spread)


def _split_entries(text: str) -> List[str]:
    return [chunk.strip() for chunk in re.split(r"\n\s*\n", text) if chunk.strip()]


def _parse_entry(chunk: str) -> PokemonSet:
    lines = [line.strip() for line in chunk.splitlines() if line.strip()]
    if not lines:
        raise ValueError("Pokemon entry is empty")

    name, item = _parse_header(lines[0])
    pokemon = PokemonSet(pokemon=_infer_species(name), item=item)

    for line in lines[1:]:
        if line.startswith("Ability:"):
            pokemon.ability = _value_after_colon(line)
        elif line.startswith("Tera Type:"):
            pokemon.tera_type = _value_after_colon(line)
        elif line.startswith("EVs:"):
            pokemon.evs = _parse_stat_spread(_value_after_colon(line))
        elif line.startswith("IVs:"):
            pokemon.ivs = _parse_stat_spread(_value_after_colon(line))
        elif line.endswith("Nature"):
            pokemon.nature = line.replace("Nature", "").strip()
        elif line.startswith("-"):
            pokemon.moves.append(line.lstrip("- ").strip())

    return pokemon


def _parse_header(line: str) -> tuple[str, str | None]:
    if "@" not in line:
        return line.strip(), None
    name_part, item_part = line.split("@", 1)
    return name_part.strip(), item_part.strip()


def _parse_stat_spread(spread: str) -> Dict[str, int]:
    return {stat: value for value, stat in _split_stat_tokens(spread)}


def _split_stat_tokens(spread: str) -> Iterable[tuple[int, str]]:
    for raw in spread.split("/"):
        parts = raw.strip().split()
        if len(parts) < 2:
            continue
        try:
            value = int(parts[0])
        except ValueError:
            continue
        normalized = _normalize_stat(parts[1])
        if normalized:
            yield value, normalized


def _normalize_stat(stat: str) -> str | None:
    key = stat.replace(".", "").lower()
    return key if key in STAT_KEYS else None


def _value_after_colon(line: str) -> str:
    return line.split(":", 1)[1].strip()


def _infer_species(name: str) -> str:
    match = re.search(r"\(([^)]*)\)", name)
    if match:
        candidate = match.group(1).strip()
        if candidate and candidate.upper() not in {"M", "F"}:
            return candidate
    cleaned = re.sub(r"\([^)]*\)", "", name).strip()
    return cleaned or name.strip()
