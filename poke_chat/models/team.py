"""Core dataclasses shared across the team-building chat pipeline."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

TEAM_SIZE = 6
STAT_KEYS = ("hp", "atk", "def", "spa", "spd", "spe")


@dataclass(slots=True)
class PokemonSet:
    """Represents a single Pokemon occupying a team slot."""

    pokemon: str
    moves: List[str] = field(default_factory=list)
    ability: Optional[str] = None
    item: Optional[str] = None
    nature: Optional[str] = None
    tera_type: Optional[str] = None
    evs: Dict[str, int] = field(default_factory=dict)
    ivs: Dict[str, int] = field(default_factory=dict)

    def copy(self) -> "PokemonSet":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {"pokemon": self.pokemon, "moves": list(self.moves)}
        for key in ("ability", "item", "nature", "tera_type"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.evs:
            data["evs"] = dict(self.evs)
        if self.ivs:
            data["ivs"] = dict(self.ivs)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "PokemonSet":
        return cls(
            pokemon=str(data.get("pokemon") or ""),
            moves=[str(move) for move in data.get("moves") or []],
            ability=data.get("ability"),
            item=data.get("item"),
            nature=data.get("nature"),
            tera_type=data.get("tera_type") or data.get("teraType"),
            evs=dict(data.get("evs") or {}),
            ivs=dict(data.get("ivs") or {}),
        )


@dataclass(slots=True)
class Team:
    """Fixed six-slot roster; each slot is empty (None) or a PokemonSet."""

    format: str = "gen9ou"
    name: Optional[str] = None
    slots: List[Optional[PokemonSet]] = field(default_factory=lambda: [None] * TEAM_SIZE)

    def __post_init__(self) -> None:
        if len(self.slots) > TEAM_SIZE:
            raise ValueError(f"Team cannot have more than {TEAM_SIZE} Pokemon")
        self.slots = list(self.slots) + [None] * (TEAM_SIZE - len(self.slots))

    def __iter__(self) -> Iterator[Optional[PokemonSet]]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    def __getitem__(self, slot: int) -> Optional[PokemonSet]:
        return self.slots[slot]

    @staticmethod
    def in_range(slot: Optional[int]) -> bool:
        return slot is not None and 0 <= slot < TEAM_SIZE

    @property
    def pokemon(self) -> List[PokemonSet]:
        """Filled slots in slot order."""

        return [member for member in self.slots if member is not None]

    def add_pokemon(self, pokemon: PokemonSet) -> int:
        slot = self.next_empty_slot()
        if slot is None:
            raise ValueError(f"Team cannot have more than {TEAM_SIZE} Pokemon")
        self.slots[slot] = pokemon
        return slot

    def set_slot(self, slot: int, pokemon: Optional[PokemonSet]) -> None:
        if not self.in_range(slot):
            raise IndexError(f"Slot {slot} is out of range")
        self.slots[slot] = pokemon

    def next_empty_slot(self) -> Optional[int]:
        for index, member in enumerate(self.slots):
            if member is None:
                return index
        return None

    def is_empty(self) -> bool:
        return not self.pokemon

    def is_full(self) -> bool:
        return self.next_empty_slot() is None

    def copy(self) -> "Team":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, object]:
        return {
            "format": self.format,
            "name": self.name,
            "slots": [member.to_dict() if member else None for member in self.slots],
        }
