"""Tool calls requested by the model and the Actions synthesized from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .team import STAT_KEYS, PokemonSet, Team

MAX_MOVES = 4

LEGACY_ACTION_TYPES = {
    "update_moveset": "update_pokemon",
    "update_item": "update_pokemon",
    "update_ability": "update_pokemon",
}


class ActionType(str, Enum):
    ADD = "add_pokemon"
    REPLACE = "replace_pokemon"
    UPDATE = "update_pokemon"
    REMOVE = "remove_pokemon"


@dataclass(slots=True)
class MemberUpdate:
    """Per-field update for a team member; ``None`` means the field was not supplied."""

    pokemon: Optional[str] = None
    moves: Optional[List[str]] = None
    ability: Optional[str] = None
    item: Optional[str] = None
    nature: Optional[str] = None
    tera_type: Optional[str] = None
    evs: Optional[Dict[str, int]] = None
    ivs: Optional[Dict[str, int]] = None
    move_slot: Optional[int] = None

    FIELDS = ("pokemon", "moves", "ability", "item", "nature", "tera_type", "evs", "ivs")

    def supplied(self) -> Dict[str, Any]:
        """Fields the call actually supplied, excluding ``move_slot``."""

        payload: Dict[str, Any] = {}
        for name in self.FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            payload[name] = dict(value) if isinstance(value, dict) else (
                list(value) if isinstance(value, list) else value
            )
        return payload

    def build(self) -> PokemonSet:
        """Construct a brand new member; absent fields stay empty."""

        return self.merge_into(PokemonSet(pokemon=""))

    def merge_into(self, existing: PokemonSet) -> PokemonSet:
        """Shallow-merge the supplied fields over a copy of ``existing``."""

        merged = existing.copy()
        for name, value in self.supplied().items():
            if name == "moves":
                value = self._merged_moves(merged.moves)
            setattr(merged, name, value)
        return merged

    def _merged_moves(self, current: List[str]) -> List[str]:
        new_moves = list(self.moves or [])
        if self.move_slot is None or not new_moves:
            return new_moves
        moves = list(current)
        if self.move_slot < len(moves):
            moves[self.move_slot] = new_moves[0]
        else:
            moves.append(new_moves[0])
        return moves[:MAX_MOVES]


@dataclass(slots=True)
class ToolCall:
    """One ``modify_team`` intent emitted by the model."""

    action_type: ActionType
    slot: Optional[int] = None
    reason: str = "AI suggestion"
    update: MemberUpdate = field(default_factory=MemberUpdate)

    @classmethod
    def from_input(cls, data: Mapping[str, Any]) -> "ToolCall":
        """Parse the ``input`` object of a ``modify_team`` tool call."""

        if not isinstance(data, Mapping):
            raise ValueError("Tool input must be an object")
        action_type = _parse_action_type(data.get("action_type"))
        update = MemberUpdate(
            pokemon=_optional_str(data.get("pokemon")),
            moves=_parse_moves(data.get("moves")),
            ability=_optional_str(data.get("ability")),
            item=_optional_str(data.get("item")),
            nature=_optional_str(data.get("nature")),
            tera_type=_optional_str(data.get("tera_type")),
            evs=_parse_spread(data.get("evs")),
            ivs=_parse_spread(data.get("ivs")),
            move_slot=_parse_move_slot(data.get("move_slot")),
        )
        return cls(
            action_type=action_type,
            slot=_parse_int(data.get("slot")),
            reason=_optional_str(data.get("reason")) or "AI suggestion",
            update=update,
        )

    @classmethod
    def from_action_block(cls, data: Mapping[str, Any]) -> "ToolCall":
        """Parse the legacy ``[ACTION]`` block used by non-streaming providers."""

        if not isinstance(data, Mapping):
            raise ValueError("Action block must be an object")
        payload = data.get("payload") or {}
        if not isinstance(payload, Mapping):
            raise ValueError("Action payload must be an object")
        raw_type = data.get("type")
        flattened: Dict[str, Any] = {
            "action_type": LEGACY_ACTION_TYPES.get(raw_type, raw_type),
            "slot": data.get("slot"),
            "reason": data.get("reason"),
            "move_slot": data.get("move_slot"),
        }
        for key, value in payload.items():
            flattened["tera_type" if key == "teraType" else key] = value
        return cls.from_input(flattened)


@dataclass(slots=True)
class ValidationError:
    field: str
    message: str
    value: Any = None


@dataclass(slots=True)
class ValidationResult:
    valid: bool
    errors: List[ValidationError] = field(default_factory=list)


@dataclass(slots=True)
class Action:
    """A previewable, validated change derived from a ToolCall."""

    type: ActionType
    slot: Optional[int]
    update: MemberUpdate
    preview: Team
    reason: str
    validation_errors: List[ValidationError] = field(default_factory=list)

    @property
    def payload(self) -> Dict[str, Any]:
        return self.update.supplied()

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "slot": self.slot,
            "payload": self.payload,
            "preview": self.preview.to_dict(),
            "reason": self.reason,
            "validation_errors": [
                {"field": err.field, "message": err.message} for err in self.validation_errors
            ],
        }


def _parse_action_type(value: Any) -> ActionType:
    try:
        return ActionType(value)
    except ValueError:
        raise ValueError(f"Unknown action_type: {value!r}") from None


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip()


def _parse_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_move_slot(value: Any) -> Optional[int]:
    index = _parse_int(value)
    if index is None or not 0 <= index < MAX_MOVES:
        return None
    return index


def _parse_moves(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        return [value.strip()]
    if not isinstance(value, (list, tuple)):
        return None
    return [str(move).strip() for move in value if str(move).strip()]


def _parse_spread(value: Any) -> Optional[Dict[str, int]]:
    if not isinstance(value, Mapping):
        return None
    spread: Dict[str, int] = {}
    for stat, amount in value.items():
        key = str(stat).lower()
        number = _parse_int(amount)
        if key in STAT_KEYS and number is not None:
            spread[key] = number
    return spread
