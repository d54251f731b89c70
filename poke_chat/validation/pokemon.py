"""Structural validation of Pokemon set payloads before they are committed."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Protocol

from ..data.natures import normalize_nature
from ..models import STAT_KEYS, ValidationError, ValidationResult

MAX_EV = 252
MAX_EV_TOTAL = 510
MAX_IV = 31
MAX_MOVES = 4


class Validator(Protocol):
    def validate(self, payload: Mapping[str, Any]) -> ValidationResult: ...


def _is_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _not_a_number(kind: str, stat: str, value: Any) -> ValidationError:
    return ValidationError(
        field=f"{kind.lower()}s.{stat}",
        message=f"{stat.upper()} {kind} must be a whole number",
        value=value,
    )


def validate_evs(evs: Optional[Mapping[str, int]]) -> List[ValidationError]:
    errors: List[ValidationError] = []
    if not evs:
        return errors
    if not isinstance(evs, Mapping):
        return [ValidationError(field="evs", message="EVs must be a stat spread", value=evs)]
    total = 0
    for stat in STAT_KEYS:
        value = evs.get(stat)
        if value is None:
            continue
        if not _is_number(value):
            errors.append(_not_a_number("EV", stat, value))
            continue
        if value < 0 or value > MAX_EV:
            errors.append(
                ValidationError(
                    field=f"evs.{stat}",
                    message=f"{stat.upper()} EV ({value}) must be between 0 and {MAX_EV}",
                    value=value,
                )
            )
        total += value
    if total > MAX_EV_TOTAL:
        errors.append(
            ValidationError(
                field="evs",
                message=f"EV total ({total}) exceeds maximum of {MAX_EV_TOTAL}",
                value=total,
            )
        )
    return errors


def validate_ivs(ivs: Optional[Mapping[str, int]]) -> List[ValidationError]:
    errors: List[ValidationError] = []
    if ivs is not None and not isinstance(ivs, Mapping):
        return [ValidationError(field="ivs", message="IVs must be a stat spread", value=ivs)]
    for stat in STAT_KEYS:
        value = (ivs or {}).get(stat)
        if value is None:
            continue
        if not _is_number(value):
            errors.append(_not_a_number("IV", stat, value))
        elif not 0 <= value <= MAX_IV:
            errors.append(
                ValidationError(
                    field=f"ivs.{stat}",
                    message=f"{stat.upper()} IV ({value}) must be between 0 and {MAX_IV}",
                    value=value,
                )
            )
    return errors


def validate_nature(nature: Optional[str]) -> List[ValidationError]:
    if not nature:
        return []
    if not isinstance(nature, str):
        return [ValidationError(field="nature", message="Nature must be a name", value=nature)]
    if normalize_nature(nature):
        return []
    return [ValidationError(field="nature", message=f'"{nature}" is not a valid nature', value=nature)]


def validate_moves(moves: Optional[List[str]]) -> List[ValidationError]:
    if moves is None:
        return []
    if not moves:
        return [ValidationError(field="moves", message="Pokemon must have at least 1 move")]
    if len(moves) > MAX_MOVES:
        return [
            ValidationError(
                field="moves",
                message=f"Pokemon can only have {MAX_MOVES} moves (got {len(moves)})",
                value=len(moves),
            )
        ]
    return []


class PokemonValidator:
    """Default validator: EV/IV bounds, nature names and move counts.

    Only fields present in the payload are checked, so partial updates
    (an item swap, a single move) validate on their own.
    """

    def validate(self, payload: Mapping[str, Any]) -> ValidationResult:
        errors: List[ValidationError] = []
        if "pokemon" in payload and not str(payload["pokemon"] or "").strip():
            errors.append(ValidationError(field="pokemon", message="Pokemon species is required"))
        errors.extend(validate_evs(payload.get("evs")))
        errors.extend(validate_ivs(payload.get("ivs")))
        errors.extend(validate_nature(payload.get("nature")))
        errors.extend(validate_moves(payload.get("moves")))
        return ValidationResult(valid=not errors, errors=errors)

