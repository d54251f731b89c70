"""Turn accumulated tool calls into previewable, validated Actions."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from ..models import TEAM_SIZE, Action, ActionType, Team, ToolCall, ValidationError
from ..validation import PokemonValidator, Validator
from .merge import apply_to_team


class ActionSynthesizer:
    """Folds tool calls left to right over a rolling preview of the team.

    Each call sees the effects of every call before it in the same batch.
    Removals leave an empty slot behind (no compaction), so slot numbers
    used by later calls keep pointing at the same Pokemon.
    """

    def __init__(
        self,
        validator: Optional[Validator] = None,
        *,
        debug_logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.validator = validator or PokemonValidator()
        self._debug_logger = debug_logger

    def _debug(self, message: str) -> None:
        if self._debug_logger:
            self._debug_logger(message)

    def synthesize(self, tool_calls: Sequence[ToolCall], initial_team: Team) -> List[Action]:
        preview = initial_team.copy()
        actions: List[Action] = []
        for index, call in enumerate(tool_calls):
            action = self.synthesize_one(call, preview)
            self._debug(
                f"Call {index}: {action.type.value} -> slot {action.slot}"
                f" ({len(action.validation_errors)} validation errors)"
            )
            actions.append(action)
            preview = action.preview
        return actions

    def synthesize_one(self, call: ToolCall, team: Team) -> Action:
        errors: List[ValidationError] = []
        slot = self._resolve_slot(call, team, errors)
        if slot is not None and not errors:
            errors.extend(self._structural_errors(call, team[slot]))

        if slot is not None and not errors:
            preview = apply_to_team(team, call.action_type, slot, call.update)
        else:
            preview = team.copy()

        if call.action_type is not ActionType.REMOVE:
            result = self.validator.validate(call.update.supplied())
            errors.extend(result.errors)

        return Action(
            type=call.action_type,
            slot=slot,
            update=call.update,
            preview=preview,
            reason=call.reason,
            validation_errors=errors,
        )

    def rebase(self, action: Action, team: Team) -> Action:
        """Re-synthesize ``action`` against a newer team state.

        The resolved slot is kept, so an add whose slot is still free lands
        where it was previewed. Slot and species errors are recomputed, which
        can turn a valid Action invalid (or the reverse) after earlier
        decisions changed the team.
        """

        call = ToolCall(action_type=action.type, slot=action.slot, reason=action.reason, update=action.update)
        return self.synthesize_one(call, team)

    def _resolve_slot(
        self, call: ToolCall, team: Team, errors: List[ValidationError]
    ) -> Optional[int]:
        requested = call.slot

        if call.action_type is ActionType.REMOVE:
            if requested is None:
                errors.append(ValidationError(field="slot", message="remove_pokemon requires a slot"))
                return None
            if not Team.in_range(requested):
                errors.append(_out_of_range(requested))
                return None
            return requested

        if call.action_type is ActionType.ADD:
            if Team.in_range(requested) and team[requested] is None:
                return requested
            if requested is not None:
                self._debug(f"Slot {requested} unavailable for add; using next empty slot")
            return self._next_empty(team, errors)

        if requested is None:
            return self._next_empty(team, errors)
        if not Team.in_range(requested):
            errors.append(_out_of_range(requested))
            return None
        return requested

    def _next_empty(self, team: Team, errors: List[ValidationError]) -> Optional[int]:
        slot = team.next_empty_slot()
        if slot is None:
            errors.append(
                ValidationError(field="slot", message=f"Team is full ({TEAM_SIZE} Pokemon)")
            )
        return slot

    def _structural_errors(self, call: ToolCall, existing) -> List[ValidationError]:
        builds_new = call.action_type in (ActionType.ADD, ActionType.REPLACE) or (
            call.action_type is ActionType.UPDATE and existing is None
        )
        if builds_new and not call.update.pokemon:
            return [
                ValidationError(
                    field="pokemon",
                    message=f"{call.action_type.value} requires a Pokemon species",
                )
            ]
        return []


def _out_of_range(slot: int) -> ValidationError:
    return ValidationError(
        field="slot",
        message=f"Slot {slot} is out of range (0-{TEAM_SIZE - 1})",
        value=slot,
    )
