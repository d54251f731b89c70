"""Merge rules shared by preview synthesis and commit."""

from __future__ import annotations

from typing import Optional

from ..models import ActionType, MemberUpdate, PokemonSet, Team


def merge_member(
    action_type: ActionType,
    update: MemberUpdate,
    existing: Optional[PokemonSet],
) -> Optional[PokemonSet]:
    """Return the member a slot holds after the change (None for a removal)."""

    if action_type is ActionType.REMOVE:
        return None
    if action_type is ActionType.UPDATE and existing is not None:
        return update.merge_into(existing)
    # add, replace, and update of an empty slot all build a fresh member
    return update.build()


def apply_to_team(team: Team, action_type: ActionType, slot: int, update: MemberUpdate) -> Team:
    """Return a copy of ``team`` with the change applied at ``slot``."""

    result = team.copy()
    result.set_slot(slot, merge_member(action_type, update, team[slot]))
    return result
