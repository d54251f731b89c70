"""In-memory team store: the single writable copy of a user's roster."""

from __future__ import annotations

from typing import Optional

from ..models import PokemonSet, Team


class TeamStore:
    """Holds the committed team; readers always receive a copy."""

    def __init__(self, team: Optional[Team] = None) -> None:
        self._team = team.copy() if team else Team()

    def get(self) -> Team:
        return self._team.copy()

    def set_slot(self, index: int, member: PokemonSet) -> None:
        self._team.set_slot(index, member.copy())

    def remove_slot(self, index: int) -> None:
        """Empty the slot; later slots keep their positions."""

        self._team.set_slot(index, None)

    def replace(self, team: Team) -> None:
        self._team = team.copy()

    @property
    def format(self) -> str:
        return self._team.format
