"""Linear history of committed team snapshots."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..models import PokemonSet, Team

ORIGINS = ("user", "ai", "import")


@dataclass(slots=True)
class HistoryEntry:
    id: str
    timestamp: datetime
    team: Team
    label: str
    origin: str


@dataclass(slots=True)
class ModifiedMember:
    before: PokemonSet
    after: PokemonSet
    changes: List[str] = field(default_factory=list)


@dataclass(slots=True)
class TeamDiff:
    added: List[PokemonSet] = field(default_factory=list)
    removed: List[PokemonSet] = field(default_factory=list)
    modified: List[ModifiedMember] = field(default_factory=list)


class HistoryStore:
    """Newest-first snapshot log, capped at ``max_entries``."""

    def __init__(self, *, max_entries: int = 50) -> None:
        self.max_entries = max_entries
        self._entries: List[HistoryEntry] = []

    def push_state(self, snapshot: Team, label: str, origin: str = "user") -> HistoryEntry:
        if origin not in ORIGINS:
            raise ValueError(f"Unknown history origin: {origin}")
        entry = HistoryEntry(
            id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            team=snapshot.copy(),
            label=label,
            origin=origin,
        )
        self._entries = [entry, *self._entries][: self.max_entries]
        return entry

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def get_entry(self, entry_id: str) -> Optional[HistoryEntry]:
        return next((entry for entry in self._entries if entry.id == entry_id), None)

    def clear(self) -> None:
        self._entries = []

    def calculate_diff(self, before: Team, after: Team) -> TeamDiff:
        """Compare two teams by species."""

        before_map: Dict[str, PokemonSet] = {p.pokemon: p for p in before.pokemon}
        after_map: Dict[str, PokemonSet] = {p.pokemon: p for p in after.pokemon}

        diff = TeamDiff(
            added=[p for p in after.pokemon if p.pokemon not in before_map],
            removed=[p for p in before.pokemon if p.pokemon not in after_map],
        )
        for species, after_member in after_map.items():
            before_member = before_map.get(species)
            if before_member is None:
                continue
            changes = _find_changes(before_member, after_member)
            if changes:
                diff.modified.append(ModifiedMember(before=before_member, after=after_member, changes=changes))
        return diff


def _find_changes(before: PokemonSet, after: PokemonSet) -> List[str]:
    fields = ("item", "ability", "moves", "evs", "nature", "tera_type")
    return [name for name in fields if getattr(before, name) != getattr(after, name)]
