"""Tests for the pending-action lifecycle."""

from __future__ import annotations

import pytest

from poke_chat.actions import ActionSynthesizer
from poke_chat.models import PokemonSet, Team, ToolCall
from poke_chat.session import PendingActionError, TransactionController
from poke_chat.session.transaction import TransactionState
from poke_chat.stores import ChatLog, HistoryStore, TeamStore


def _controller(team: Team | None = None) -> TransactionController:
    return TransactionController(TeamStore(team), HistoryStore(), ChatLog())


def _actions(team: Team, *inputs):
    return ActionSynthesizer().synthesize([ToolCall.from_input(data) for data in inputs], team)


def _team() -> Team:
    return Team(slots=[PokemonSet(pokemon="Garchomp", moves=["Earthquake"], item="Rocky Helmet")])


def test_apply_commits_preview_and_records_history() -> None:
    controller = _controller(_team())
    controller.load(_actions(_team(), {"action_type": "update_pokemon", "slot": 0, "item": "Choice Scarf", "reason": "Speed"}))

    assert controller.state is TransactionState.PENDING_VALID
    action = controller.apply()

    team = controller.team_store.get()
    assert team == action.preview
    assert team[0].item == "Choice Scarf"
    assert team[0].moves == ["Earthquake"]
    assert controller.pending is None
    assert controller.state is TransactionState.NO_PENDING
    entry = controller.history.entries[0]
    assert entry.label == "Applied: Speed"
    assert entry.origin == "ai"
    assert controller.chat_log.messages[-1].content == "Applied: Speed"


def test_dismiss_leaves_team_untouched() -> None:
    controller = _controller(_team())
    controller.load(_actions(_team(), {"action_type": "remove_pokemon", "slot": 0}))

    controller.dismiss()

    assert controller.team_store.get() == _team()
    assert controller.history.entries == []
    assert controller.chat_log.messages[-1].content == "Suggestion dismissed"


def test_invalid_action_cannot_be_applied() -> None:
    controller = _controller(_team())
    controller.load(_actions(_team(), {"action_type": "add_pokemon", "pokemon": "MissingNo", "evs": {"hp": 999}}))

    assert controller.state is TransactionState.PENDING_INVALID
    with pytest.raises(PendingActionError):
        controller.apply()
    assert controller.team_store.get() == _team()
    assert controller.pending is not None


def test_decisions_without_pending_action_raise() -> None:
    controller = _controller()

    with pytest.raises(PendingActionError):
        controller.apply()
    with pytest.raises(PendingActionError):
        controller.dismiss()
    with pytest.raises(PendingActionError):
        controller.retry()


def test_retry_clears_queue_and_returns_prompt() -> None:
    controller = _controller(_team())
    controller.remember_prompt("Add a Ground type")
    controller.load(_actions(_team(), {"action_type": "add_pokemon", "pokemon": "Great Tusk"}))

    assert controller.retry() == "Add a Ground type"
    assert controller.pending is None
    assert controller.team_store.get() == _team()


def test_queue_surfaces_next_action_after_apply() -> None:
    controller = _controller(_team())
    controller.load(
        _actions(
            _team(),
            {"action_type": "add_pokemon", "pokemon": "Great Tusk"},
            {"action_type": "add_pokemon", "pokemon": "Iron Valiant"},
        )
    )

    assert len(controller.queued) == 2
    controller.apply()
    assert controller.pending.slot == 2
    controller.apply()

    team = controller.team_store.get()
    assert [member.pokemon for member in team.pokemon] == ["Garchomp", "Great Tusk", "Iron Valiant"]
    assert len(controller.history.entries) == 2


def test_next_action_is_rebased_after_dismiss() -> None:
    controller = _controller(_team())
    controller.load(
        _actions(
            _team(),
            {"action_type": "add_pokemon", "pokemon": "Great Tusk"},
            {"action_type": "update_pokemon", "slot": 1, "item": "Booster Energy"},
        )
    )

    controller.dismiss()

    # slot 1 never got its Pokemon, so the follow-up update has nothing to act on
    pending = controller.pending
    assert pending.preview == controller.team_store.get()
    assert controller.state is TransactionState.PENDING_INVALID


def test_load_discards_previous_queue() -> None:
    controller = _controller(_team())
    controller.load(_actions(_team(), {"action_type": "remove_pokemon", "slot": 0}))
    replacement = _actions(_team(), {"action_type": "update_pokemon", "slot": 0, "item": "Leftovers"})

    controller.load(replacement)

    assert controller.queued == replacement
