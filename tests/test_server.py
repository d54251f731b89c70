"""Tests for the functions behind the MCP tools."""

from __future__ import annotations

from poke_chat import server

TEAM_TEXT = """Garchomp @ Rocky Helmet
Ability: Rough Skin
- Earthquake

Gholdengo @ Choice Scarf
- Make It Rain
"""


def test_validation_report_lists_field_errors() -> None:
    report = server.validation_report({"pokemon": "Garchomp", "evs": {"hp": 300}, "moves": []})

    assert report["valid"] is False
    assert [err["field"] for err in report["errors"]] == ["evs.hp", "moves"]
    assert server.validation_report({"item": "Leftovers"}) == {"valid": True, "errors": []}


def test_preview_skips_unparseable_calls() -> None:
    result = server.preview_changes(
        TEAM_TEXT,
        [
            {"action_type": "evolve_pokemon", "slot": 0, "reason": "nope"},
            {"action_type": "update_pokemon", "slot": 1, "item": "Leftovers", "reason": "Longevity"},
        ],
    )

    assert result["skipped"] == ["Unknown action_type: 'evolve_pokemon'"]
    assert [action["type"] for action in result["actions"]] == ["update_pokemon"]
    assert "Gholdengo @ Leftovers" in result["final_team"]


def test_preview_remove_then_add_fills_the_hole() -> None:
    result = server.preview_changes(
        TEAM_TEXT,
        [
            {"action_type": "remove_pokemon", "slot": 0, "reason": "Too slow"},
            {"action_type": "add_pokemon", "pokemon": "Great Tusk", "moves": ["Rapid Spin"], "reason": "Hazard control"},
        ],
    )

    first, second = result["actions"]
    assert first["preview"]["slots"][0] is None
    assert second["slot"] == 0
    assert result["final_team"].split("\n\n")[0] == "Great Tusk\n- Rapid Spin"
    assert result["final_team"].split("\n\n")[1].startswith("Gholdengo @ Choice Scarf")


def test_preview_on_empty_team_text() -> None:
    result = server.preview_changes("  ", [])

    assert result == {"actions": [], "skipped": [], "final_team": ""}
