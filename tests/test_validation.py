"""Tests for the default Pokemon set validator."""

from __future__ import annotations

from poke_chat.data.natures import normalize_nature
from poke_chat.validation import PokemonValidator
from poke_chat.validation.pokemon import validate_evs, validate_ivs, validate_moves


def test_valid_full_set() -> None:
    result = PokemonValidator().validate(
        {
            "pokemon": "Great Tusk",
            "moves": ["Headlong Rush", "Ice Spinner", "Knock Off", "Rapid Spin"],
            "nature": "jolly",
            "evs": {"atk": 252, "def": 4, "spe": 252},
            "ivs": {"spa": 0},
        }
    )

    assert result.valid
    assert result.errors == []


def test_ev_bounds_and_total() -> None:
    assert validate_evs({"hp": 253})[0].field == "evs.hp"
    assert validate_evs({"hp": -1})[0].field == "evs.hp"

    errors = validate_evs({"hp": 252, "atk": 252, "spe": 8})
    assert [err.field for err in errors] == ["evs"]
    assert "510" in errors[0].message

    assert validate_evs({"hp": 252, "atk": 252, "spe": 6}) == []


def test_iv_bounds() -> None:
    assert validate_ivs({"atk": 0, "spe": 31}) == []
    assert [err.field for err in validate_ivs({"atk": 32})] == ["ivs.atk"]


def test_non_numeric_spreads_are_reported() -> None:
    result = PokemonValidator().validate({"evs": {"hp": "252", "atk": 252}, "ivs": {"spe": True}, "nature": 7})

    assert not result.valid
    assert [err.field for err in result.errors] == ["evs.hp", "ivs.spe", "nature"]
    assert validate_evs({"hp": "252", "atk": 252, "spe": 252}) == [validate_evs({"hp": "252"})[0]]
    assert validate_evs(["hp"])[0].field == "evs"


def test_move_count() -> None:
    assert validate_moves(None) == []
    assert validate_moves([])[0].message == "Pokemon must have at least 1 move"
    assert validate_moves(["a", "b", "c", "d", "e"])[0].value == 5


def test_partial_payload_only_checks_present_fields() -> None:
    assert PokemonValidator().validate({"item": "Leftovers"}).valid


def test_unknown_nature_and_blank_species() -> None:
    result = PokemonValidator().validate({"pokemon": "  ", "nature": "Sleepy"})

    assert not result.valid
    assert {err.field for err in result.errors} == {"pokemon", "nature"}


def test_normalize_nature() -> None:
    assert normalize_nature(" adamant ") == "Adamant"
    assert normalize_nature("Sleepy") is None
