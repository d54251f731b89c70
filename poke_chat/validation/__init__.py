"""Payload validators consulted before an Action can be applied."""

from .pokemon import PokemonValidator, Validator

__all__ = ["PokemonValidator", "Validator"]
