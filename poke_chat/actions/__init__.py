"""Action synthesis and the merge rules it shares with commit."""

from .merge import apply_to_team, merge_member
from .synthesizer import ActionSynthesizer

__all__ = ["ActionSynthesizer", "apply_to_team", "merge_member"]
