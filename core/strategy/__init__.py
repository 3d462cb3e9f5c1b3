"""Computer opponent strategy."""

from core.strategy.computer import ComputerPolicy, Decision, Move, best_group, candidate_groups

__all__ = [
    "ComputerPolicy",
    "Decision",
    "Move",
    "best_group",
    "candidate_groups",
]
