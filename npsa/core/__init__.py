"""Core exports."""

from .explorer import Expansion, StateSpace, Transition, explore, explore_naively
from .lookup import JobTables
from .result import DeadlineMiss, ExplorationResult, MissReason, Verdict

__all__ = [
    "DeadlineMiss",
    "Expansion",
    "ExplorationResult",
    "JobTables",
    "MissReason",
    "StateSpace",
    "Transition",
    "Verdict",
    "explore",
    "explore_naively",
]
