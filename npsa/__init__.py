"""Schedulability analysis of non-preemptive job sets by state-space exploration."""

from npsa.core import ExplorationResult, StateSpace, Verdict, explore, explore_naively
from npsa.iip import IIPKind
from npsa.model import AnalysisOptions, Interval, Job, SchedulingProblem, Workload

__version__ = "0.1.0"

__all__ = [
    "AnalysisOptions",
    "ExplorationResult",
    "IIPKind",
    "Interval",
    "Job",
    "SchedulingProblem",
    "StateSpace",
    "Verdict",
    "Workload",
    "explore",
    "explore_naively",
]
