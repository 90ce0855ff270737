"""Cross-check naive exploration against state-merging exploration."""

from __future__ import annotations

from typing import Any, Union

from npsa.core import ExplorationResult, Verdict, explore
from npsa.iip import IIPKind
from npsa.model import AnalysisOptions, SchedulingProblem, Workload


def cross_check_modes(
    problem: Union[SchedulingProblem, Workload],
    iip: Union[IIPKind, str] = IIPKind.NONE,
    options: AnalysisOptions | None = None,
) -> dict[str, Any]:
    """Run both modes with the same limits and compare their verdicts.

    Merging only adds behaviours, so a schedulable merging verdict must
    never come with an unschedulable naive one. Inconclusive runs are
    reported but never counted as a violation.
    """
    base = options or AnalysisOptions()
    naive = explore(problem, base.model_copy(update={"be_naive": True}), iip=iip)
    merged = explore(problem, base.model_copy(update={"be_naive": False}), iip=iip)
    consistent = not (
        merged.verdict == Verdict.SCHEDULABLE and naive.verdict == Verdict.NOT_SCHEDULABLE
    )
    return {
        "iip": naive.iip.value,
        "naive": _summary(naive),
        "merged": _summary(merged),
        "consistent": consistent,
        "state_reduction": naive.num_states - merged.num_states,
    }


def _summary(result: ExplorationResult) -> dict[str, Any]:
    return {
        "verdict": result.verdict.value,
        "states": result.num_states,
        "edges": result.num_edges,
        "max_width": result.max_width,
        "cpu_time": result.cpu_time,
        "timed_out": result.timed_out,
    }
