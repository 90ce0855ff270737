"""Exploration verdict and diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from npsa.iip import IIPKind
from npsa.model import Interval, Job, Workload, is_infinity


class Verdict(str, Enum):
    SCHEDULABLE = "schedulable"
    NOT_SCHEDULABLE = "not_schedulable"
    INCONCLUSIVE = "inconclusive"


class MissReason(str, Enum):
    FINISH = "finish"
    SKIPPED = "skipped"
    DEAD_END = "dead_end"


@dataclass(frozen=True, slots=True)
class DeadlineMiss:
    """One witnessed deadline miss.

    ``finish`` is the finish-time window of the dispatch that missed; it is
    ``None`` for jobs that were skipped past their deadline or stranded in a
    dead end.
    """

    task_id: int
    job_id: int
    deadline: int
    depth: int
    reason: MissReason
    finish: Optional[Interval] = None

    @property
    def label(self) -> str:
        return f"T{self.task_id}J{self.job_id}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "job_id": self.job_id,
            "deadline": self.deadline,
            "depth": self.depth,
            "reason": self.reason.value,
            "finish": _interval_to_list(self.finish),
        }


@dataclass(slots=True)
class ExplorationResult:
    workload: Workload
    iip: IIPKind
    be_naive: bool
    verdict: Verdict
    finish_times: list[Optional[Interval]]
    misses: list[DeadlineMiss]
    num_states: int
    num_edges: int
    num_merges: int
    max_width: int
    depth: int
    cpu_time: float
    timed_out: bool = False

    def is_schedulable(self) -> bool:
        return self.verdict == Verdict.SCHEDULABLE

    def finish_time(self, job: Job) -> Optional[Interval]:
        return self.finish_times[self.workload.index_of(job)]

    def response_time(self, job: Job) -> Optional[Interval]:
        finish = self.finish_time(job)
        if finish is None:
            return None
        return Interval(max(0, finish.lo - job.arrival_max), finish.hi - job.arrival_min)

    def response_time_rows(self) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for job in self.workload:
            finish = self.finish_time(job)
            response = self.response_time(job)
            rows.append(
                {
                    "Task ID": job.task_id,
                    "Job ID": job.job_id,
                    "BCCT": _bound(finish.lo) if finish else "",
                    "WCCT": _bound(finish.hi) if finish else "",
                    "BCRT": _bound(response.lo) if response else "",
                    "WCRT": _bound(response.hi) if response else "",
                }
            )
        return rows

    def metric_report(self) -> dict[str, Any]:
        return {
            "verdict": self.verdict.value,
            "schedulable": self.is_schedulable(),
            "iip": self.iip.value,
            "naive": self.be_naive,
            "jobs": len(self.workload),
            "states": self.num_states,
            "edges": self.num_edges,
            "merges": self.num_merges,
            "max_width": self.max_width,
            "depth": self.depth,
            "cpu_time": self.cpu_time,
            "timed_out": self.timed_out,
            "deadline_miss_count": len({miss.label for miss in self.misses}),
            "misses": [miss.to_dict() for miss in self.misses],
        }


def _bound(value: float) -> Any:
    return "inf" if is_infinity(value) else value


def _interval_to_list(interval: Optional[Interval]) -> Optional[list[Any]]:
    if interval is None:
        return None
    return [_bound(interval.lo), _bound(interval.hi)]
