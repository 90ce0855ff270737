"""Precomputed job orderings shared by the explorer and the IIPs."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass

from npsa.model import INFINITY, Job, Time, Workload


@dataclass(frozen=True, slots=True)
class JobTables:
    """Read-only index structures over one workload (safe to share across threads)."""

    jobs: tuple[Job, ...]
    by_priority: tuple[int, ...]
    by_earliest_arrival: tuple[int, ...]
    earliest_arrival_keys: tuple[int, ...]
    by_latest_arrival: tuple[int, ...]
    latest_arrival_keys: tuple[int, ...]
    by_deadline: tuple[int, ...]
    deadline_keys: tuple[int, ...]
    breakpoints: tuple[int, ...]
    task_count: int

    @classmethod
    def build(cls, workload: Workload) -> "JobTables":
        jobs = workload.jobs
        indexes = range(len(jobs))
        by_priority = sorted(indexes, key=lambda idx: jobs[idx].priority_key())
        by_earliest = sorted(indexes, key=lambda idx: (jobs[idx].arrival_min, jobs[idx].priority_key()))
        by_latest = sorted(indexes, key=lambda idx: (jobs[idx].arrival_max, jobs[idx].priority_key()))
        by_deadline = sorted(indexes, key=lambda idx: (jobs[idx].deadline, jobs[idx].priority_key()))
        breakpoints = sorted(
            {job.arrival_min for job in jobs} | {job.arrival_max for job in jobs}
        )
        return cls(
            jobs=jobs,
            by_priority=tuple(by_priority),
            by_earliest_arrival=tuple(by_earliest),
            earliest_arrival_keys=tuple(jobs[idx].arrival_min for idx in by_earliest),
            by_latest_arrival=tuple(by_latest),
            latest_arrival_keys=tuple(jobs[idx].arrival_max for idx in by_latest),
            by_deadline=tuple(by_deadline),
            deadline_keys=tuple(jobs[idx].deadline for idx in by_deadline),
            breakpoints=tuple(breakpoints),
            task_count=len({job.task_id for job in jobs}),
        )

    def next_breakpoint(self, t: Time) -> Time:
        """Smallest arrival bound strictly after ``t``."""
        pos = bisect_right(self.breakpoints, t)
        if pos == len(self.breakpoints):
            return INFINITY
        return self.breakpoints[pos]

    def arrived_by(self, t: Time) -> tuple[int, ...]:
        """Jobs whose earliest arrival is at or before ``t``, earliest first."""
        return self.by_earliest_arrival[: bisect_right(self.earliest_arrival_keys, t)]

    def arriving_after(self, t: Time) -> tuple[int, ...]:
        return self.by_earliest_arrival[bisect_right(self.earliest_arrival_keys, t) :]

    def certainly_arriving_after(self, t: Time) -> tuple[int, ...]:
        return self.by_latest_arrival[bisect_right(self.latest_arrival_keys, t) :]

    def deadlines_within(self, lo: Time, hi: Time) -> tuple[int, ...]:
        """Jobs with ``lo <= deadline < hi``."""
        return self.by_deadline[
            bisect_left(self.deadline_keys, lo) : bisect_left(self.deadline_keys, hi)
        ]
