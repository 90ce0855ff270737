"""Precautious rate-monotonic idle-time insertion."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from npsa.model import INFINITY, Time

from .kinds import IIPKind

if TYPE_CHECKING:
    from npsa.core.lookup import JobTables


class PrecautiousRMIIP:
    """Delay a job if running it now could make the next top-priority job miss.

    Jobs carrying the top priority value are never delayed. Any other job
    must finish before the latest start time of the next top-priority job
    that has not certainly arrived yet.
    """

    kind: ClassVar[IIPKind] = IIPKind.PRECAUTIOUS_RM
    can_block: ClassVar[bool] = True

    def __init__(self, tables: JobTables) -> None:
        self._tables = tables
        self._top_priority = min(job.priority for job in tables.jobs)

    def latest_start(self, job_index: int, t: Time, scheduled: frozenset[int]) -> Time:
        jobs = self._tables.jobs
        job = jobs[job_index]
        if job.priority == self._top_priority:
            return INFINITY
        for idx in self._tables.certainly_arriving_after(t):
            guarded = jobs[idx]
            if guarded.priority != self._top_priority or idx in scheduled:
                continue
            return guarded.deadline - guarded.cost_max - job.cost_max
        return INFINITY
