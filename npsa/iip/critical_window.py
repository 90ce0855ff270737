"""Critical-window EDF idle-time insertion."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from npsa.model import INFINITY, Job, Time

from .kinds import IIPKind

if TYPE_CHECKING:
    from npsa.core.lookup import JobTables


class CriticalWindowIIP:
    """Delay a job if it would eat into the critical window of the other tasks.

    For every other task the next incomplete job is packed backwards from
    the latest deadline; the candidate must finish before that packing starts.
    """

    kind: ClassVar[IIPKind] = IIPKind.CRITICAL_WINDOW
    can_block: ClassVar[bool] = True

    def __init__(self, tables: JobTables) -> None:
        self._tables = tables

    def latest_start(self, job_index: int, t: Time, scheduled: frozenset[int]) -> Time:
        job = self._tables.jobs[job_index]
        latest: Time = INFINITY
        for other in reversed(self.influencing_jobs(job, t, scheduled)):
            latest = min(latest, other.deadline) - other.cost_max
        return latest - job.cost_max

    def influencing_jobs(self, job: Job, t: Time, scheduled: frozenset[int]) -> list[Job]:
        """Next incomplete job of every other task, ordered by deadline."""
        jobs = self._tables.jobs
        chosen: dict[int, Job] = {}
        wanted = self._tables.task_count - 1

        # possibly pending already: keep the earliest arrival per task
        for idx in self._tables.arrived_by(t):
            other = jobs[idx]
            if idx in scheduled or other.task_id == job.task_id or other.task_id in chosen:
                continue
            chosen[other.task_id] = other

        for idx in self._tables.arriving_after(t):
            if len(chosen) >= wanted:
                break
            other = jobs[idx]
            if idx in scheduled or other.task_id == job.task_id or other.task_id in chosen:
                continue
            chosen[other.task_id] = other

        return sorted(chosen.values(), key=lambda other: (other.deadline, other.task_id, other.job_id))
