"""Workload, scheduling problem and analysis options."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from .job import Job


class WorkloadError(ValueError):
    """Structurally invalid workload."""


class Workload:
    """Ordered, read-only collection of the jobs to analyze."""

    def __init__(self, jobs: Iterable[Job]) -> None:
        self._jobs: tuple[Job, ...] = tuple(jobs)
        if not self._jobs:
            raise WorkloadError("workload must contain at least one job")
        self._index: dict[tuple[int, int], int] = {}
        for idx, job in enumerate(self._jobs):
            if job.key in self._index:
                raise WorkloadError(f"duplicate job {job.label}")
            self._index[job.key] = idx

    def __iter__(self) -> Iterator[Job]:
        return iter(self._jobs)

    def __len__(self) -> int:
        return len(self._jobs)

    def __getitem__(self, index: int) -> Job:
        return self._jobs[index]

    @property
    def jobs(self) -> tuple[Job, ...]:
        return self._jobs

    def lookup(self, task_id: int, job_id: int) -> Job:
        return self._jobs[self.index_of_key((task_id, job_id))]

    def index_of(self, job: Job) -> int:
        return self.index_of_key(job.key)

    def index_of_key(self, key: tuple[int, int]) -> int:
        try:
            return self._index[key]
        except KeyError:
            raise WorkloadError(f"unknown job T{key[0]}J{key[1]}") from None

    def task_ids(self) -> list[int]:
        return sorted({job.task_id for job in self._jobs})

    def max_deadline(self) -> int:
        return max(job.deadline for job in self._jobs)


class AnalysisOptions(BaseModel):
    """Exploration settings. Zero means "unlimited" for the limits."""

    model_config = ConfigDict(extra="forbid")

    be_naive: bool = False
    early_exit: bool = True
    timeout: float = Field(default=0.0, ge=0)
    max_depth: int = Field(default=0, ge=0)
    num_workers: int = Field(default=1, ge=1)


@dataclass(frozen=True, slots=True)
class SchedulingProblem:
    workload: Workload
    num_processors: int = 1

    def __post_init__(self) -> None:
        if self.num_processors != 1:
            raise ValueError("only uniprocessor problems are supported")
