"""Expansion of periodic task sets into concrete job sets."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from npsa.model import Job, Workload


class PeriodicTask(BaseModel):
    """Periodic task with release jitter and a relative deadline."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: int
    period: int = Field(gt=0)
    cost_min: int = Field(ge=0)
    cost_max: int = Field(ge=0)
    deadline: Optional[int] = Field(default=None, gt=0)
    offset: int = Field(default=0, ge=0)
    jitter: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_cost(self) -> "PeriodicTask":
        if self.cost_min > self.cost_max:
            raise ValueError(f"task {self.id}: cost min {self.cost_min} exceeds cost max {self.cost_max}")
        return self

    @property
    def relative_deadline(self) -> int:
        return self.period if self.deadline is None else self.deadline

    def releases(self, horizon: int) -> list[int]:
        return list(range(self.offset, horizon, self.period))


def expand_periodic_tasks(
    tasks: Iterable[PeriodicTask],
    horizon: int,
    policy: Literal["rm", "edf"] = "rm",
) -> Workload:
    """Create one job per release in ``[0, horizon)``.

    ``rm`` ranks tasks by period (ties by id) and uses the rank as priority;
    ``edf`` uses each job's absolute deadline.
    """
    if horizon <= 0:
        raise ValueError("horizon must be > 0")
    if policy not in {"rm", "edf"}:
        raise ValueError(f"unknown priority policy {policy}")

    ordered = sorted(tasks, key=lambda task: (task.period, task.id))
    rank = {task.id: position for position, task in enumerate(ordered, start=1)}
    jobs: list[Job] = []
    for task in ordered:
        for job_id, release in enumerate(task.releases(horizon), start=1):
            deadline = release + task.relative_deadline
            jobs.append(
                Job.create(
                    task.id,
                    job_id,
                    (release, release + task.jitter),
                    (task.cost_min, task.cost_max),
                    deadline,
                    rank[task.id] if policy == "rm" else deadline,
                )
            )
    return Workload(jobs)
