"""Immutable job description."""

from __future__ import annotations

from functools import cached_property

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .time import Interval, Time


class Job(BaseModel):
    """One job instance: arrival window, cost window, deadline and priority.

    A smaller ``priority`` value means a higher priority. Workloads that
    encode EDF simply use the absolute deadline as priority value.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    task_id: int
    job_id: int
    arrival_min: int = Field(ge=0)
    arrival_max: int = Field(ge=0)
    cost_min: int = Field(ge=0)
    cost_max: int = Field(ge=0)
    deadline: int
    priority: int

    @model_validator(mode="after")
    def validate_windows(self) -> "Job":
        if self.arrival_min > self.arrival_max:
            raise ValueError(
                f"job T{self.task_id}J{self.job_id}: arrival min {self.arrival_min} "
                f"exceeds arrival max {self.arrival_max}"
            )
        if self.cost_min > self.cost_max:
            raise ValueError(
                f"job T{self.task_id}J{self.job_id}: cost min {self.cost_min} "
                f"exceeds cost max {self.cost_max}"
            )
        return self

    @classmethod
    def create(
        cls,
        task_id: int,
        job_id: int,
        arrival: Interval | tuple[int, int],
        cost: Interval | tuple[int, int],
        deadline: int,
        priority: int,
    ) -> "Job":
        arrival_lo, arrival_hi = _bounds(arrival)
        cost_lo, cost_hi = _bounds(cost)
        return cls(
            task_id=task_id,
            job_id=job_id,
            arrival_min=arrival_lo,
            arrival_max=arrival_hi,
            cost_min=cost_lo,
            cost_max=cost_hi,
            deadline=deadline,
            priority=priority,
        )

    @property
    def key(self) -> tuple[int, int]:
        return (self.task_id, self.job_id)

    @property
    def label(self) -> str:
        return f"T{self.task_id}J{self.job_id}"

    @cached_property
    def arrival(self) -> Interval:
        return Interval(self.arrival_min, self.arrival_max)

    @cached_property
    def cost(self) -> Interval:
        return Interval(self.cost_min, self.cost_max)

    def priority_key(self) -> tuple[int, int, int]:
        """Sortable key. Lower tuple = higher priority."""
        return (self.priority, self.task_id, self.job_id)

    def priority_exceeds(self, other: "Job") -> bool:
        return self.priority_key() < other.priority_key()

    def exceeds_deadline(self, t: Time) -> bool:
        return t > self.deadline


def _bounds(window: Interval | tuple[int, int]) -> tuple[int, int]:
    if isinstance(window, Interval):
        return int(window.lo), int(window.hi)
    lo, hi = window
    return lo, hi
