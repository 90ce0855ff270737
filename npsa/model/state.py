"""Exploration graph nodes and the merge rule."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .time import Interval


@dataclass(frozen=True, slots=True)
class ScheduleState:
    """All executions that finished exactly ``scheduled`` with the core free within ``availability``."""

    scheduled: frozenset[int]
    availability: Interval

    @classmethod
    def initial(cls) -> "ScheduleState":
        return cls(scheduled=frozenset(), availability=Interval(0, 0))

    @property
    def depth(self) -> int:
        return len(self.scheduled)

    @property
    def signature(self) -> frozenset[int]:
        return self.scheduled

    def is_scheduled(self, job_index: int) -> bool:
        return job_index in self.scheduled

    def successor(self, job_index: int, finish: Interval) -> "ScheduleState":
        return ScheduleState(scheduled=self.scheduled | {job_index}, availability=finish)

    def can_merge_with(self, other: "ScheduleState") -> bool:
        return self.scheduled == other.scheduled and self.availability.touches(other.availability)

    def merged_with(self, other: "ScheduleState") -> "ScheduleState":
        if not self.can_merge_with(other):
            raise ValueError("states with different signatures or disjoint availability cannot merge")
        return ScheduleState(
            scheduled=self.scheduled,
            availability=self.availability | other.availability,
        )


def merge_into(bucket: list[ScheduleState], state: ScheduleState) -> tuple[int, bool]:
    """Insert ``state`` into a same-signature bucket, coalescing to a fixpoint.

    Returns the bucket slot holding the result and whether a merge happened.
    """
    # Bucket entries never touch each other, so one pass reaches the fixpoint.
    current = state
    slot = -1
    idx = 0
    while idx < len(bucket):
        if not bucket[idx].can_merge_with(current):
            idx += 1
            continue
        current = bucket[idx].merged_with(current)
        if slot < 0:
            slot = idx
            idx += 1
        else:
            del bucket[idx]
        bucket[slot] = current
    if slot < 0:
        bucket.append(current)
        return len(bucket) - 1, False
    return slot, True


def merge_states(states: Iterable[ScheduleState]) -> list[ScheduleState]:
    """Coalesce states sharing a signature; idempotent and order-preserving per signature."""
    buckets: dict[frozenset[int], list[ScheduleState]] = {}
    for state in states:
        merge_into(buckets.setdefault(state.signature, []), state)
    return [state for bucket in buckets.values() for state in bucket]
