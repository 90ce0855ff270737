"""Default metrics implementation."""

from __future__ import annotations

from collections import defaultdict

from npsa.events import EventType, ExplorationEvent

from .base import IMetric


class ExplorationMetrics(IMetric):
    """Aggregate exploration statistics from the event stream."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._states = 0
        self._max_width = 0
        self._max_depth = 0
        self._edges = 0
        self._merges = 0
        self._dead_ends = 0
        self._missed_jobs: set[str] = set()
        self._dispatches_per_job: dict[str, int] = defaultdict(int)
        self._limit: str | None = None
        self._verdict: str | None = None
        self._event_count = 0

    def consume(self, event: ExplorationEvent) -> None:
        self._event_count += 1
        self._max_depth = max(self._max_depth, event.depth)

        if event.type == EventType.FRONTIER_EXPANDED:
            width = event.payload.get("width")
            if isinstance(width, int):
                self._states += width
                self._max_width = max(self._max_width, width)

        elif event.type == EventType.JOB_DISPATCHED:
            self._edges += 1
            if event.job:
                self._dispatches_per_job[event.job] += 1

        elif event.type == EventType.STATES_MERGED:
            self._merges += 1

        elif event.type == EventType.DEADLINE_MISS:
            if event.job:
                self._missed_jobs.add(event.job)

        elif event.type == EventType.DEAD_END:
            self._dead_ends += 1
            if event.job:
                self._missed_jobs.add(event.job)

        elif event.type == EventType.LIMIT_REACHED:
            limit = event.payload.get("limit")
            self._limit = str(limit) if limit is not None else None

        elif event.type == EventType.EXPLORATION_FINISHED:
            verdict = event.payload.get("verdict")
            self._verdict = str(verdict) if verdict is not None else None

    def report(self) -> dict:
        busiest = max(self._dispatches_per_job.values(), default=0)
        return {
            "verdict": self._verdict,
            "states": self._states,
            "edges": self._edges,
            "merges": self._merges,
            "max_width": self._max_width,
            "max_depth": self._max_depth,
            "dead_ends": self._dead_ends,
            "deadline_miss_count": len(self._missed_jobs),
            "missed_jobs": sorted(self._missed_jobs),
            "max_dispatches_per_job": busiest,
            "limit_reached": self._limit,
            "event_count": self._event_count,
        }
