"""Reachable-state exploration for non-preemptive uniprocessor job sets."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import threading
import time
from typing import Callable, Optional, Union

from npsa.events import EventBus, EventType, ExplorationEvent
from npsa.iip import IdleTimePolicy, IIPKind, create_iip, resolve_iip_kind
from npsa.metrics import IMetric
from npsa.model import (
    EPSILON,
    INFINITY,
    AnalysisOptions,
    Interval,
    Job,
    ScheduleState,
    SchedulingProblem,
    Time,
    Workload,
    is_infinity,
    merge_into,
)

from .lookup import JobTables
from .result import DeadlineMiss, ExplorationResult, MissReason, Verdict


@dataclass(frozen=True, slots=True)
class Transition:
    job_index: int
    start: Interval
    finish: Interval
    target: ScheduleState


@dataclass(slots=True)
class Expansion:
    state: ScheduleState
    transitions: list[Transition] = field(default_factory=list)
    misses: list[DeadlineMiss] = field(default_factory=list)


class StateSpace:
    """Explore every dispatch order a JLFP scheduler with an IIP can produce.

    Both modes share ``expand``; naive mode keeps every successor, merging
    mode coalesces successors with the same set of scheduled jobs whose
    availability intervals overlap or touch.
    """

    def __init__(
        self,
        workload: Workload,
        *,
        iip: Union[IIPKind, str] = IIPKind.NONE,
        options: AnalysisOptions | None = None,
        metrics: list[IMetric] | None = None,
    ) -> None:
        self._workload = workload
        self._options = options or AnalysisOptions()
        self._tables = JobTables.build(workload)
        self._iip_kind = resolve_iip_kind(iip)
        self._iip: IdleTimePolicy = create_iip(self._iip_kind, self._tables)
        self._event_bus = EventBus()
        self._metrics = list(metrics or [])
        for metric in self._metrics:
            self._event_bus.subscribe(metric.consume)

    @property
    def workload(self) -> Workload:
        return self._workload

    @property
    def options(self) -> AnalysisOptions:
        return self._options

    @property
    def iip(self) -> IdleTimePolicy:
        return self._iip

    def subscribe(self, handler: Callable[[ExplorationEvent], None]) -> None:
        self._event_bus.subscribe(handler)

    def metric_report(self) -> dict:
        report: dict = {}
        for metric in self._metrics:
            report.update(metric.report())
        return report

    # ------------------------------------------------------------------
    # driver

    def run(self) -> ExplorationResult:
        options = self._options
        jobs = self._tables.jobs
        started = time.process_time()
        finish_times: list[Optional[Interval]] = [None] * len(jobs)
        misses: list[DeadlineMiss] = []
        num_states = num_edges = num_merges = max_width = 0
        timed_out = False
        limited = False
        done = threading.Event()

        self._publish(
            EventType.EXPLORATION_STARTED,
            depth=0,
            payload={"jobs": len(jobs), "iip": self._iip_kind.value, "naive": options.be_naive},
        )

        frontier = [ScheduleState.initial()]
        depth = 0
        executor = (
            ThreadPoolExecutor(max_workers=options.num_workers, thread_name_prefix="npsa-expand")
            if options.num_workers > 1
            else None
        )
        try:
            while frontier and depth < len(jobs):
                if options.max_depth and depth >= options.max_depth:
                    limited = True
                    self._publish(EventType.LIMIT_REACHED, depth=depth, payload={"limit": "max_depth"})
                    break

                num_states += len(frontier)
                max_width = max(max_width, len(frontier))
                self._publish(EventType.FRONTIER_EXPANDED, depth=depth, payload={"width": len(frontier)})

                next_frontier: list[ScheduleState] = []
                buckets: dict[frozenset[int], list[ScheduleState]] = {}
                for expansion in self._expansions(frontier, done, executor):
                    if self._out_of_time(started):
                        timed_out = True
                        done.set()
                        self._publish(EventType.LIMIT_REACHED, depth=depth, payload={"limit": "timeout"})
                        break
                    if expansion is None:
                        continue

                    for transition in expansion.transitions:
                        num_edges += 1
                        previous = finish_times[transition.job_index]
                        finish_times[transition.job_index] = (
                            transition.finish if previous is None else previous | transition.finish
                        )
                        self._publish(
                            EventType.JOB_DISPATCHED,
                            depth=depth,
                            job=jobs[transition.job_index].label,
                            payload={
                                "start": _as_list(transition.start),
                                "finish": _as_list(transition.finish),
                            },
                        )
                        if options.be_naive:
                            next_frontier.append(transition.target)
                            continue
                        bucket = buckets.setdefault(transition.target.signature, [])
                        _, merged = merge_into(bucket, transition.target)
                        if merged:
                            num_merges += 1
                            self._publish(
                                EventType.STATES_MERGED,
                                depth=depth + 1,
                                job=jobs[transition.job_index].label,
                                payload={"bucket_size": len(bucket)},
                            )

                    for miss in expansion.misses:
                        misses.append(miss)
                        self._publish(
                            EventType.DEAD_END if miss.reason == MissReason.DEAD_END else EventType.DEADLINE_MISS,
                            depth=miss.depth,
                            job=miss.label,
                            payload=miss.to_dict(),
                        )
                    if misses and options.early_exit:
                        break

                if timed_out or (misses and options.early_exit):
                    break
                if not options.be_naive:
                    next_frontier = [state for bucket in buckets.values() for state in bucket]
                frontier = next_frontier
                depth += 1
            else:
                if depth == len(jobs):
                    num_states += len(frontier)
                    max_width = max(max_width, len(frontier))
                    self._publish(EventType.FRONTIER_EXPANDED, depth=depth, payload={"width": len(frontier)})
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)

        if misses:
            verdict = Verdict.NOT_SCHEDULABLE
        elif timed_out or limited:
            verdict = Verdict.INCONCLUSIVE
        else:
            verdict = Verdict.SCHEDULABLE

        result = ExplorationResult(
            workload=self._workload,
            iip=self._iip_kind,
            be_naive=options.be_naive,
            verdict=verdict,
            finish_times=finish_times,
            misses=misses,
            num_states=num_states,
            num_edges=num_edges,
            num_merges=num_merges,
            max_width=max_width,
            depth=depth,
            cpu_time=time.process_time() - started,
            timed_out=timed_out,
        )
        self._publish(
            EventType.EXPLORATION_FINISHED,
            depth=depth,
            payload={"verdict": verdict.value, "states": num_states, "edges": num_edges},
        )
        return result

    def _expansions(
        self,
        frontier: list[ScheduleState],
        done: threading.Event,
        executor: ThreadPoolExecutor | None,
    ) -> Iterator[Optional[Expansion]]:
        if executor is None:
            return (self._guarded_expand(state, done) for state in frontier)
        return executor.map(lambda state: self._guarded_expand(state, done), frontier)

    def _guarded_expand(self, state: ScheduleState, done: threading.Event) -> Optional[Expansion]:
        if done.is_set():
            return None
        expansion = self.expand(state)
        if expansion.misses and self._options.early_exit:
            done.set()
        return expansion

    def _out_of_time(self, started: float) -> bool:
        timeout = self._options.timeout
        return bool(timeout) and time.process_time() - started > timeout

    def _publish(
        self,
        event_type: EventType,
        *,
        depth: int,
        job: str | None = None,
        payload: dict | None = None,
    ) -> None:
        if self._event_bus.has_handlers:
            self._event_bus.publish(event_type=event_type, depth=depth, job=job, payload=payload)

    # ------------------------------------------------------------------
    # transition function (pure)

    def expand(self, state: ScheduleState) -> Expansion:
        """Compute every successor of ``state`` and the misses they witness."""
        jobs = self._tables.jobs
        scheduled = state.scheduled
        pending = [idx for idx in self._tables.by_priority if idx not in scheduled]
        expansion = Expansion(state=state)
        if not pending:
            return expansion

        a_lo = state.availability.lo
        t_wc = self.certain_dispatch_time(state, pending)
        # latest arrival of any pending job with higher priority than the current one
        t_high: Time = INFINITY
        for idx in pending:
            if t_high - EPSILON < a_lo:
                break
            job = jobs[idx]
            if job.arrival_min <= t_wc:
                start = self.start_window(
                    idx,
                    scheduled,
                    max(a_lo, job.arrival_min),
                    min(t_wc, t_high - EPSILON),
                )
                if start is not None:
                    self._dispatch(expansion, idx, job, start)
            t_high = min(t_high, job.arrival_max)

        # some execution leaving the core free at a_hi never dispatches again
        if not expansion.transitions or is_infinity(t_wc):
            stranded = jobs[pending[0]]
            expansion.misses.append(
                DeadlineMiss(
                    task_id=stranded.task_id,
                    job_id=stranded.job_id,
                    deadline=stranded.deadline,
                    depth=state.depth,
                    reason=MissReason.DEAD_END,
                )
            )
        return expansion

    def _dispatch(self, expansion: Expansion, idx: int, job: Job, start: Interval) -> None:
        state = expansion.state
        finish = Interval(start.lo + job.cost_min, start.hi + job.cost_max)
        target = state.successor(idx, finish)
        expansion.transitions.append(Transition(job_index=idx, start=start, finish=finish, target=target))

        if job.exceeds_deadline(finish.hi):
            expansion.misses.append(
                DeadlineMiss(
                    task_id=job.task_id,
                    job_id=job.job_id,
                    deadline=job.deadline,
                    depth=target.depth,
                    reason=MissReason.FINISH,
                    finish=finish,
                )
            )

        # jobs left behind whose deadline passes before the core can be free again
        for other_idx in self._tables.deadlines_within(state.availability.lo, finish.lo):
            if other_idx in target.scheduled:
                continue
            other = self._tables.jobs[other_idx]
            expansion.misses.append(
                DeadlineMiss(
                    task_id=other.task_id,
                    job_id=other.job_id,
                    deadline=other.deadline,
                    depth=target.depth,
                    reason=MissReason.SKIPPED,
                )
            )
            break

    def certain_dispatch_time(self, state: ScheduleState, pending: list[int]) -> Time:
        """Earliest time by which the scheduler has certainly dispatched some job."""
        jobs = self._tables.jobs
        t = state.availability.hi
        if not self._iip.can_block:
            return max(t, min(jobs[idx].arrival_max for idx in pending))
        while True:
            if self._dispatch_is_certain(t, pending, state.scheduled):
                return t
            t = self._tables.next_breakpoint(t)
            if is_infinity(t):
                return INFINITY

    def _dispatch_is_certain(self, t: Time, pending: list[int], scheduled: frozenset[int]) -> bool:
        # Every job that may be the top pending job at t must be let through by the IIP.
        for idx in pending:
            job = self._tables.jobs[idx]
            if job.arrival_min > t:
                continue
            if t > self._iip.latest_start(idx, t, scheduled):
                return False
            if job.arrival_max <= t:
                return True
        return False

    def start_window(
        self,
        job_index: int,
        scheduled: frozenset[int],
        est: Time,
        lst: Time,
    ) -> Optional[Interval]:
        """Hull of the times in ``[est, lst]`` at which the IIP lets the job start."""
        if est > lst:
            return None
        if not self._iip.can_block:
            return Interval(est, lst)

        first: Optional[Time] = None
        last: Optional[Time] = None
        t = est
        while t <= lst:
            segment_end = min(lst, self._tables.next_breakpoint(t) - EPSILON)
            latest = self._iip.latest_start(job_index, t, scheduled)
            if t <= latest:
                if first is None:
                    first = t
                last = min(segment_end, latest)
            if is_infinity(segment_end):
                break
            t = segment_end + EPSILON
        if first is None or last is None:
            return None
        return Interval(first, last)


def explore(
    target: Union[Workload, SchedulingProblem, Iterable[Job]],
    options: AnalysisOptions | None = None,
    *,
    iip: Union[IIPKind, str] = IIPKind.NONE,
    metrics: list[IMetric] | None = None,
    subscribers: Iterable[Callable[[ExplorationEvent], None]] = (),
) -> ExplorationResult:
    """Run the exploration selected by ``options`` (state merging by default)."""
    space = StateSpace(_as_workload(target), iip=iip, options=options, metrics=metrics)
    for handler in subscribers:
        space.subscribe(handler)
    return space.run()


def explore_naively(
    target: Union[Workload, SchedulingProblem, Iterable[Job]],
    *,
    iip: Union[IIPKind, str] = IIPKind.NONE,
    metrics: list[IMetric] | None = None,
    subscribers: Iterable[Callable[[ExplorationEvent], None]] = (),
) -> ExplorationResult:
    """Run the exploration without state merging."""
    return explore(
        target,
        AnalysisOptions(be_naive=True),
        iip=iip,
        metrics=metrics,
        subscribers=subscribers,
    )


def _as_workload(target: Union[Workload, SchedulingProblem, Iterable[Job]]) -> Workload:
    if isinstance(target, Workload):
        return target
    if isinstance(target, SchedulingProblem):
        return target.workload
    return Workload(target)


def _as_list(interval: Interval) -> list:
    return [interval.lo, "inf" if is_infinity(interval.hi) else interval.hi]
