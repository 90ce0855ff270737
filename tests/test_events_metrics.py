from __future__ import annotations

import json

from npsa.core import StateSpace, Verdict, explore
from npsa.events import EventBus, EventType, ExplorationEvent
from npsa.metrics import ExplorationMetrics
from npsa.model import AnalysisOptions, Job, Workload


def _two_jittered_jobs() -> Workload:
    return Workload(
        [
            Job.create(1, 1, (0, 1), (1, 1), 10, 1),
            Job.create(2, 1, (0, 1), (1, 1), 10, 2),
        ]
    )


def test_event_bus_without_handlers_is_noop() -> None:
    bus = EventBus()
    assert bus.has_handlers is False
    assert bus.publish(event_type=EventType.EXPLORATION_STARTED, depth=0) is None


def test_event_bus_assigns_sequence_and_deduplicates_handlers() -> None:
    bus = EventBus()
    seen: list[ExplorationEvent] = []
    bus.subscribe(seen.append)
    bus.subscribe(seen.append)

    bus.publish(event_type=EventType.EXPLORATION_STARTED, depth=0)
    event = bus.publish(event_type=EventType.JOB_DISPATCHED, depth=1, job="T1J1", payload={"start": [0, 1]})

    assert len(seen) == 2
    assert event is not None
    assert event.event_id == "evt-00000001"
    assert event.seq == 1
    assert json.loads(event.to_json())["type"] == "JobDispatched"

    bus.reset()
    assert bus.has_handlers is False


def test_single_job_event_stream() -> None:
    events: list[ExplorationEvent] = []
    workload = Workload([Job.create(1, 1, (0, 0), (2, 2), 5, 1)])
    explore(workload, subscribers=[events.append])
    assert [event.type for event in events] == [
        EventType.EXPLORATION_STARTED,
        EventType.FRONTIER_EXPANDED,
        EventType.JOB_DISPATCHED,
        EventType.FRONTIER_EXPANDED,
        EventType.EXPLORATION_FINISHED,
    ]
    dispatched = events[2]
    assert dispatched.job == "T1J1"
    assert dispatched.payload == {"start": [0, 0], "finish": [2, 2]}
    assert events[-1].payload["verdict"] == "schedulable"
    assert [event.seq for event in events] == list(range(5))


def test_metrics_follow_merging_exploration() -> None:
    metrics = ExplorationMetrics()
    result = explore(_two_jittered_jobs(), metrics=[metrics])
    report = metrics.report()

    assert result.verdict == Verdict.SCHEDULABLE
    assert result.num_merges == 1
    assert report["verdict"] == "schedulable"
    assert report["merges"] == 1
    assert report["states"] == result.num_states == 4
    assert report["edges"] == result.num_edges == 4
    assert report["max_width"] == 2
    assert report["deadline_miss_count"] == 0
    assert report["limit_reached"] is None


def test_naive_exploration_keeps_every_path() -> None:
    metrics = ExplorationMetrics()
    result = explore(_two_jittered_jobs(), AnalysisOptions(be_naive=True), metrics=[metrics])
    assert result.num_states == 5
    assert result.num_merges == 0
    assert metrics.report()["merges"] == 0


def test_metrics_record_misses_and_limits() -> None:
    metrics = ExplorationMetrics()
    workload = Workload(
        [
            Job.create(1, 1, (0, 0), (5, 5), 10, 10),
            Job.create(2, 1, (0, 0), (8, 8), 12, 12),
        ]
    )
    space = StateSpace(workload, iip="cw-edf", metrics=[metrics])
    space.run()
    report = space.metric_report()
    assert report["dead_ends"] == 1
    assert report["missed_jobs"] == ["T1J1"]
    assert report["verdict"] == "not_schedulable"

    metrics.reset()
    explore(_two_jittered_jobs(), AnalysisOptions(max_depth=1), metrics=[metrics])
    assert metrics.report()["limit_reached"] == "max_depth"
    assert metrics.report()["verdict"] == "inconclusive"
