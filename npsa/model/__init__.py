"""Model package exports."""

from .job import Job
from .state import ScheduleState, merge_into, merge_states
from .time import EPSILON, INFINITY, Interval, Time, is_infinity, merge, overlaps
from .workload import AnalysisOptions, SchedulingProblem, Workload, WorkloadError

__all__ = [
    "AnalysisOptions",
    "EPSILON",
    "INFINITY",
    "Interval",
    "Job",
    "ScheduleState",
    "SchedulingProblem",
    "Time",
    "Workload",
    "WorkloadError",
    "is_infinity",
    "merge",
    "merge_into",
    "merge_states",
    "overlaps",
]
