"""I/O exports."""

from .errors import ConfigError, ValidationIssue
from .jobs_csv import CSV_COLUMNS, dump_workload, load_workload, parse_workload
from .loader import AnalysisRequest, AnalysisSpec, ConfigLoader, PeriodicSetSpec
from .periodic import PeriodicTask, expand_periodic_tasks
from .schema import CONFIG_SCHEMA

__all__ = [
    "AnalysisRequest",
    "AnalysisSpec",
    "CONFIG_SCHEMA",
    "CSV_COLUMNS",
    "ConfigError",
    "ConfigLoader",
    "PeriodicSetSpec",
    "PeriodicTask",
    "ValidationIssue",
    "dump_workload",
    "expand_periodic_tasks",
    "load_workload",
    "parse_workload",
]
