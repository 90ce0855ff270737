"""Metric comparison helpers for two exploration runs."""

from __future__ import annotations

from typing import Any


DEFAULT_SCALAR_KEYS: tuple[str, ...] = (
    "states",
    "edges",
    "merges",
    "max_width",
    "depth",
    "deadline_miss_count",
    "dead_ends",
    "cpu_time",
    "event_count",
)


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _build_scalar_rows(
    left: dict[str, Any],
    right: dict[str, Any],
    *,
    keys: tuple[str, ...],
) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for key in keys:
        if key not in left and key not in right:
            continue
        left_value = _to_float(left.get(key))
        right_value = _to_float(right.get(key))
        delta = right_value - left_value
        delta_ratio = (delta / left_value * 100.0) if abs(left_value) > 1e-12 else 0.0
        rows.append(
            {
                "metric": key,
                "left": left_value,
                "right": right_value,
                "delta": delta,
                "delta_ratio_pct": delta_ratio,
            }
        )
    return rows


def _build_miss_rows(left: dict[str, Any], right: dict[str, Any]) -> list[dict[str, Any]]:
    left_jobs = _missed_jobs(left)
    right_jobs = _missed_jobs(right)
    rows: list[dict[str, Any]] = []
    for job in sorted(left_jobs | right_jobs):
        rows.append(
            {
                "job": job,
                "left": job in left_jobs,
                "right": job in right_jobs,
            }
        )
    return rows


def _missed_jobs(report: dict[str, Any]) -> set[str]:
    missed = report.get("missed_jobs")
    if isinstance(missed, list):
        return {str(job) for job in missed}
    misses = report.get("misses")
    if isinstance(misses, list):
        return {
            f"T{item.get('task_id')}J{item.get('job_id')}"
            for item in misses
            if isinstance(item, dict)
        }
    return set()


def build_compare_report(
    left_metrics: dict[str, Any],
    right_metrics: dict[str, Any],
    *,
    left_label: str = "left",
    right_label: str = "right",
    scalar_keys: tuple[str, ...] = DEFAULT_SCALAR_KEYS,
) -> dict[str, Any]:
    """Build a deterministic metric diff report for two explorations."""

    return {
        "left_label": left_label,
        "right_label": right_label,
        "left_verdict": left_metrics.get("verdict"),
        "right_verdict": right_metrics.get("verdict"),
        "verdict_changed": left_metrics.get("verdict") != right_metrics.get("verdict"),
        "scalar_metrics": _build_scalar_rows(left_metrics, right_metrics, keys=scalar_keys),
        "missed_jobs": _build_miss_rows(left_metrics, right_metrics),
    }


def compare_report_to_rows(report: dict[str, Any]) -> list[dict[str, Any]]:
    """Flatten compare report to CSV-friendly rows."""

    rows: list[dict[str, Any]] = [
        {
            "category": "verdict",
            "metric": "verdict",
            "left": report.get("left_verdict"),
            "right": report.get("right_verdict"),
        }
    ]
    for item in report.get("scalar_metrics", []):
        if not isinstance(item, dict):
            continue
        rows.append({"category": "scalar", **item})
    for item in report.get("missed_jobs", []):
        if not isinstance(item, dict):
            continue
        rows.append({"category": "missed_job", "metric": item.get("job", ""), **item})
    return rows
