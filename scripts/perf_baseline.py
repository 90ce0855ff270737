"""Baseline performance gate: naive vs. merging exploration on periodic task sets."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import random
import time

from npsa.core import explore
from npsa.io import ConfigLoader
from npsa.model import AnalysisOptions


PERIODS: tuple[int, ...] = (10, 20, 30, 40, 60)


def _parse_int_list(raw: str) -> list[int]:
    return [int(item.strip()) for item in raw.split(",") if item.strip()]


def _parse_float_list(raw: str | None) -> list[float]:
    if raw is None or not raw.strip():
        return []
    return [float(item.strip()) for item in raw.split(",") if item.strip()]


def _build_payload(task_count: int, seed: int, iip: str) -> dict:
    rng = random.Random(seed)
    tasks: list[dict] = []
    for idx in range(task_count):
        period = PERIODS[idx % len(PERIODS)]
        cost_max = max(1, period // (2 * task_count))
        tasks.append(
            {
                "id": idx + 1,
                "period": period,
                "cost_min": max(0, cost_max - 1),
                "cost_max": cost_max,
                "jitter": rng.randint(0, 2),
            }
        )
    return {
        "version": "0.1",
        "periodic": {"horizon": 60, "policy": "rm", "tasks": tasks},
        "iip": iip,
    }


def _run_mode(loader: ConfigLoader, payload: dict, *, naive: bool, timeout: float) -> dict:
    request = loader.build_request(loader.load_data(payload))
    options = AnalysisOptions(be_naive=naive, timeout=timeout)
    started = time.perf_counter()
    result = explore(request.problem, options, iip=request.iip)
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    return {
        "verdict": result.verdict.value,
        "wall_time_ms": elapsed_ms,
        "states": result.num_states,
        "edges": result.num_edges,
        "max_width": result.max_width,
        "timed_out": result.timed_out,
    }


def _run_case(task_count: int, seed: int, iip: str, timeout: float) -> dict:
    loader = ConfigLoader()
    payload = _build_payload(task_count, seed, iip)
    return {
        "task_count": task_count,
        "iip": iip,
        "naive": _run_mode(loader, payload, naive=True, timeout=timeout),
        "merged": _run_mode(loader, payload, naive=False, timeout=timeout),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run baseline perf checks for naive and merging exploration")
    parser.add_argument(
        "--tasks",
        default="2,3,4",
        help="comma-separated task counts to run, e.g. 2,3,4",
    )
    parser.add_argument(
        "--max-wall-ms",
        default="",
        help="comma-separated merging wall-time thresholds, aligned with --tasks",
    )
    parser.add_argument("--iip", default="none", help="idle-time insertion policy")
    parser.add_argument("--timeout", type=float, default=30.0, help="CPU time limit per exploration")
    parser.add_argument("--seed", type=int, default=7, help="release jitter seed")
    parser.add_argument(
        "--output",
        default="artifacts/perf/perf-baseline.json",
        help="where to write json report",
    )
    args = parser.parse_args(argv)

    task_counts = _parse_int_list(args.tasks)
    thresholds = _parse_float_list(args.max_wall_ms)
    if thresholds and len(thresholds) != len(task_counts):
        raise ValueError("--max-wall-ms length must match --tasks length")

    cases: list[dict] = []
    failed = False
    for idx, task_count in enumerate(task_counts):
        case = _run_case(task_count, args.seed, args.iip, args.timeout)
        max_wall = thresholds[idx] if thresholds else None
        case["max_wall_ms"] = max_wall
        if max_wall is not None:
            case["pass"] = case["merged"]["wall_time_ms"] <= max_wall
            failed = failed or not case["pass"]
        else:
            case["pass"] = True
        cases.append(case)
        verdict = "PASS" if case["pass"] else "FAIL"
        print(
            f"[{verdict}] tasks={task_count} "
            f"naive_states={case['naive']['states']} merged_states={case['merged']['states']} "
            f"merged_wall_ms={case['merged']['wall_time_ms']:.2f}"
        )

    report = {"seed": args.seed, "iip": args.iip, "cases": cases}
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(report, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"[INFO] wrote perf report: {output_path}")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
