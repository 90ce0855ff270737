"""CLI entrypoint for schedulability analysis and validation."""

from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path
from typing import Any

from npsa.analysis import build_compare_report, compare_report_to_rows, cross_check_modes
from npsa.core import StateSpace, Verdict
from npsa.io import AnalysisRequest, ConfigError, ConfigLoader, load_workload
from npsa.iip import IIPKind, resolve_iip_kind
from npsa.metrics import ExplorationMetrics
from npsa.model import AnalysisOptions, SchedulingProblem


def _write_jsonl(path: str, rows: list[dict[str, Any]]) -> None:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        for row in rows:
            f.write(json.dumps(row, ensure_ascii=False) + "\n")


def _write_json(path: str, payload: dict[str, Any]) -> None:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def _write_rows_csv(path: str, rows: list[dict[str, Any]]) -> None:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    fieldnames: list[str] = []
    for row in rows:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)
    with output.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


def _read_json(path: str) -> dict[str, Any]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ConfigError(f"metrics file must be object: {path}")
    return payload


def _load_request(args: argparse.Namespace) -> AnalysisRequest:
    if args.config:
        request = ConfigLoader().load_request(args.config)
    else:
        request = AnalysisRequest(
            problem=SchedulingProblem(load_workload(args.jobs)),
            iip=IIPKind.NONE,
            options=AnalysisOptions(),
        )
    if getattr(args, "iip", None):
        try:
            request.iip = resolve_iip_kind(args.iip)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
    return request


def _apply_overrides(options: AnalysisOptions, args: argparse.Namespace) -> AnalysisOptions:
    updates: dict[str, Any] = {}
    if getattr(args, "naive", False):
        updates["be_naive"] = True
    if getattr(args, "continue_after_miss", False):
        updates["early_exit"] = False
    if args.timeout is not None:
        updates["timeout"] = args.timeout
    if args.max_depth is not None:
        updates["max_depth"] = args.max_depth
    if args.workers is not None:
        updates["num_workers"] = args.workers
    if not updates:
        return options
    try:
        return AnalysisOptions.model_validate({**options.model_dump(), **updates})
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def cmd_validate(args: argparse.Namespace) -> int:
    source = args.config or args.jobs
    try:
        request = _load_request(args)
    except ConfigError as exc:
        print(f"[ERROR] {source}: {exc}")
        return 1
    print(
        f"[OK] validation passed, jobs={len(request.problem.workload)}, "
        f"tasks={len(request.problem.workload.task_ids())}, iip={request.iip.value}"
    )
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    try:
        request = _load_request(args)
        options = _apply_overrides(request.options, args)
    except ConfigError as exc:
        print(f"[ERROR] {exc}")
        return 1

    metrics = ExplorationMetrics()
    space = StateSpace(request.problem.workload, iip=request.iip, options=options, metrics=[metrics])
    events: list[dict[str, Any]] = []
    if args.events_out:
        space.subscribe(lambda event: events.append(event.model_dump(mode="json")))
    result = space.run()

    if args.events_out:
        _write_jsonl(args.events_out, events)
    if args.metrics_out:
        _write_json(args.metrics_out, {**result.metric_report(), **_event_metrics(metrics.report())})
    if args.rta_out:
        _write_rows_csv(args.rta_out, result.response_time_rows())

    print(
        f"[OK] verdict={result.verdict.value} states={result.num_states} "
        f"edges={result.num_edges} max_width={result.max_width} "
        f"cpu_time={result.cpu_time:.3f} timed_out={result.timed_out}"
    )
    for miss in result.misses:
        print(f"  miss: {miss.label} deadline={miss.deadline} reason={miss.reason.value}")
    if args.fail_on_unschedulable and result.verdict != Verdict.SCHEDULABLE:
        return 2
    return 0


def cmd_cross_check(args: argparse.Namespace) -> int:
    try:
        request = _load_request(args)
        options = _apply_overrides(request.options, args)
    except ConfigError as exc:
        print(f"[ERROR] {exc}")
        return 1

    report = cross_check_modes(request.problem, request.iip, options)
    if args.out_json:
        _write_json(args.out_json, report)
    print(
        f"[OK] cross-check completed, naive={report['naive']['verdict']}, "
        f"merged={report['merged']['verdict']}, consistent={report['consistent']}"
    )
    if not report["consistent"]:
        print("[ERROR] merged exploration accepted a job set the naive exploration rejects")
        return 2
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    try:
        left_metrics = _read_json(args.left_metrics)
        right_metrics = _read_json(args.right_metrics)
    except Exception as exc:  # noqa: BLE001
        print(f"[ERROR] {exc}")
        return 1

    report = build_compare_report(
        left_metrics,
        right_metrics,
        left_label=args.left_label or "left",
        right_label=args.right_label or "right",
    )
    if args.out_json:
        _write_json(args.out_json, report)
    if args.out_csv:
        _write_rows_csv(args.out_csv, compare_report_to_rows(report))

    print(
        "[OK] metrics compare completed, "
        f"left={args.left_metrics}, right={args.right_metrics}, "
        f"json={args.out_json or '-'}, csv={args.out_csv or '-'}"
    )
    return 0


def _event_metrics(report: dict[str, Any]) -> dict[str, Any]:
    return {
        "dead_ends": report["dead_ends"],
        "missed_jobs": report["missed_jobs"],
        "max_dispatches_per_job": report["max_dispatches_per_job"],
        "limit_reached": report["limit_reached"],
        "event_count": report["event_count"],
    }


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-j", "--jobs", default=None, help="path to job set CSV")
    source.add_argument("-c", "--config", default=None, help="path to analysis config YAML/JSON")
    parser.add_argument("--iip", default=None, help="idle-time insertion policy: none, p-rm, cw-edf")


def _add_option_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--timeout", type=float, default=None, help="CPU time limit in seconds (0 = none)")
    parser.add_argument("--max-depth", type=int, default=None, help="depth limit (0 = none)")
    parser.add_argument("--workers", type=int, default=None, help="threads used to expand one depth level")
    parser.add_argument(
        "--continue-after-miss",
        action="store_true",
        help="keep exploring after the first deadline miss and collect all misses",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="npsa", description="Non-preemptive schedulability analysis CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="validate job set or config file")
    _add_source_arguments(validate_parser)
    validate_parser.set_defaults(func=cmd_validate)

    analyze_parser = subparsers.add_parser("analyze", help="explore the schedule state space")
    _add_source_arguments(analyze_parser)
    _add_option_arguments(analyze_parser)
    analyze_parser.add_argument("--naive", action="store_true", help="disable state merging")
    analyze_parser.add_argument("--rta-out", default=None, help="path to write response-time CSV")
    analyze_parser.add_argument("--metrics-out", default=None, help="path to write metric JSON")
    analyze_parser.add_argument("--events-out", default=None, help="path to write JSONL events")
    analyze_parser.add_argument(
        "--fail-on-unschedulable",
        action="store_true",
        help="return 2 when the verdict is not schedulable",
    )
    analyze_parser.set_defaults(func=cmd_analyze)

    cross_parser = subparsers.add_parser("cross-check", help="compare naive and merging exploration")
    _add_source_arguments(cross_parser)
    _add_option_arguments(cross_parser)
    cross_parser.add_argument("--out-json", default=None, help="cross-check report JSON path")
    cross_parser.set_defaults(func=cmd_cross_check)

    compare_parser = subparsers.add_parser("compare", help="compare two metrics json files")
    compare_parser.add_argument("--left-metrics", required=True, help="left metrics JSON path")
    compare_parser.add_argument("--right-metrics", required=True, help="right metrics JSON path")
    compare_parser.add_argument("--left-label", default="left", help="left side label")
    compare_parser.add_argument("--right-label", default="right", help="right side label")
    compare_parser.add_argument("--out-json", default=None, help="compare report JSON path")
    compare_parser.add_argument("--out-csv", default=None, help="compare rows CSV path")
    compare_parser.set_defaults(func=cmd_compare)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
