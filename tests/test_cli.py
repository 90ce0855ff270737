from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest
import yaml

from npsa.cli.main import main


RM_CSV = """Task ID,Job ID,Arrival min,Arrival max,Cost min,Cost max,Deadline,Priority
1,1,0,0,1,1,10,1
1,2,10,10,1,1,20,1
1,3,20,20,1,1,30,1
1,4,30,30,1,1,40,1
1,5,40,40,1,1,50,1
1,6,50,50,1,1,60,1
2,1,0,0,8,8,30,2
2,2,30,30,8,8,60,2
3,1,0,0,17,17,60,3
"""


@pytest.fixture
def jobs_csv(tmp_path: Path) -> Path:
    path = tmp_path / "jobs.csv"
    path.write_text(RM_CSV, encoding="utf-8")
    return path


def test_cli_validate_ok(jobs_csv: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["validate", "-j", str(jobs_csv)])
    assert code == 0
    assert "[OK] validation passed, jobs=9, tasks=3" in capsys.readouterr().out


def test_cli_validate_reports_bad_csv(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("Task ID,Job ID\n1,1\n", encoding="utf-8")
    code = main(["validate", "-j", str(path)])
    assert code == 1
    assert "[ERROR]" in capsys.readouterr().out


def test_cli_validate_rejects_unknown_iip(jobs_csv: Path) -> None:
    assert main(["validate", "-j", str(jobs_csv), "--iip", "lottery"]) == 1


def test_cli_analyze_outputs(jobs_csv: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rta_out = tmp_path / "out" / "rta.csv"
    metrics_out = tmp_path / "out" / "metrics.json"
    events_out = tmp_path / "out" / "events.jsonl"

    code = main(
        [
            "analyze",
            "-j",
            str(jobs_csv),
            "--iip",
            "p-rm",
            "--rta-out",
            str(rta_out),
            "--metrics-out",
            str(metrics_out),
            "--events-out",
            str(events_out),
        ]
    )
    assert code == 0
    assert "[OK] verdict=schedulable" in capsys.readouterr().out

    with rta_out.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert list(rows[0]) == ["Task ID", "Job ID", "BCCT", "WCCT", "BCRT", "WCRT"]
    assert len(rows) == 9

    metrics = json.loads(metrics_out.read_text(encoding="utf-8"))
    assert metrics["verdict"] == "schedulable"
    assert metrics["iip"] == "p-rm"
    assert metrics["event_count"] > 0

    first_event = json.loads(events_out.read_text(encoding="utf-8").splitlines()[0])
    assert first_event["type"] == "ExplorationStarted"


def test_cli_analyze_fail_on_unschedulable(jobs_csv: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["analyze", "-j", str(jobs_csv)]) == 0
    assert main(["analyze", "-j", str(jobs_csv), "--naive", "--fail-on-unschedulable"]) == 2
    out = capsys.readouterr().out
    assert "verdict=not_schedulable" in out
    assert "miss: T" in out


def test_cli_analyze_with_config_and_overrides(tmp_path: Path, jobs_csv: Path) -> None:
    config = tmp_path / "analysis.yaml"
    config.write_text(
        yaml.safe_dump({"version": "0.1", "jobs": jobs_csv.name, "iip": "p-rm", "options": {"be_naive": True}}),
        encoding="utf-8",
    )
    metrics_out = tmp_path / "metrics.json"
    code = main(
        [
            "analyze",
            "-c",
            str(config),
            "--workers",
            "2",
            "--continue-after-miss",
            "--metrics-out",
            str(metrics_out),
            "--fail-on-unschedulable",
        ]
    )
    assert code == 0
    metrics = json.loads(metrics_out.read_text(encoding="utf-8"))
    assert metrics["naive"] is True
    assert metrics["verdict"] == "schedulable"


def test_cli_analyze_rejects_invalid_override(jobs_csv: Path) -> None:
    assert main(["analyze", "-j", str(jobs_csv), "--workers", "0"]) == 1
    assert main(["analyze", "-j", str(jobs_csv), "--timeout", "-1"]) == 1


def test_cli_analyze_requires_single_source(jobs_csv: Path) -> None:
    with pytest.raises(SystemExit):
        main(["analyze"])
    with pytest.raises(SystemExit):
        main(["analyze", "-j", str(jobs_csv), "-c", "x.yaml"])


def test_cli_cross_check(jobs_csv: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out_json = tmp_path / "cross.json"
    code = main(["cross-check", "-j", str(jobs_csv), "--iip", "p-rm", "--out-json", str(out_json)])
    assert code == 0
    report = json.loads(out_json.read_text(encoding="utf-8"))
    assert report["consistent"] is True
    assert report["naive"]["verdict"] == "schedulable"
    assert report["merged"]["verdict"] == "schedulable"
    assert "consistent=True" in capsys.readouterr().out


def test_cli_compare_outputs(jobs_csv: Path, tmp_path: Path) -> None:
    left = tmp_path / "left.json"
    right = tmp_path / "right.json"
    assert main(["analyze", "-j", str(jobs_csv), "--naive", "--metrics-out", str(left)]) == 0
    assert main(["analyze", "-j", str(jobs_csv), "--iip", "p-rm", "--metrics-out", str(right)]) == 0

    out_json = tmp_path / "compare.json"
    out_csv = tmp_path / "compare.csv"
    code = main(
        [
            "compare",
            "--left-metrics",
            str(left),
            "--right-metrics",
            str(right),
            "--left-label",
            "rm",
            "--right-label",
            "p-rm",
            "--out-json",
            str(out_json),
            "--out-csv",
            str(out_csv),
        ]
    )
    assert code == 0
    report = json.loads(out_json.read_text(encoding="utf-8"))
    assert report["left_label"] == "rm"
    assert report["verdict_changed"] is True
    assert out_csv.read_text(encoding="utf-8").startswith("category,metric,left,right")


def test_cli_compare_reports_unreadable_metrics(tmp_path: Path) -> None:
    missing = tmp_path / "missing.json"
    assert main(["compare", "--left-metrics", str(missing), "--right-metrics", str(missing)]) == 1
