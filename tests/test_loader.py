from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from npsa.iip import IIPKind
from npsa.io import AnalysisSpec, ConfigError, ConfigLoader


JOBS_CSV = """Task ID,Job ID,Arrival min,Arrival max,Cost min,Cost max,Deadline,Priority
1,1,0,0,1,1,10,1
2,1,0,0,2,3,20,2
"""


def _base_payload() -> dict[str, Any]:
    return {
        "version": "0.1",
        "jobs": [
            {
                "task_id": 1,
                "job_id": 1,
                "arrival_min": 0,
                "arrival_max": 0,
                "cost_min": 1,
                "cost_max": 1,
                "deadline": 10,
                "priority": 1,
            }
        ],
        "iip": "p-rm",
        "options": {"be_naive": True, "timeout": 5},
    }


def _write_yaml(path: Path, payload: dict[str, Any]) -> None:
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")


def test_load_raises_when_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="config file not found"):
        ConfigLoader().load(str(tmp_path / "missing.yaml"))


def test_load_raises_on_invalid_yaml_syntax(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("version: [", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid config syntax"):
        ConfigLoader().load(str(path))


def test_load_raises_on_invalid_json_syntax(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid config syntax"):
        ConfigLoader().load(str(path))


def test_load_raises_when_root_is_not_object(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="config root must be object"):
        ConfigLoader().load(str(path))


def test_load_data_with_inline_jobs() -> None:
    spec = ConfigLoader().load_data(_base_payload())
    assert isinstance(spec, AnalysisSpec)
    assert spec.iip == IIPKind.PRECAUTIOUS_RM
    assert spec.options.be_naive is True
    assert spec.options.timeout == 5
    assert spec.options.early_exit is True

    request = ConfigLoader().build_request(spec)
    assert len(request.problem.workload) == 1
    assert request.iip == IIPKind.PRECAUTIOUS_RM


def test_load_request_resolves_csv_relative_to_config(tmp_path: Path) -> None:
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "jobs.csv").write_text(JOBS_CSV, encoding="utf-8")
    path = tmp_path / "analysis.yaml"
    _write_yaml(path, {"version": "0.1", "jobs": "data/jobs.csv", "iip": "cw-edf"})

    request = ConfigLoader().load_request(str(path))
    assert len(request.problem.workload) == 2
    assert request.iip == IIPKind.CRITICAL_WINDOW
    assert request.options.be_naive is False


def test_load_request_expands_periodic_tasks(tmp_path: Path) -> None:
    path = tmp_path / "analysis.json"
    payload = {
        "version": "0.1",
        "periodic": {
            "horizon": 60,
            "policy": "rm",
            "tasks": [
                {"id": 1, "period": 10, "cost_min": 1, "cost_max": 1},
                {"id": 2, "period": 30, "cost_min": 8, "cost_max": 8},
                {"id": 3, "period": 60, "cost_min": 17, "cost_max": 17},
            ],
        },
    }
    path.write_text(json.dumps(payload), encoding="utf-8")
    request = ConfigLoader().load_request(str(path))
    assert len(request.problem.workload) == 9
    assert request.iip == IIPKind.NONE


def test_load_request_reports_missing_csv(tmp_path: Path) -> None:
    path = tmp_path / "analysis.yaml"
    _write_yaml(path, {"version": "0.1", "jobs": "nowhere.csv"})
    with pytest.raises(ConfigError, match="job set file not found"):
        ConfigLoader().load_request(str(path))


@pytest.mark.parametrize(
    ("mutate", "match"),
    [
        (lambda p: p.update({"unknown": 1}), "schema validation failed"),
        (lambda p: p.update({"periodic": {"horizon": 10, "tasks": []}}), "schema validation failed"),
        (lambda p: p.pop("jobs"), "schema validation failed"),
        (lambda p: p["options"].update({"num_workers": 0}), r"options\.num_workers"),
        (lambda p: p["jobs"][0].update({"cost_min": "1"}), "schema validation failed"),
    ],
)
def test_load_data_rejects_schema_violations(mutate: Any, match: str) -> None:
    payload = _base_payload()
    mutate(payload)
    with pytest.raises(ConfigError, match=match):
        ConfigLoader().load_data(payload)


def test_load_data_rejects_unknown_iip() -> None:
    payload = _base_payload()
    payload["iip"] = "lottery"
    with pytest.raises(ConfigError, match="unknown idle-time insertion policy"):
        ConfigLoader().load_data(payload)


def test_load_data_rejects_invalid_job_windows() -> None:
    payload = _base_payload()
    payload["jobs"][0]["arrival_min"] = 5
    with pytest.raises(ConfigError, match="arrival min 5 exceeds arrival max 0"):
        ConfigLoader().load_data(payload)


def test_load_data_rejects_unsupported_version() -> None:
    payload = _base_payload()
    payload["version"] = "9.9"
    with pytest.raises(ConfigError, match="unsupported config version '9.9'"):
        ConfigLoader().load_data(payload)


def test_build_request_rejects_duplicate_inline_jobs() -> None:
    payload = _base_payload()
    payload["jobs"].append(dict(payload["jobs"][0]))
    spec = ConfigLoader().load_data(payload)
    with pytest.raises(ConfigError, match="duplicate job T1J1"):
        ConfigLoader().build_request(spec)


def test_save_roundtrip_and_validate(tmp_path: Path) -> None:
    loader = ConfigLoader()
    spec = loader.load_data(_base_payload())
    path = tmp_path / "saved.yaml"
    loader.save(spec, str(path))

    reloaded = loader.load(str(path))
    assert reloaded == spec
    assert loader.validate(str(path)) == []

    issues = loader.validate(str(tmp_path / "missing.yaml"))
    assert len(issues) == 1
    assert "config file not found" in issues[0].message
