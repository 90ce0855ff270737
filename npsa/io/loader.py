"""Analysis configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Literal, Optional, Union

import jsonschema
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from npsa.iip import IIPKind, resolve_iip_kind
from npsa.model import AnalysisOptions, Job, SchedulingProblem, Workload, WorkloadError

from .errors import ConfigError, ValidationIssue
from .jobs_csv import load_workload
from .periodic import PeriodicTask, expand_periodic_tasks
from .schema import CONFIG_SCHEMA


class PeriodicSetSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    horizon: int = Field(gt=0)
    policy: Literal["rm", "edf"] = "rm"
    tasks: list[PeriodicTask] = Field(min_length=1)


class AnalysisSpec(BaseModel):
    """Validated analysis config: a job set, an IIP and exploration options."""

    model_config = ConfigDict(extra="forbid")

    version: str
    jobs: Optional[Union[str, list[Job]]] = None
    periodic: Optional[PeriodicSetSpec] = None
    iip: IIPKind = IIPKind.NONE
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)

    @field_validator("iip", mode="before")
    @classmethod
    def resolve_iip(cls, value: Any) -> IIPKind:
        if isinstance(value, str):
            return resolve_iip_kind(value)
        return value

    @model_validator(mode="after")
    def validate_source(self) -> "AnalysisSpec":
        if (self.jobs is None) == (self.periodic is None):
            raise ValueError("exactly one of jobs or periodic must be given")
        return self


@dataclass(slots=True)
class AnalysisRequest:
    """Everything needed to run one exploration."""

    problem: SchedulingProblem
    iip: IIPKind
    options: AnalysisOptions


class ConfigLoader:
    """Load and validate analysis configs from JSON/YAML files."""

    SUPPORTED_VERSION = "0.1"

    def load(self, path: str) -> AnalysisSpec:
        raw = self._read(path)
        return self.load_data(raw)

    def load_data(self, payload: dict[str, Any]) -> AnalysisSpec:
        normalized = self._normalize_version(payload)
        self._validate_schema(normalized)
        try:
            return AnalysisSpec.model_validate(normalized)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc

    def load_request(self, path: str) -> AnalysisRequest:
        spec = self.load(path)
        return self.build_request(spec, base_dir=Path(path).resolve().parent)

    def build_request(self, spec: AnalysisSpec, *, base_dir: Union[str, Path, None] = None) -> AnalysisRequest:
        workload = self.build_workload(spec, base_dir=base_dir)
        return AnalysisRequest(problem=SchedulingProblem(workload), iip=spec.iip, options=spec.options)

    @staticmethod
    def build_workload(spec: AnalysisSpec, *, base_dir: Union[str, Path, None] = None) -> Workload:
        if spec.periodic is not None:
            periodic = spec.periodic
            try:
                return expand_periodic_tasks(periodic.tasks, periodic.horizon, periodic.policy)
            except WorkloadError as exc:
                raise ConfigError(str(exc)) from exc
        if isinstance(spec.jobs, str):
            csv_path = Path(spec.jobs)
            if not csv_path.is_absolute() and base_dir is not None:
                csv_path = Path(base_dir) / csv_path
            return load_workload(csv_path)
        try:
            return Workload(spec.jobs or [])
        except WorkloadError as exc:
            raise ConfigError(str(exc)) from exc

    def save(self, spec: AnalysisSpec, path: str) -> None:
        output_path = Path(path)
        payload = spec.model_dump(mode="json", exclude_none=True)
        if output_path.suffix.lower() in {".yaml", ".yml"}:
            output_path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        else:
            output_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    def validate(self, path: str) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        try:
            self.load_request(path)
        except ConfigError as exc:
            issues.append(ValidationIssue(path=path, message=str(exc)))
        return issues

    @staticmethod
    def _read(path: str) -> dict[str, Any]:
        input_path = Path(path)
        if not input_path.exists():
            raise ConfigError(f"config file not found: {path}")

        text = input_path.read_text(encoding="utf-8")
        try:
            if input_path.suffix.lower() in {".yaml", ".yml"}:
                data = yaml.safe_load(text)
            else:
                data = json.loads(text)
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ConfigError(f"invalid config syntax: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError("config root must be object")
        return data

    def _normalize_version(self, payload: dict[str, Any]) -> dict[str, Any]:
        normalized_payload = dict(payload)
        version = str(normalized_payload.get("version", self.SUPPORTED_VERSION))
        if version != self.SUPPORTED_VERSION:
            raise ConfigError(f"unsupported config version '{version}'")
        normalized_payload["version"] = version
        return normalized_payload

    @staticmethod
    def _validate_schema(payload: dict[str, Any]) -> None:
        validator = jsonschema.Draft202012Validator(CONFIG_SCHEMA)
        errors = sorted(validator.iter_errors(payload), key=lambda err: [str(x) for x in err.path])
        if not errors:
            return
        formatted = []
        for error in errors[:8]:
            path = ".".join(str(x) for x in error.path)
            formatted.append(f"{path or '<root>'}: {error.message}")
        raise ConfigError("schema validation failed: " + " | ".join(formatted))
