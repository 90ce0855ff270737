"""Job-set CSV ingestion and export."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import IO, Union

from pydantic import ValidationError

from npsa.model import Job, Workload, WorkloadError

from .errors import ConfigError


CSV_COLUMNS: tuple[str, ...] = (
    "Task ID",
    "Job ID",
    "Arrival min",
    "Arrival max",
    "Cost min",
    "Cost max",
    "Deadline",
    "Priority",
)

_FIELDS: tuple[str, ...] = (
    "task_id",
    "job_id",
    "arrival_min",
    "arrival_max",
    "cost_min",
    "cost_max",
    "deadline",
    "priority",
)


def parse_workload(source: Union[str, IO[str]]) -> Workload:
    """Parse a job-set CSV given as text or an open text stream."""
    stream = io.StringIO(source) if isinstance(source, str) else source
    reader = csv.reader(stream)
    header: list[str] | None = None
    jobs: list[Job] = []
    for row in reader:
        line = reader.line_num
        if not row or all(not cell.strip() for cell in row):
            continue
        if header is None:
            header = [cell.strip() for cell in row]
            if tuple(header) != CSV_COLUMNS:
                raise ConfigError(
                    f"line {line}: unexpected header {', '.join(header)}; "
                    f"expected {', '.join(CSV_COLUMNS)}"
                )
            continue
        jobs.append(_parse_row(row, line))

    if header is None:
        raise ConfigError("job set is empty: missing header")
    try:
        return Workload(jobs)
    except WorkloadError as exc:
        raise ConfigError(str(exc)) from exc


def load_workload(path: Union[str, Path]) -> Workload:
    input_path = Path(path)
    if not input_path.exists():
        raise ConfigError(f"job set file not found: {path}")
    with input_path.open("r", encoding="utf-8", newline="") as f:
        return parse_workload(f)


def dump_workload(workload: Workload, path: Union[str, Path, None] = None) -> str:
    """Render ``workload`` in the ingestion format; also write it when ``path`` is given."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for job in workload:
        writer.writerow([getattr(job, name) for name in _FIELDS])
    text = buffer.getvalue()
    if path is not None:
        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
    return text


def _parse_row(row: list[str], line: int) -> Job:
    if len(row) != len(CSV_COLUMNS):
        raise ConfigError(f"line {line}: expected {len(CSV_COLUMNS)} columns, got {len(row)}")
    values: dict[str, int] = {}
    for name, column, cell in zip(_FIELDS, CSV_COLUMNS, row):
        try:
            values[name] = int(cell.strip())
        except ValueError:
            raise ConfigError(f"line {line}: {column} must be an integer, got '{cell.strip()}'") from None
    try:
        return Job(**values)
    except ValidationError as exc:
        raise ConfigError(f"line {line}: {exc}") from exc
