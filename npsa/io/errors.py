"""I/O error types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ValidationIssue:
    path: str
    message: str


class ConfigError(Exception):
    """Configuration or job-set loading/validation error."""
