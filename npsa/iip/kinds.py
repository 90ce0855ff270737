"""Closed set of idle-time insertion policies."""

from __future__ import annotations

from enum import Enum


class IIPKind(str, Enum):
    NONE = "none"
    PRECAUTIOUS_RM = "p-rm"
    CRITICAL_WINDOW = "cw-edf"
