"""Exploration event definitions."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    EXPLORATION_STARTED = "ExplorationStarted"
    FRONTIER_EXPANDED = "FrontierExpanded"
    JOB_DISPATCHED = "JobDispatched"
    STATES_MERGED = "StatesMerged"
    DEADLINE_MISS = "DeadlineMiss"
    DEAD_END = "DeadEnd"
    LIMIT_REACHED = "LimitReached"
    EXPLORATION_FINISHED = "ExplorationFinished"


class ExplorationEvent(BaseModel):
    """Normalized event envelope for tracing and metrics."""

    model_config = ConfigDict(extra="forbid")

    event_id: str
    seq: int = Field(ge=0)
    type: EventType
    depth: int = Field(ge=0)
    job: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)
