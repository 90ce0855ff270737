"""Event bus with sequence assignment."""

from __future__ import annotations

from typing import Callable

from .types import EventType, ExplorationEvent


EventHandler = Callable[[ExplorationEvent], None]


class EventBus:
    """Simple in-process pub/sub event bus (single publishing thread)."""

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []
        self._seq = 0

    @property
    def has_handlers(self) -> bool:
        return bool(self._handlers)

    def subscribe(self, handler: EventHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def publish(
        self,
        *,
        event_type: EventType,
        depth: int,
        job: str | None = None,
        payload: dict | None = None,
    ) -> ExplorationEvent | None:
        if not self._handlers:
            return None
        event = ExplorationEvent(
            event_id=f"evt-{self._seq:08d}",
            seq=self._seq,
            type=event_type,
            depth=depth,
            job=job,
            payload=payload or {},
        )
        self._seq += 1
        for handler in list(self._handlers):
            handler(event)
        return event

    def reset(self) -> None:
        self._seq = 0
        self._handlers.clear()
