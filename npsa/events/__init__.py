"""Event exports."""

from .bus import EventBus, EventHandler
from .types import EventType, ExplorationEvent

__all__ = ["EventBus", "EventHandler", "EventType", "ExplorationEvent"]
