"""Notification events emitted by the core.

Events are fire-and-forget: the core hands them to a sink and never waits
for or inspects the outcome. Rendering them (sound, vibration, UI) is the
host application's business.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Discrete notification kinds."""

    SET_COMPLETED = "set_completed"
    TIMER_TICK = "timer_tick"
    TIMER_EXPIRED = "timer_expired"
    WORKOUT_STARTED = "workout_started"
    WORKOUT_COMPLETED = "workout_completed"
    SELECTION_CHANGED = "selection_changed"
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Event:
    """A single notification."""

    kind: EventKind
    message: str = ""
    data: dict | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


class NotificationSink(Protocol):
    """Receives events from the core."""

    def emit(self, event: Event) -> None: ...


class NullSink:
    """Discards every event."""

    def emit(self, event: Event) -> None:
        pass


class EventLog:
    """Keeps every event in memory, oldest first."""

    def __init__(self, max_events: int | None = None):
        self.events: list[Event] = []
        self._max_events = max_events

    def emit(self, event: Event) -> None:
        self.events.append(event)
        if self._max_events is not None and len(self.events) > self._max_events:
            del self.events[: len(self.events) - self._max_events]

    def of_kind(self, kind: EventKind) -> list[Event]:
        return [e for e in self.events if e.kind == kind]

    def kinds(self) -> list[EventKind]:
        return [e.kind for e in self.events]

    def clear(self) -> None:
        self.events.clear()


class LoggingSink:
    """Writes events to the standard logging system."""

    _levels = {
        EventKind.ERROR: logging.ERROR,
        EventKind.WARNING: logging.WARNING,
        EventKind.TIMER_TICK: logging.DEBUG,
    }

    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logger

    def emit(self, event: Event) -> None:
        level = self._levels.get(event.kind, logging.INFO)
        self._log.log(level, "%s: %s", event.kind.value, event.message)


class FanOutSink:
    """Forwards each event to several sinks in order."""

    def __init__(self, *sinks: NotificationSink):
        self.sinks = list(sinks)

    def emit(self, event: Event) -> None:
        for sink in self.sinks:
            sink.emit(event)
