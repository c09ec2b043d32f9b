"""Event emitters for the provisioning pipeline."""

import logging
from abc import ABC, abstractmethod
from typing import Iterable

from wp_provisioner.core.events_model import StepEvent

logger = logging.getLogger(__name__)


ALLOWED_EVENTS = {
    "step.started",
    "step.skipped",
    "step.applied",
    "step.failed",
    "step.warned",
}

_GLYPHS = {
    "step.started": "▶",
    "step.skipped": "⏭",
    "step.applied": "✅",
    "step.failed": "❌",
    "step.warned": "⚠️",
}


class EventEmitter(ABC):
    """Abstract event emitter."""

    @abstractmethod
    def emit(self, events: Iterable[StepEvent]) -> None:
        """Emit one or more events."""
        pass


class ConsoleEventEmitter(EventEmitter):
    """Renders each event as a progress line."""

    def __init__(self, stream=None):
        self._stream = stream

    def emit(self, events: Iterable[StepEvent]) -> None:
        for event in events:
            _validate(event)

            line = f"{_GLYPHS[event.event_type]} [{event.step_id}] {event.step_name}"
            if event.message:
                line += f" - {event.message}"

            print(line, file=self._stream, flush=True)


class RecordingEventEmitter(EventEmitter):
    """Keeps events in memory (tests, reports)."""

    def __init__(self):
        self.events = []

    def emit(self, events: Iterable[StepEvent]) -> None:
        for event in events:
            _validate(event)
            self.events.append(event)

    def types_for(self, step_id: str):
        return [e.event_type for e in self.events if e.step_id == step_id]


class MultiEventEmitter:
    """Fan-out to multiple emitters."""

    def __init__(self, emitters: Iterable[EventEmitter]):
        self._emitters = list(emitters)

    def emit(self, events: Iterable[StepEvent]):
        """Emit to all emitters."""
        events = list(events)
        for emitter in self._emitters:
            emitter.emit(events)


class NullEventEmitter(EventEmitter):
    """No-op emitter (used when events are not needed)."""

    def emit(self, events: Iterable[StepEvent]) -> None:
        """Do nothing."""
        pass


def _validate(event: StepEvent) -> None:
    if event.event_type not in ALLOWED_EVENTS:
        raise ValueError(f"Invalid event type: {event.event_type}")
    if not event.step_id:
        raise ValueError("Event must have step_id")
