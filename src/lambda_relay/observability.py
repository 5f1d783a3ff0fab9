"""Observer hook for relay lifecycle events.

The relay operations report what they did through a ``RelayObserver``
rather than printing. An observer sees the same points in the lifecycle
regardless of which adapters are wired in, and never changes control flow:
an operation emits its event after the collaborator call succeeded, and a
guard failure (``False`` result) emits nothing.

ARCHITECTURE
────────────
::

    RelayObserver (Protocol)
      └── .emit(event, **fields)

    Implementations:
      LoggingObserver    ─ structlog event per lifecycle point (default)
      RecordingObserver  ─ keeps events in a list (tests, local simulation)
      NullObserver       ─ drops everything

    Events:
      setup_complete     queue_url, binding_id, queue_name, target
      relay_sent         queue_url, sqs_count, delay_seconds, message_id, size_bytes
      packet_oversize    queue_url, size_bytes, limit_bytes
      teardown_complete  queue_url, binding_id, sqs_count
      invalid_message    keys
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from lambda_relay.core.logging import get_logger


class RelayEvent(str, Enum):
    """Lifecycle points reported to observers."""

    SETUP_COMPLETE = "setup_complete"
    RELAY_SENT = "relay_sent"
    PACKET_OVERSIZE = "packet_oversize"
    TEARDOWN_COMPLETE = "teardown_complete"
    INVALID_MESSAGE = "invalid_message"


_WARNING_EVENTS = frozenset({RelayEvent.PACKET_OVERSIZE, RelayEvent.INVALID_MESSAGE})


@runtime_checkable
class RelayObserver(Protocol):
    """Receives relay lifecycle events."""

    def emit(self, event: RelayEvent, **fields: Any) -> None:
        ...


class LoggingObserver:
    """Writes each event as a structlog line.

    ``packet_oversize`` and ``invalid_message`` are logged at WARNING,
    everything else at INFO.
    """

    def __init__(self, logger: Any | None = None):
        self._logger = logger or get_logger("lambda_relay.events")

    def emit(self, event: RelayEvent, **fields: Any) -> None:
        if event in _WARNING_EVENTS:
            self._logger.warning(event.value, **fields)
        else:
            self._logger.info(event.value, **fields)


class NullObserver:
    """Drops every event."""

    def emit(self, event: RelayEvent, **fields: Any) -> None:
        return None


@dataclass
class RecordedEvent:
    event: RelayEvent
    fields: dict[str, Any] = field(default_factory=dict)


class RecordingObserver:
    """Keeps every event in memory for later inspection.

    Example:
        >>> observer = RecordingObserver()
        >>> service = RelayService(queues, bindings, observer=observer)
        >>> await service.relay_pass(packet)
        >>> observer.names()
        ['relay_sent']
    """

    def __init__(self) -> None:
        self.events: list[RecordedEvent] = []

    def emit(self, event: RelayEvent, **fields: Any) -> None:
        self.events.append(RecordedEvent(event=event, fields=dict(fields)))

    def names(self) -> list[str]:
        return [recorded.event.value for recorded in self.events]

    def of(self, event: RelayEvent) -> list[RecordedEvent]:
        return [recorded for recorded in self.events if recorded.event == event]

    def clear(self) -> None:
        self.events.clear()


__all__ = [
    "RelayEvent",
    "RelayObserver",
    "LoggingObserver",
    "NullObserver",
    "RecordedEvent",
    "RecordingObserver",
]
