"""
Relay packet — the continuation token carried from one hop to the next.

A relay packet is the only state that survives between Lambda invocations.
It carries the routing identifiers of the ephemeral resources (queue URL and
event source mapping UUID), a hop counter, and whatever the task logic needs
to resume where the previous execution stopped.

Manifesto:
    - **Known fields are typed:** queue_url, binding_id, attempt, stats
    - **Task state is open:** ``custom`` is a plain dict the caller owns
    - **Flat on the wire:** custom keys sit beside the known keys
    - **Identifiers are write-once:** only setup() creates them

Architecture:
    ::

        RelayPacket
          ├── queue_url   : str        ─ "queueAddress" on the wire
          ├── binding_id  : str        ─ "bindingId" on the wire
          ├── attempt     : int = 0    ─ reserved for caller use
          ├── stats       : RelayStats ─ {"sqsCount": n}
          └── custom      : dict       ─ flat caller keys

        packet["cursor"] = 120        ─ writes custom["cursor"]
        packet["stats"] = {}          ─ ReservedFieldError

Examples:
    >>> packet = RelayPacket(queue_url="https://sqs/q", binding_id="uuid-1")
    >>> packet["offset"] = 500
    >>> packet.is_valid
    True
    >>> branch = packet.copy()
    >>> branch["offset"] = 1000
    >>> packet["offset"]
    500

Tags:
    relay-packet, continuation, data-model, lambda-relay
"""

from __future__ import annotations

import copy as _copy
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from lambda_relay.core.errors import ReservedFieldError

# Wire keys
QUEUE_URL_KEY = "queueAddress"
BINDING_ID_KEY = "bindingId"
ATTEMPT_KEY = "attempt"
STATS_KEY = "stats"
SQS_COUNT_KEY = "sqsCount"

RESERVED_KEYS = frozenset({QUEUE_URL_KEY, BINDING_ID_KEY, ATTEMPT_KEY, STATS_KEY})

# Older relays spelled the identifiers after the AWS response fields
LEGACY_KEY_ALIASES = {"QueueUrl": QUEUE_URL_KEY, "UUID": BINDING_ID_KEY}

# Serialized packets above this size are logged as oversize
MAX_PACKET_BYTES = 64 * 1024


@dataclass
class RelayStats:
    """Hop counter carried in every packet."""

    sqs_count: int = 0

    def to_dict(self) -> dict[str, int]:
        return {SQS_COUNT_KEY: self.sqs_count}


@dataclass
class RelayPacket:
    """Routing identifiers, hop counter and caller state for one relay."""

    queue_url: str = ""
    binding_id: str = ""
    attempt: int = 0
    stats: RelayStats = field(default_factory=RelayStats)
    custom: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for key in self.custom:
            _check_custom_key(key)

    @property
    def is_valid(self) -> bool:
        """True when both routing identifiers are present and non-empty."""
        return bool(self.queue_url) and bool(self.binding_id)

    @property
    def sqs_count(self) -> int:
        return self.stats.sqs_count

    # ── custom field access ──────────────────────────────────────

    def __getitem__(self, key: str) -> Any:
        return self.custom[key]

    def __setitem__(self, key: str, value: Any) -> None:
        _check_custom_key(key)
        self.custom[key] = value

    def __delitem__(self, key: str) -> None:
        del self.custom[key]

    def __contains__(self, key: object) -> bool:
        return key in self.custom

    def __iter__(self) -> Iterator[str]:
        return iter(self.custom)

    def get(self, key: str, default: Any = None) -> Any:
        return self.custom.get(key, default)

    def update(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        """Merge values into the custom fields."""
        merged = dict(values or {}, **kwargs)
        for key in merged:
            _check_custom_key(key)
        self.custom.update(merged)

    def copy(self) -> RelayPacket:
        """Deep copy, used to build independent fan-out branches."""
        return _copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Flat wire representation (custom keys beside the known keys)."""
        for key in self.custom:
            _check_custom_key(key)
        data: dict[str, Any] = dict(self.custom)
        data[QUEUE_URL_KEY] = self.queue_url
        data[BINDING_ID_KEY] = self.binding_id
        data[ATTEMPT_KEY] = self.attempt
        data[STATS_KEY] = self.stats.to_dict()
        return data


def _check_custom_key(key: str) -> None:
    if key in RESERVED_KEYS or key in LEGACY_KEY_ALIASES:
        raise ReservedFieldError(key)


__all__ = [
    "RelayPacket",
    "RelayStats",
    "QUEUE_URL_KEY",
    "BINDING_ID_KEY",
    "ATTEMPT_KEY",
    "STATS_KEY",
    "SQS_COUNT_KEY",
    "RESERVED_KEYS",
    "LEGACY_KEY_ALIASES",
    "MAX_PACKET_BYTES",
]
