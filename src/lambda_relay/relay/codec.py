"""
Packet codec — wire format and inbound envelope extraction.

``extract()`` runs at the start of every hop. It takes the SQS event the
Lambda was invoked with, pulls the packet out of the first record and
decides whether it is something the relay can act on.

Two failure modes, two channels:

    ┌──────────────────────────────────────┬─────────────────────────────┐
    │ Input                                │ Result                      │
    ├──────────────────────────────────────┼─────────────────────────────┤
    │ no Records / no body / bad JSON /    │ raise PacketDecodeError     │
    │ body is not an object / bad stats    │                             │
    ├──────────────────────────────────────┼─────────────────────────────┤
    │ object without queueAddress or       │ None + invalid_message      │
    │ bindingId (absent or empty)          │ event                       │
    ├──────────────────────────────────────┼─────────────────────────────┤
    │ complete object                      │ RelayPacket, defaults       │
    │                                      │ back-filled                 │
    └──────────────────────────────────────┴─────────────────────────────┘

The first row is a broken producer and should fail the invocation loudly.
The second is a message that is simply not a relay packet, which callers
treat as a routine "nothing to do" branch.

Examples:
    >>> body = encode_packet(RelayPacket(queue_url="https://sqs/q", binding_id="u-1"))
    >>> extract({"Records": [{"body": body}]}).binding_id
    'u-1'
    >>> extract({"Records": [{"body": {"cursor": 3}}]}) is None
    True
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any

from lambda_relay.core.errors import PacketDecodeError, ValidationError
from lambda_relay.observability import LoggingObserver, RelayEvent, RelayObserver
from lambda_relay.relay.packet import (
    ATTEMPT_KEY,
    BINDING_ID_KEY,
    LEGACY_KEY_ALIASES,
    QUEUE_URL_KEY,
    RESERVED_KEYS,
    SQS_COUNT_KEY,
    STATS_KEY,
    RelayPacket,
    RelayStats,
)


def packet_to_dict(packet: RelayPacket) -> dict[str, Any]:
    """Wire representation of a packet as a plain dict."""
    return packet.to_dict()


def encode_packet(packet: RelayPacket) -> str:
    """Serialize a packet to its JSON wire format.

    Raises:
        ValidationError: If a custom field is not JSON-serializable
    """
    try:
        return json.dumps(packet_to_dict(packet), separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise ValidationError(
            "relay packet contains a value that is not JSON-serializable",
            cause=e,
        ).with_context(queue_url=packet.queue_url or None) from e


def decode_packet(data: Mapping[str, Any]) -> RelayPacket | None:
    """Build a packet from a decoded wire object.

    Returns None when either routing identifier is absent or empty.

    Raises:
        PacketDecodeError: If ``attempt`` or ``stats`` have the wrong shape
    """
    queue_url = _identifier(data, QUEUE_URL_KEY)
    binding_id = _identifier(data, BINDING_ID_KEY)
    if not queue_url or not binding_id:
        return None

    attempt = data.get(ATTEMPT_KEY)
    if attempt is None:
        attempt = 0
    elif not _is_count(attempt):
        raise PacketDecodeError(
            f"'{ATTEMPT_KEY}' must be a non-negative integer, got {attempt!r}"
        ).with_context(queue_url=queue_url, binding_id=binding_id)

    stats = _decode_stats(data.get(STATS_KEY))
    if stats is None:
        raise PacketDecodeError(
            f"'{STATS_KEY}' must be an object with a non-negative '{SQS_COUNT_KEY}'"
        ).with_context(queue_url=queue_url, binding_id=binding_id)

    custom = {
        key: copy.deepcopy(value)
        for key, value in data.items()
        if key not in RESERVED_KEYS and key not in LEGACY_KEY_ALIASES
    }
    return RelayPacket(
        queue_url=queue_url,
        binding_id=binding_id,
        attempt=attempt,
        stats=stats,
        custom=custom,
    )


def extract(
    envelope: Mapping[str, Any],
    observer: RelayObserver | None = None,
) -> RelayPacket | None:
    """Recover and validate the relay packet from an inbound SQS event.

    Only the first record is consumed. Its ``body`` may be a JSON string
    (SQS delivery) or an already-decoded object (local invocation).

    Args:
        envelope: Lambda event with a ``Records`` list
        observer: Receives ``invalid_message`` for incomplete packets

    Returns:
        The normalized packet, or None when the body lacks routing identifiers

    Raises:
        PacketDecodeError: If the envelope or body cannot be decoded
    """
    data = _decode_body(_first_body(envelope))

    packet = decode_packet(data)
    if packet is None:
        (observer or LoggingObserver()).emit(
            RelayEvent.INVALID_MESSAGE,
            reason="missing routing identifiers",
            keys=sorted(str(key) for key in data),
        )
    return packet


def make_envelope(source: RelayPacket | Mapping[str, Any] | str, decoded: bool = False) -> dict[str, Any]:
    """Wrap a packet (or raw body) in an SQS-event-shaped envelope.

    With ``decoded=True`` the body is left as an object, matching what a
    local invocation passes in place of SQS.
    """
    if isinstance(source, RelayPacket):
        body: Any = packet_to_dict(source) if decoded else encode_packet(source)
    elif isinstance(source, Mapping):
        body = dict(source) if decoded else json.dumps(dict(source), separators=(",", ":"))
    else:
        body = json.loads(source) if decoded else source
    return {"Records": [{"eventSource": "aws:sqs", "body": body}]}


def _first_body(envelope: Mapping[str, Any]) -> Any:
    if not isinstance(envelope, Mapping):
        raise PacketDecodeError(f"envelope must be a mapping, got {type(envelope).__name__}")

    records = envelope.get("Records")
    if not isinstance(records, list) or not records:
        raise PacketDecodeError("envelope has no Records")

    record = records[0]
    if not isinstance(record, Mapping) or "body" not in record:
        raise PacketDecodeError("first record has no body")
    return record["body"]


def _decode_body(body: Any) -> dict[str, Any]:
    if isinstance(body, Mapping):
        # Re-encode so a local invocation sees exactly what SQS would deliver
        try:
            body = json.dumps(dict(body))
        except (TypeError, ValueError) as e:
            raise PacketDecodeError("record body is not JSON-serializable", cause=e) from e
    elif isinstance(body, (bytes, bytearray)):
        try:
            body = bytes(body).decode("utf-8")
        except UnicodeDecodeError as e:
            raise PacketDecodeError("record body is not valid UTF-8", cause=e) from e

    if not isinstance(body, str):
        raise PacketDecodeError(f"record body must be a JSON string, got {type(body).__name__}")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise PacketDecodeError(f"record body is not valid JSON: {e.msg}", cause=e) from e

    if not isinstance(data, dict):
        raise PacketDecodeError(f"record body must decode to an object, got {type(data).__name__}")
    return data


def _identifier(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        for legacy, canonical in LEGACY_KEY_ALIASES.items():
            if canonical == key:
                value = data.get(legacy)
    return value if isinstance(value, str) else ""


def _decode_stats(raw: Any) -> RelayStats | None:
    if raw is None:
        return RelayStats()
    if not isinstance(raw, Mapping):
        return None
    count = raw.get(SQS_COUNT_KEY, 0)
    if not _is_count(count):
        return None
    return RelayStats(sqs_count=count)


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


__all__ = [
    "decode_packet",
    "encode_packet",
    "extract",
    "make_envelope",
    "packet_to_dict",
]
