"""
Relay dispatcher — hand the packet to the next execution.

``relay_pass()`` is the hop. It bumps the counter, serializes the whole
packet (known fields and custom fields) and enqueues it on the packet's own
queue, where the event source mapping delivers it to the next invocation.

Manifesto:
    - **Count before send:** the enqueued message carries the hop count
      *after* this call, so the first relay says ``sqsCount == 1``
    - **Clamp locally:** SQS rejects delays outside 0..900 seconds; the
      dispatcher clamps instead of letting the call fail
    - **Nothing to relay is not an error:** a packet without a queue URL
      returns False and touches nothing
    - **Fan-out is just more calls:** each call on a copy is one message

Architecture:
    ::

        relay_pass(packet, delay_seconds=1000)
          │
          ├── packet.queue_url empty?  ──► return False
          ├── delay = clamp(1000, 0, 900) = 900
          ├── packet.stats.sqs_count += 1
          ├── body = encode_packet(packet)   (oversize → packet_oversize event)
          ├── queues.send_message(queue_url, body, 900)
          └── return True

Examples:
    Chained continuation:

    >>> packet["offset"] = next_offset
    >>> await dispatcher.relay_pass(packet)
    True

    Fan-out:

    >>> branches = []
    >>> for shard in shards:
    ...     branch = packet.copy()
    ...     branch["shard"] = shard
    ...     branches.append(dispatcher.relay_pass(branch))
    >>> await asyncio.gather(*branches)

Guardrails:
    ❌ DON'T: Relay the same packet object from two branches concurrently
    ✅ DO: Give each branch its own ``packet.copy()``

Tags:
    relay, dispatcher, sqs, send-message, hop, lambda-relay
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Any

from lambda_relay.core.errors import ValidationError
from lambda_relay.core.logging import get_logger
from lambda_relay.observability import LoggingObserver, RelayEvent, RelayObserver
from lambda_relay.relay.codec import encode_packet
from lambda_relay.relay.packet import MAX_PACKET_BYTES, RelayPacket
from lambda_relay.relay.protocols import QueueService

logger = get_logger(__name__)

MIN_DELAY_SECONDS = 0
# SQS per-message delivery delay ceiling (15 minutes)
MAX_DELAY_SECONDS = 15 * 60


def clamp_delay(delay_seconds: Any = None) -> int:
    """Clamp a delivery delay to the 0..900 second range SQS accepts.

    >>> clamp_delay(None), clamp_delay(-5), clamp_delay(30), clamp_delay(1000)
    (0, 0, 30, 900)
    """
    if delay_seconds is None:
        return MIN_DELAY_SECONDS
    if isinstance(delay_seconds, bool) or not isinstance(delay_seconds, Real):
        raise ValidationError(f"delay_seconds must be a number, got {delay_seconds!r}")
    if math.isnan(delay_seconds):
        raise ValidationError("delay_seconds must be a number, got NaN")
    if delay_seconds > MAX_DELAY_SECONDS:
        return MAX_DELAY_SECONDS
    if delay_seconds < MIN_DELAY_SECONDS:
        return MIN_DELAY_SECONDS
    return int(delay_seconds)


class RelayDispatcher:
    """Enqueues continuation messages."""

    def __init__(
        self,
        queues: QueueService,
        *,
        observer: RelayObserver | None = None,
        max_packet_bytes: int = MAX_PACKET_BYTES,
    ):
        self._queues = queues
        self._observer = observer or LoggingObserver()
        self._max_packet_bytes = max_packet_bytes

    async def relay_pass(self, packet: RelayPacket, delay_seconds: Any = None) -> bool:
        """Send the packet to its queue for the next execution.

        Args:
            packet: Packet to relay; its counter is incremented in place
            delay_seconds: Delivery delay, clamped to 0..900 (default 0)

        Returns:
            True when a message was enqueued, False when the packet has
            no queue URL

        Raises:
            ValidationError: If delay_seconds is not a number or a custom
                field is not JSON-serializable (the counter is left as it was)
        """
        if not packet.queue_url:
            logger.debug("relay_skipped", reason="missing queue_url")
            return False

        delay = clamp_delay(delay_seconds)

        packet.stats.sqs_count += 1
        try:
            body = encode_packet(packet)
        except ValidationError:
            packet.stats.sqs_count -= 1
            raise

        size_bytes = len(body.encode("utf-8"))
        if size_bytes > self._max_packet_bytes:
            self._observer.emit(
                RelayEvent.PACKET_OVERSIZE,
                queue_url=packet.queue_url,
                size_bytes=size_bytes,
                limit_bytes=self._max_packet_bytes,
            )

        message_id = await self._queues.send_message(packet.queue_url, body, delay)

        self._observer.emit(
            RelayEvent.RELAY_SENT,
            queue_url=packet.queue_url,
            sqs_count=packet.stats.sqs_count,
            delay_seconds=delay,
            message_id=message_id,
            size_bytes=size_bytes,
        )
        return True


__all__ = [
    "RelayDispatcher",
    "clamp_delay",
    "MIN_DELAY_SECONDS",
    "MAX_DELAY_SECONDS",
]
