"""Decommissioner — remove the binding, then the queue.

Order matters: deleting the event source mapping first stops Lambda from
polling, so no trailing message is routed to a function whose queue has
already gone. Both deletions are awaited in sequence; a failure in either
propagates unmodified and nothing is compensated (a failed queue deletion
after a successful unbinding leaves the queue behind).
"""

from __future__ import annotations

from lambda_relay.core.logging import get_logger
from lambda_relay.observability import LoggingObserver, RelayEvent, RelayObserver
from lambda_relay.relay.packet import RelayPacket
from lambda_relay.relay.protocols import BindingService, QueueService

logger = get_logger(__name__)


class Decommissioner:
    """Deletes the ephemeral resources a packet points at."""

    def __init__(
        self,
        queues: QueueService,
        bindings: BindingService,
        *,
        observer: RelayObserver | None = None,
    ):
        self._queues = queues
        self._bindings = bindings
        self._observer = observer or LoggingObserver()

    async def tear_down(self, packet: RelayPacket) -> bool:
        """Delete the binding and the queue.

        Returns:
            True when both deletions were issued, False (and no calls)
            when either identifier is missing
        """
        if not packet.queue_url or not packet.binding_id:
            logger.debug(
                "teardown_skipped",
                has_queue_url=bool(packet.queue_url),
                has_binding_id=bool(packet.binding_id),
            )
            return False

        await self._bindings.delete_binding(packet.binding_id)
        await self._queues.delete_queue(packet.queue_url)

        self._observer.emit(
            RelayEvent.TEARDOWN_COMPLETE,
            queue_url=packet.queue_url,
            binding_id=packet.binding_id,
            sqs_count=packet.stats.sqs_count,
        )
        return True


__all__ = ["Decommissioner"]
