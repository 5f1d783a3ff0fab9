"""
RelayService — one object per process holding the relay collaborators.

The four relay operations share two collaborators (queue and binding
services) and one observer. ``RelayService`` wires them once, at cold
start, and exposes the operations under the names task code uses. It
holds no per-task state: everything about a task lives in the packet.

Architecture:
    ::

        RelayService(queues, bindings, observer)
          ├── .setup(context, target, queue_name?, attrs?) ─ Provisioner
          ├── .extract(event)                              ─ codec.extract
          ├── .relay_pass(packet, delay_seconds?)          ─ RelayDispatcher
          └── .tear_down(packet)                           ─ Decommissioner

        RelayService.from_settings(RelaySettings())   ─ boto3 adapters
        RelayService.in_memory()                      ─ local simulation

Examples:
    Lambda module::

        service = RelayService.from_settings()

        async def start(event, context):
            packet = await service.setup(context, "worker1")
            packet["offset"] = 0
            await service.relay_pass(packet)

        async def work(event, context):
            packet = service.extract(event)
            if packet is None:
                return
            ...
            if done:
                await service.tear_down(packet)
            else:
                await service.relay_pass(packet, delay_seconds=5)

Tags:
    relay-service, facade, dependency-injection, lambda-relay
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from lambda_relay.observability import LoggingObserver, RelayObserver
from lambda_relay.relay import codec
from lambda_relay.relay.decommissioner import Decommissioner
from lambda_relay.relay.dispatcher import RelayDispatcher
from lambda_relay.relay.packet import MAX_PACKET_BYTES, RelayPacket
from lambda_relay.relay.protocols import BindingService, QueueService
from lambda_relay.relay.provisioner import DEFAULT_QUEUE_NAME_PREFIX, Provisioner

if TYPE_CHECKING:
    from lambda_relay.core.settings import RelaySettings


class RelayService:
    """Facade over provisioner, codec, dispatcher and decommissioner."""

    def __init__(
        self,
        queues: QueueService,
        bindings: BindingService,
        *,
        observer: RelayObserver | None = None,
        queue_name_prefix: str = DEFAULT_QUEUE_NAME_PREFIX,
        max_packet_bytes: int = MAX_PACKET_BYTES,
        clock: Callable[[], float] = time.time,
    ):
        self.queues = queues
        self.bindings = bindings
        self.observer = observer or LoggingObserver()
        self._provisioner = Provisioner(
            queues,
            bindings,
            observer=self.observer,
            queue_name_prefix=queue_name_prefix,
            clock=clock,
        )
        self._dispatcher = RelayDispatcher(
            queues,
            observer=self.observer,
            max_packet_bytes=max_packet_bytes,
        )
        self._decommissioner = Decommissioner(queues, bindings, observer=self.observer)

    @classmethod
    def from_settings(
        cls,
        settings: RelaySettings | None = None,
        *,
        observer: RelayObserver | None = None,
    ) -> RelayService:
        """Build a service backed by boto3 SQS and Lambda clients."""
        from lambda_relay.adapters.aws import (
            LambdaBindingService,
            SqsQueueService,
            build_lambda_client,
            build_sqs_client,
        )
        from lambda_relay.core.settings import RelaySettings

        settings = settings or RelaySettings()
        return cls(
            SqsQueueService(build_sqs_client(settings)),
            LambdaBindingService(build_lambda_client(settings)),
            observer=observer,
            queue_name_prefix=settings.queue_name_prefix,
        )

    @classmethod
    def in_memory(cls, *, observer: RelayObserver | None = None, **kwargs: Any) -> RelayService:
        """Build a service backed by in-process collaborators."""
        from lambda_relay.adapters.memory import InMemoryBindingService, InMemoryQueueService

        return cls(InMemoryQueueService(), InMemoryBindingService(), observer=observer, **kwargs)

    async def setup(
        self,
        context: Any,
        target_name: str,
        queue_name: str | None = None,
        queue_attributes: Mapping[str, Any] | None = None,
    ) -> RelayPacket:
        """Create the ephemeral queue and binding; see ``Provisioner.setup``."""
        return await self._provisioner.setup(context, target_name, queue_name, queue_attributes)

    def extract(self, envelope: Mapping[str, Any]) -> RelayPacket | None:
        """Recover the packet from an inbound event; see ``codec.extract``."""
        return codec.extract(envelope, observer=self.observer)

    async def relay_pass(self, packet: RelayPacket, delay_seconds: Any = None) -> bool:
        """Enqueue the next hop; see ``RelayDispatcher.relay_pass``."""
        return await self._dispatcher.relay_pass(packet, delay_seconds)

    async def tear_down(self, packet: RelayPacket) -> bool:
        """Delete binding then queue; see ``Decommissioner.tear_down``."""
        return await self._decommissioner.tear_down(packet)


__all__ = ["RelayService"]
