"""
Provisioner — create the ephemeral queue and bind it to a Lambda function.

``setup()`` runs once per logical task. It creates one SQS queue, one event
source mapping from that queue to the target function, and returns the
first relay packet.

Manifesto:
    - **One message per invocation:** the mapping is always created with
      ``batch_size=1``; every hop handles exactly one packet
    - **No hidden retries:** one create-queue call, one create-binding call
    - **No rollback:** if the binding fails the queue is left behind and
      the error propagates unmodified

Architecture:
    ::

        setup(context, "worker1")
          │
          ├── queue name  = awsRelayQueue_worker1_<epoch ms>   (if not given)
          ├── attributes  = {**queue_attributes, DelaySeconds: 0 if unset}
          │
          ├── queues.create_queue(name, attributes)          -> queue URL
          ├── bindings.create_binding(
          │       arn:aws:sqs:<region>:<acct>:<name>,
          │       arn:aws:lambda:<region>:<acct>:function:worker1,
          │       batch_size=1, enabled=True)                 -> UUID
          │
          └── RelayPacket(queue_url, binding_id, attempt=0, sqs_count=0)

Guardrails:
    ❌ DON'T: Call setup() again on a downstream hop
    ✅ DO: Call it once, then relay_pass() the packet it returns

    ❌ DON'T: Expect setup() to clean up after a partial failure
    ✅ DO: Reclaim leaked relay queues out of band (they share a prefix)

Tags:
    provisioner, sqs, event-source-mapping, setup, lambda-relay
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Mapping
from typing import Any

from lambda_relay.core.errors import ValidationError
from lambda_relay.core.logging import get_logger
from lambda_relay.observability import LoggingObserver, RelayEvent, RelayObserver
from lambda_relay.relay.context import resolve_context
from lambda_relay.relay.packet import RelayPacket
from lambda_relay.relay.protocols import BindingService, QueueService

logger = get_logger(__name__)

DEFAULT_QUEUE_NAME_PREFIX = "awsRelayQueue_"
DEFAULT_QUEUE_ATTRIBUTES: dict[str, Any] = {"DelaySeconds": 0}

# SQS queue names: 1-80 chars of [A-Za-z0-9_-]
MAX_QUEUE_NAME_LENGTH = 80
_QUEUE_NAME_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")

# Each hop handles exactly one packet
BINDING_BATCH_SIZE = 1


def synthesize_queue_name(
    target_name: str,
    now_ms: int,
    prefix: str = DEFAULT_QUEUE_NAME_PREFIX,
) -> str:
    """Build a queue name from the target and a millisecond timestamp.

    Characters SQS does not accept become ``_``. When the result is too
    long the target part is shortened so the timestamp suffix survives.

    >>> synthesize_queue_name("worker1", 1700000000000)
    'awsRelayQueue_worker1_1700000000000'
    """
    suffix = f"_{now_ms}"
    head = _QUEUE_NAME_UNSAFE.sub("_", f"{prefix}{target_name}")
    return head[: MAX_QUEUE_NAME_LENGTH - len(suffix)] + suffix


def build_queue_attributes(queue_attributes: Mapping[str, Any] | None) -> dict[str, Any]:
    """Copy the caller's attributes and default ``DelaySeconds`` to 0."""
    if queue_attributes is None:
        queue_attributes = {}
    if not isinstance(queue_attributes, Mapping):
        raise ValidationError(
            f"queue_attributes must be a mapping, got {type(queue_attributes).__name__}"
        )
    attributes = dict(queue_attributes)
    for key, value in DEFAULT_QUEUE_ATTRIBUTES.items():
        if attributes.get(key) is None:
            attributes[key] = value
    return attributes


class Provisioner:
    """Creates the ephemeral queue and binding for one logical task."""

    def __init__(
        self,
        queues: QueueService,
        bindings: BindingService,
        *,
        observer: RelayObserver | None = None,
        queue_name_prefix: str = DEFAULT_QUEUE_NAME_PREFIX,
        clock: Callable[[], float] = time.time,
    ):
        self._queues = queues
        self._bindings = bindings
        self._observer = observer or LoggingObserver()
        self._queue_name_prefix = queue_name_prefix
        self._clock = clock

    async def setup(
        self,
        context: Any,
        target_name: str,
        queue_name: str | None = None,
        queue_attributes: Mapping[str, Any] | None = None,
    ) -> RelayPacket:
        """Create the queue and binding and return the initial packet.

        Args:
            context: ExecutionContext or a Lambda context object
            target_name: Lambda function that will consume the queue
            queue_name: Explicit queue name; synthesized when None or empty
            queue_attributes: SQS attributes, ``DelaySeconds`` defaults to 0

        Returns:
            Packet with queue_url and binding_id set and sqs_count 0

        Raises:
            InvalidExecutionContextError: If the context has no region/account
            ValidationError: If target_name or queue_attributes are unusable
        """
        if not target_name or not isinstance(target_name, str):
            raise ValidationError("target_name must be a non-empty string")

        execution = resolve_context(context)
        attributes = build_queue_attributes(queue_attributes)
        if not queue_name:
            queue_name = synthesize_queue_name(
                target_name,
                int(self._clock() * 1000),
                self._queue_name_prefix,
            )

        queue_url = await self._queues.create_queue(queue_name, attributes)
        logger.debug("relay_queue_created", queue_name=queue_name, queue_url=queue_url)

        function_arn = (
            target_name if target_name.startswith("arn:") else execution.function_arn(target_name)
        )
        binding_id = await self._bindings.create_binding(
            execution.queue_arn(queue_name),
            function_arn,
            batch_size=BINDING_BATCH_SIZE,
            enabled=True,
        )

        packet = RelayPacket(queue_url=queue_url, binding_id=binding_id)
        self._observer.emit(
            RelayEvent.SETUP_COMPLETE,
            queue_url=queue_url,
            binding_id=binding_id,
            queue_name=queue_name,
            target=target_name,
        )
        return packet


__all__ = [
    "Provisioner",
    "synthesize_queue_name",
    "build_queue_attributes",
    "DEFAULT_QUEUE_NAME_PREFIX",
    "DEFAULT_QUEUE_ATTRIBUTES",
    "BINDING_BATCH_SIZE",
    "MAX_QUEUE_NAME_LENGTH",
]
