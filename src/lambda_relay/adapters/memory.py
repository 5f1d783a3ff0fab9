"""In-memory collaborators for local simulation and testing.

These keep queues, messages and bindings in dicts in the current process.
They are perfect for unit tests and for driving a relay chain locally
without AWS, and should NOT be used in production (nothing is durable,
delays are recorded but not honoured).

Example:
    >>> queues, bindings = InMemoryQueueService(), InMemoryBindingService()
    >>> service = RelayService(queues, bindings)
    >>> packet = await service.setup(ctx, "worker1")
    >>> await service.relay_pass(packet)
    >>> event = queues.receive_envelope(packet.queue_url)
    >>> service.extract(event).stats.sqs_count
    1
"""

from __future__ import annotations

import json
import uuid
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass
class SentMessage:
    queue_url: str
    body: str
    delay_seconds: int
    message_id: str


@dataclass
class Binding:
    binding_id: str
    source_arn: str
    function_name: str
    batch_size: int
    enabled: bool


class InMemoryQueueService:
    """QueueService that keeps queues and messages in memory.

    ``calls`` records every operation in order as ``(operation, argument)``
    tuples. ``fail_on`` maps an operation name to an exception raised the
    next time it is called.
    """

    def __init__(self, base_url: str = "https://sqs.local/000000000000"):
        self.base_url = base_url.rstrip("/")
        self.queues: dict[str, dict[str, Any]] = {}
        self.messages: dict[str, deque[SentMessage]] = {}
        self.sent: list[SentMessage] = []
        self.calls: list[tuple[str, Any]] = []
        self.fail_on: dict[str, Exception] = {}

    def _maybe_fail(self, operation: str) -> None:
        error = self.fail_on.pop(operation, None)
        if error is not None:
            raise error

    async def create_queue(self, name: str, attributes: Mapping[str, Any]) -> str:
        self.calls.append(("create_queue", name))
        self._maybe_fail("create_queue")
        queue_url = f"{self.base_url}/{name}"
        self.queues[queue_url] = dict(attributes)
        self.messages[queue_url] = deque()
        return queue_url

    async def delete_queue(self, queue_url: str) -> None:
        self.calls.append(("delete_queue", queue_url))
        self._maybe_fail("delete_queue")
        if queue_url not in self.queues:
            raise KeyError(f"queue does not exist: {queue_url}")
        del self.queues[queue_url]
        del self.messages[queue_url]

    async def send_message(self, queue_url: str, body: str, delay_seconds: int) -> str:
        self.calls.append(("send_message", queue_url))
        self._maybe_fail("send_message")
        if queue_url not in self.queues:
            raise KeyError(f"queue does not exist: {queue_url}")
        message = SentMessage(
            queue_url=queue_url,
            body=body,
            delay_seconds=delay_seconds,
            message_id=str(uuid.uuid4()),
        )
        self.messages[queue_url].append(message)
        self.sent.append(message)
        return message.message_id

    def pending(self, queue_url: str) -> int:
        """Number of messages waiting on a queue."""
        return len(self.messages.get(queue_url, ()))

    def receive_envelope(self, queue_url: str, decoded: bool = False) -> dict[str, Any] | None:
        """Pop the oldest message as a Lambda SQS event (None if empty).

        With ``decoded=True`` the body is handed over already parsed, the
        way a local invocation delivers it.
        """
        queue = self.messages.get(queue_url)
        if not queue:
            return None
        message = queue.popleft()
        return {
            "Records": [
                {
                    "messageId": message.message_id,
                    "eventSource": "aws:sqs",
                    "body": json.loads(message.body) if decoded else message.body,
                }
            ]
        }


class InMemoryBindingService:
    """BindingService that keeps event source mappings in memory."""

    def __init__(self) -> None:
        self.bindings: dict[str, Binding] = {}
        self.calls: list[tuple[str, Any]] = []
        self.fail_on: dict[str, Exception] = {}

    def _maybe_fail(self, operation: str) -> None:
        error = self.fail_on.pop(operation, None)
        if error is not None:
            raise error

    async def create_binding(
        self,
        source_arn: str,
        function_name: str,
        *,
        batch_size: int = 1,
        enabled: bool = True,
    ) -> str:
        self.calls.append(("create_binding", source_arn))
        self._maybe_fail("create_binding")
        binding_id = str(uuid.uuid4())
        self.bindings[binding_id] = Binding(
            binding_id=binding_id,
            source_arn=source_arn,
            function_name=function_name,
            batch_size=batch_size,
            enabled=enabled,
        )
        return binding_id

    async def delete_binding(self, binding_id: str) -> None:
        self.calls.append(("delete_binding", binding_id))
        self._maybe_fail("delete_binding")
        if binding_id not in self.bindings:
            raise KeyError(f"binding does not exist: {binding_id}")
        del self.bindings[binding_id]


__all__ = [
    "InMemoryQueueService",
    "InMemoryBindingService",
    "SentMessage",
    "Binding",
]
