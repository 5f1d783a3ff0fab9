"""Collaborator protocols — the only way the relay core reaches AWS.

ARCHITECTURE
────────────
::

    QueueService (Protocol)               BindingService (Protocol)
      ├── .create_queue(name, attrs)        ├── .create_binding(source_arn,
      │       -> queue URL                  │       function_name, batch_size,
      ├── .delete_queue(queue_url)          │       enabled) -> UUID
      └── .send_message(queue_url, body,    └── .delete_binding(binding_id)
              delay_seconds) -> message id

    Implementations:
      SqsQueueService / LambdaBindingService      ─ boto3   (adapters.aws)
      InMemoryQueueService / InMemoryBindingService ─ local (adapters.memory)

Collaborators raise whatever their backend raises. The relay core never
catches, translates or retries those errors.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class QueueService(Protocol):
    """Managed queue operations used by the relay."""

    async def create_queue(self, name: str, attributes: Mapping[str, Any]) -> str:
        """Create a queue and return its URL."""
        ...

    async def delete_queue(self, queue_url: str) -> None:
        """Delete the queue at ``queue_url``."""
        ...

    async def send_message(self, queue_url: str, body: str, delay_seconds: int) -> str:
        """Enqueue ``body`` with a delivery delay and return the message id.

        ``delay_seconds`` is always within 0..900 when called by the relay.
        """
        ...


@runtime_checkable
class BindingService(Protocol):
    """Event source mapping operations used by the relay."""

    async def create_binding(
        self,
        source_arn: str,
        function_name: str,
        *,
        batch_size: int = 1,
        enabled: bool = True,
    ) -> str:
        """Route messages from ``source_arn`` to ``function_name``; return the mapping UUID."""
        ...

    async def delete_binding(self, binding_id: str) -> None:
        """Remove the mapping identified by ``binding_id``."""
        ...


__all__ = ["QueueService", "BindingService"]
