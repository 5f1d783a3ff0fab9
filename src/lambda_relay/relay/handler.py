"""Lambda entrypoint helpers for relay-driven tasks.

WHY
───
Every relay worker has the same skeleton: pull the packet out of the SQS
event, do a time-boxed slice of work, then either hand off to the next
execution, fan out, or clean up. ``relay_handler`` owns that skeleton so
task code only decides *what* happens next.

ARCHITECTURE
────────────
::

    @relay_handler(service)
    async def step(packet, context) -> HopOutcome:
        ...
        return Continue(delay_seconds=5)     ─ relay_pass(packet, 5)
        return FanOut([a, b, c])             ─ relay_pass(a), (b), (c) concurrently
        return Finish()                      ─ tear_down(packet)

    step(event, context)  →  {"status": "relayed" | "fanned_out" |
                                        "finished" | "ignored", ...}

    start_relay(service, context, "worker1", fields={...})
      ─ setup() + first relay_pass(), for the function that kicks a task off

Exceptions raised by the step propagate out of the handler. The message is
then redelivered by SQS according to the queue's redrive settings, which is
the retry boundary for a hop.
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from lambda_relay.core.errors import ValidationError
from lambda_relay.core.logging import LogContext, get_logger
from lambda_relay.relay.packet import RelayPacket
from lambda_relay.relay.service import RelayService

logger = get_logger(__name__)


@dataclass(frozen=True)
class Continue:
    """Relay the current packet to the next execution."""

    delay_seconds: float | None = None


@dataclass(frozen=True)
class FanOut:
    """Relay each packet as an independent branch."""

    packets: Sequence[RelayPacket] = field(default_factory=tuple)
    delay_seconds: float | None = None


@dataclass(frozen=True)
class Finish:
    """No further hops; remove the queue and binding."""


HopOutcome = Union[Continue, FanOut, Finish]
StepFunction = Callable[[RelayPacket, Any], Awaitable[HopOutcome]]


async def run_hop(
    service: RelayService,
    step: StepFunction,
    event: Mapping[str, Any],
    context: Any = None,
) -> dict[str, Any]:
    """Extract the packet, run one step and act on its outcome."""
    packet = service.extract(event)
    if packet is None:
        return {"status": "ignored"}

    async with LogContext(queue_url=packet.queue_url, sqs_count=packet.stats.sqs_count):
        outcome = await step(packet, context)

        if isinstance(outcome, Continue):
            relayed = await service.relay_pass(packet, outcome.delay_seconds)
            return {"status": "relayed", "relayed": int(relayed), "sqs_count": packet.stats.sqs_count}

        if isinstance(outcome, FanOut):
            results = await asyncio.gather(
                *(service.relay_pass(branch, outcome.delay_seconds) for branch in outcome.packets)
            )
            logger.info("hop_fanned_out", branches=len(results), relayed=sum(results))
            return {"status": "fanned_out", "relayed": sum(results)}

        if isinstance(outcome, Finish):
            torn_down = await service.tear_down(packet)
            return {"status": "finished", "torn_down": torn_down, "sqs_count": packet.stats.sqs_count}

    raise ValidationError(
        f"relay step must return Continue, FanOut or Finish, got {type(outcome).__name__}"
    ).with_context(queue_url=packet.queue_url, binding_id=packet.binding_id)


def relay_handler(service: RelayService) -> Callable[[StepFunction], Callable[..., dict[str, Any]]]:
    """Turn an async step function into a synchronous Lambda handler."""

    def decorator(step: StepFunction) -> Callable[..., dict[str, Any]]:
        @functools.wraps(step)
        def handler(event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
            return asyncio.run(run_hop(service, step, event, context))

        return handler

    return decorator


async def start_relay(
    service: RelayService,
    context: Any,
    target_name: str,
    fields: Mapping[str, Any] | None = None,
    *,
    delay_seconds: float | None = None,
    queue_name: str | None = None,
    queue_attributes: Mapping[str, Any] | None = None,
) -> RelayPacket:
    """Provision a relay and send its first hop."""
    packet = await service.setup(context, target_name, queue_name, queue_attributes)
    if fields:
        packet.update(fields)
    await service.relay_pass(packet, delay_seconds)
    return packet


__all__ = [
    "Continue",
    "FanOut",
    "Finish",
    "HopOutcome",
    "relay_handler",
    "run_hop",
    "start_relay",
]
