"""
lambda-relay — chain short Lambda executions into one long-running task.

A task that cannot finish inside one Lambda time limit is split into hops.
Each hop does a slice of work and hands a *relay packet* to the next
execution through a temporary SQS queue bound to the worker function.

Lifecycle::

    setup()        ─ create queue + event source mapping, first packet
    relay_pass()   ─ bump hop counter, enqueue packet (chain or fan-out)
    extract()      ─ recover and validate the packet at the start of a hop
    tear_down()    ─ delete mapping, then queue

Quick start::

    from lambda_relay import RelayService

    service = RelayService.from_settings()

    async def kickoff(event, context):
        packet = await service.setup(context, "worker1")
        packet["offset"] = 0
        await service.relay_pass(packet)
"""

from lambda_relay.core.errors import (
    InvalidExecutionContextError,
    PacketDecodeError,
    RelayError,
    ReservedFieldError,
    ValidationError,
)
from lambda_relay.observability import (
    LoggingObserver,
    RecordingObserver,
    RelayEvent,
    RelayObserver,
)
from lambda_relay.relay import (
    Continue,
    ExecutionContext,
    FanOut,
    Finish,
    RelayPacket,
    RelayService,
    RelayStats,
    clamp_delay,
    encode_packet,
    extract,
    make_envelope,
    relay_handler,
    start_relay,
)

__version__ = "0.1.0"

__all__ = [
    "Continue",
    "ExecutionContext",
    "FanOut",
    "Finish",
    "InvalidExecutionContextError",
    "LoggingObserver",
    "PacketDecodeError",
    "RecordingObserver",
    "RelayError",
    "RelayEvent",
    "RelayObserver",
    "RelayPacket",
    "RelayService",
    "RelayStats",
    "ReservedFieldError",
    "ValidationError",
    "clamp_delay",
    "encode_packet",
    "extract",
    "make_envelope",
    "relay_handler",
    "start_relay",
    "__version__",
]
