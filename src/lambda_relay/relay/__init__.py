"""Relay packet lifecycle: setup, extract, relay_pass, tear_down."""

from lambda_relay.relay.codec import decode_packet, encode_packet, extract, make_envelope
from lambda_relay.relay.context import ExecutionContext
from lambda_relay.relay.decommissioner import Decommissioner
from lambda_relay.relay.dispatcher import MAX_DELAY_SECONDS, RelayDispatcher, clamp_delay
from lambda_relay.relay.handler import Continue, FanOut, Finish, relay_handler, run_hop, start_relay
from lambda_relay.relay.packet import MAX_PACKET_BYTES, RelayPacket, RelayStats
from lambda_relay.relay.protocols import BindingService, QueueService
from lambda_relay.relay.provisioner import Provisioner, synthesize_queue_name
from lambda_relay.relay.service import RelayService

__all__ = [
    "BindingService",
    "Continue",
    "Decommissioner",
    "ExecutionContext",
    "FanOut",
    "Finish",
    "MAX_DELAY_SECONDS",
    "MAX_PACKET_BYTES",
    "Provisioner",
    "QueueService",
    "RelayDispatcher",
    "RelayPacket",
    "RelayService",
    "RelayStats",
    "clamp_delay",
    "decode_packet",
    "encode_packet",
    "extract",
    "make_envelope",
    "relay_handler",
    "run_hop",
    "start_relay",
    "synthesize_queue_name",
]
