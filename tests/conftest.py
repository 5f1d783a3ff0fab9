"""
Shared pytest fixtures and configuration for lambda-relay tests.

This module provides:
- In-memory queue/binding collaborators and a wired RelayService
- A recording observer for asserting lifecycle events
- A fake Lambda context and a deterministic clock
- Packet factories

Usage:
    Fixtures are auto-discovered by pytest; use them as function arguments.

    async def test_something(service, lambda_context):
        packet = await service.setup(lambda_context, "worker1")
"""

from pathlib import Path
from types import SimpleNamespace

import pytest

from lambda_relay.adapters.memory import InMemoryBindingService, InMemoryQueueService
from lambda_relay.observability import RecordingObserver
from lambda_relay.relay import ExecutionContext, RelayPacket, RelayService, RelayStats

FIXED_EPOCH = 1_700_000_000.123
ACCOUNT_ID = "123456789012"
REGION = "eu-west-1"
FUNCTION_ARN = f"arn:aws:lambda:{REGION}:{ACCOUNT_ID}:function:kickoff"


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def queues() -> InMemoryQueueService:
    return InMemoryQueueService()


@pytest.fixture
def bindings() -> InMemoryBindingService:
    return InMemoryBindingService()


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def clock():
    """Deterministic clock frozen at FIXED_EPOCH."""
    return lambda: FIXED_EPOCH


@pytest.fixture
def service(queues, bindings, observer, clock) -> RelayService:
    return RelayService(queues, bindings, observer=observer, clock=clock)


# =============================================================================
# Context Fixtures
# =============================================================================


@pytest.fixture
def lambda_context() -> SimpleNamespace:
    """Minimal stand-in for the context object AWS Lambda passes a handler."""
    return SimpleNamespace(
        function_name="kickoff",
        invoked_function_arn=FUNCTION_ARN,
        aws_request_id="req-0001",
    )


@pytest.fixture
def execution_context() -> ExecutionContext:
    return ExecutionContext(region=REGION, account_id=ACCOUNT_ID)


# =============================================================================
# Packet Fixtures
# =============================================================================


@pytest.fixture
def make_packet():
    """Factory for packets that point at an existing in-memory queue."""

    def _make(
        queue_url: str = "https://sqs.local/000000000000/relay",
        binding_id: str = "3f1c2a9e-0000-4000-8000-000000000001",
        sqs_count: int = 0,
        **custom,
    ) -> RelayPacket:
        return RelayPacket(
            queue_url=queue_url,
            binding_id=binding_id,
            stats=RelayStats(sqs_count=sqs_count),
            custom=dict(custom),
        )

    return _make

