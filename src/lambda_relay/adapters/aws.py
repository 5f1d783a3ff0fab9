"""boto3-backed collaborators: SQS queues and Lambda event source mappings.

Works with AWS and with SQS/Lambda-compatible endpoints (LocalStack) via
``RelaySettings.endpoint_url``.

boto3 clients are synchronous, so each call runs in a worker thread
(``asyncio.to_thread``) and the relay operations await it. Clients are
thread-safe and are built once per process.

botocore errors (``ClientError``, ``EndpointConnectionError``, ...)
propagate unmodified. The only retries are botocore's own, configured
through ``RelaySettings.max_attempts``.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import Any

import boto3
from botocore.config import Config

from lambda_relay.core.logging import get_logger
from lambda_relay.core.settings import RelaySettings

logger = get_logger(__name__)


def _client_kwargs(settings: RelaySettings) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "config": Config(retries={"max_attempts": settings.max_attempts, "mode": "standard"}),
    }
    if settings.region:
        kwargs["region_name"] = settings.region
    if settings.endpoint_url:
        kwargs["endpoint_url"] = settings.endpoint_url
    return kwargs


def build_sqs_client(settings: RelaySettings | None = None) -> Any:
    """Create the boto3 SQS client."""
    settings = settings or RelaySettings()
    return boto3.client("sqs", **_client_kwargs(settings))


def build_lambda_client(settings: RelaySettings | None = None) -> Any:
    """Create the boto3 Lambda client."""
    settings = settings or RelaySettings()
    return boto3.client("lambda", **_client_kwargs(settings))


def sqs_attribute_value(value: Any) -> str:
    """SQS takes every queue attribute as a string.

    >>> sqs_attribute_value(0), sqs_attribute_value(True)
    ('0', 'true')
    >>> sqs_attribute_value({"maxReceiveCount": 3})
    '{"maxReceiveCount": 3}'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


class SqsQueueService:
    """QueueService over a boto3 SQS client."""

    def __init__(self, client: Any):
        self.client = client

    async def create_queue(self, name: str, attributes: Mapping[str, Any]) -> str:
        response = await asyncio.to_thread(
            self.client.create_queue,
            QueueName=name,
            Attributes={key: sqs_attribute_value(value) for key, value in attributes.items()},
        )
        queue_url = response["QueueUrl"]
        logger.debug("sqs_queue_created", queue_name=name, queue_url=queue_url)
        return queue_url

    async def delete_queue(self, queue_url: str) -> None:
        await asyncio.to_thread(self.client.delete_queue, QueueUrl=queue_url)
        logger.debug("sqs_queue_deleted", queue_url=queue_url)

    async def send_message(self, queue_url: str, body: str, delay_seconds: int) -> str:
        response = await asyncio.to_thread(
            self.client.send_message,
            QueueUrl=queue_url,
            MessageBody=body,
            DelaySeconds=delay_seconds,
        )
        return response["MessageId"]


class LambdaBindingService:
    """BindingService over a boto3 Lambda client (event source mappings)."""

    def __init__(self, client: Any):
        self.client = client

    async def create_binding(
        self,
        source_arn: str,
        function_name: str,
        *,
        batch_size: int = 1,
        enabled: bool = True,
    ) -> str:
        response = await asyncio.to_thread(
            self.client.create_event_source_mapping,
            EventSourceArn=source_arn,
            FunctionName=function_name,
            Enabled=enabled,
            BatchSize=batch_size,
        )
        binding_id = response["UUID"]
        logger.debug(
            "event_source_mapping_created",
            source_arn=source_arn,
            function_name=function_name,
            binding_id=binding_id,
        )
        return binding_id

    async def delete_binding(self, binding_id: str) -> None:
        await asyncio.to_thread(self.client.delete_event_source_mapping, UUID=binding_id)
        logger.debug("event_source_mapping_deleted", binding_id=binding_id)


__all__ = [
    "SqsQueueService",
    "LambdaBindingService",
    "build_sqs_client",
    "build_lambda_client",
    "sqs_attribute_value",
]
