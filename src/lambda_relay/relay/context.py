"""Execution context — where the relay's resources live.

``setup()`` needs a partition, region and account id to build the SQS
source ARN and the Lambda function ARN for the event source mapping. A
running Lambda already knows all three: they are embedded in
``context.invoked_function_arn``.

Examples:
    >>> ctx = ExecutionContext.from_arn(
    ...     "arn:aws:lambda:eu-west-1:123456789012:function:ingest:live"
    ... )
    >>> ctx.queue_arn("awsRelayQueue_worker1_1700000000000")
    'arn:aws:sqs:eu-west-1:123456789012:awsRelayQueue_worker1_1700000000000'
    >>> ctx.function_arn("worker1")
    'arn:aws:lambda:eu-west-1:123456789012:function:worker1'
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from lambda_relay.core.errors import InvalidExecutionContextError

_ACCOUNT_RE = re.compile(r"^\d{12}$")


@dataclass(frozen=True)
class ExecutionContext:
    """Partition, region and account the relay resources are created in."""

    region: str
    account_id: str
    partition: str = "aws"

    def __post_init__(self) -> None:
        if not self.region:
            raise InvalidExecutionContextError("execution context has no region")
        if not _ACCOUNT_RE.match(self.account_id or ""):
            raise InvalidExecutionContextError(
                f"execution context account id must be 12 digits, got {self.account_id!r}"
            )
        if not self.partition:
            raise InvalidExecutionContextError("execution context has no partition")

    @classmethod
    def from_arn(cls, arn: str) -> ExecutionContext:
        """Parse the identity out of any ARN with region and account fields."""
        parts = arn.split(":") if isinstance(arn, str) else []
        if len(parts) < 6 or parts[0] != "arn":
            raise InvalidExecutionContextError(f"not an ARN: {arn!r}", arn=str(arn))
        try:
            return cls(region=parts[3], account_id=parts[4], partition=parts[1])
        except InvalidExecutionContextError as e:
            raise InvalidExecutionContextError(
                f"ARN does not identify a region and account: {arn!r}", arn=arn, cause=e
            ) from e

    @classmethod
    def from_lambda_context(cls, context: Any) -> ExecutionContext:
        """Build from the context object AWS Lambda passes to a handler."""
        arn = getattr(context, "invoked_function_arn", None)
        if not arn:
            raise InvalidExecutionContextError("Lambda context has no invoked_function_arn")
        return cls.from_arn(arn)

    def queue_arn(self, queue_name: str) -> str:
        return f"arn:{self.partition}:sqs:{self.region}:{self.account_id}:{queue_name}"

    def function_arn(self, function_name: str) -> str:
        return f"arn:{self.partition}:lambda:{self.region}:{self.account_id}:function:{function_name}"


def resolve_context(context: Any) -> ExecutionContext:
    """Accept an ExecutionContext or a Lambda context object."""
    if isinstance(context, ExecutionContext):
        return context
    return ExecutionContext.from_lambda_context(context)


__all__ = ["ExecutionContext", "resolve_context"]
