"""Tests for lambda_relay.relay.context — ExecutionContext."""

from types import SimpleNamespace

import pytest

from lambda_relay.core.errors import InvalidExecutionContextError
from lambda_relay.relay.context import ExecutionContext, resolve_context


class TestFromArn:
    def test_function_arn(self):
        ctx = ExecutionContext.from_arn("arn:aws:lambda:us-east-1:123456789012:function:kickoff")
        assert ctx == ExecutionContext(region="us-east-1", account_id="123456789012")

    def test_qualified_arn(self):
        ctx = ExecutionContext.from_arn("arn:aws:lambda:us-east-1:123456789012:function:kickoff:live")
        assert ctx.region == "us-east-1"

    def test_other_partition(self):
        ctx = ExecutionContext.from_arn("arn:aws-cn:lambda:cn-north-1:123456789012:function:f")
        assert ctx.partition == "aws-cn"
        assert ctx.queue_arn("q") == "arn:aws-cn:sqs:cn-north-1:123456789012:q"

    @pytest.mark.parametrize(
        "arn",
        [
            "",
            "kickoff",
            "arn:aws:lambda",
            "arn:aws:lambda::123456789012:function:f",
            "arn:aws:lambda:us-east-1::function:f",
            "arn:aws:lambda:us-east-1:12345:function:f",
            "nra:aws:lambda:us-east-1:123456789012:function:f",
        ],
    )
    def test_rejects_malformed(self, arn):
        with pytest.raises(InvalidExecutionContextError) as exc_info:
            ExecutionContext.from_arn(arn)
        assert exc_info.value.arn == arn


class TestArns:
    def test_queue_and_function_arns(self, execution_context):
        assert execution_context.queue_arn("q1") == "arn:aws:sqs:eu-west-1:123456789012:q1"
        assert (
            execution_context.function_arn("worker1")
            == "arn:aws:lambda:eu-west-1:123456789012:function:worker1"
        )


class TestResolve:
    def test_passthrough(self, execution_context):
        assert resolve_context(execution_context) is execution_context

    def test_lambda_context(self, lambda_context):
        assert resolve_context(lambda_context).account_id == "123456789012"

    def test_missing_arn(self):
        with pytest.raises(InvalidExecutionContextError):
            resolve_context(SimpleNamespace())
