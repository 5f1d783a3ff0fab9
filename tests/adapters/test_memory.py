"""Tests for lambda_relay.adapters.memory — in-process collaborators."""

import pytest

from lambda_relay.adapters.memory import InMemoryBindingService, InMemoryQueueService
from lambda_relay.relay.protocols import BindingService, QueueService


class TestProtocols:
    def test_satisfy_protocols(self):
        assert isinstance(InMemoryQueueService(), QueueService)
        assert isinstance(InMemoryBindingService(), BindingService)


class TestInMemoryQueueService:
    @pytest.mark.asyncio
    async def test_queue_url_from_name(self):
        queues = InMemoryQueueService(base_url="https://sqs.test/111111111111/")
        assert await queues.create_queue("relay", {"DelaySeconds": 0}) == "https://sqs.test/111111111111/relay"

    @pytest.mark.asyncio
    async def test_fifo_receive(self):
        queues = InMemoryQueueService()
        url = await queues.create_queue("relay", {})
        await queues.send_message(url, '{"n": 1}', 0)
        await queues.send_message(url, '{"n": 2}', 5)

        assert queues.pending(url) == 2
        first = queues.receive_envelope(url)
        second = queues.receive_envelope(url, decoded=True)
        assert first["Records"][0]["body"] == '{"n": 1}'
        assert second["Records"][0]["body"] == {"n": 2}
        assert queues.receive_envelope(url) is None

    @pytest.mark.asyncio
    async def test_send_to_missing_queue(self):
        with pytest.raises(KeyError):
            await InMemoryQueueService().send_message("https://nowhere", "{}", 0)

    @pytest.mark.asyncio
    async def test_fail_on_is_one_shot(self):
        queues = InMemoryQueueService()
        queues.fail_on["create_queue"] = RuntimeError("boom")
        with pytest.raises(RuntimeError):
            await queues.create_queue("a", {})
        assert await queues.create_queue("a", {})
        assert queues.calls == [("create_queue", "a"), ("create_queue", "a")]


class TestInMemoryBindingService:
    @pytest.mark.asyncio
    async def test_create_and_delete(self):
        bindings = InMemoryBindingService()
        binding_id = await bindings.create_binding("arn:src", "arn:fn", batch_size=1)
        assert bindings.bindings[binding_id].function_name == "arn:fn"

        await bindings.delete_binding(binding_id)
        assert bindings.bindings == {}

    @pytest.mark.asyncio
    async def test_delete_unknown(self):
        with pytest.raises(KeyError):
            await InMemoryBindingService().delete_binding("missing")
