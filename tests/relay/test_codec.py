"""Tests for lambda_relay.relay.codec — encode, decode, extract.

Covers the two failure channels (PacketDecodeError vs None), default
back-filling, both body shapes, legacy key spellings and custom field
preservation.
"""

import json

import pytest

from lambda_relay.core.errors import PacketDecodeError, ValidationError
from lambda_relay.observability import RecordingObserver, RelayEvent
from lambda_relay.relay.codec import decode_packet, encode_packet, extract, make_envelope
from lambda_relay.relay.packet import RelayPacket, RelayStats


def _envelope(body):
    return {"Records": [{"body": body}]}


class TestEncode:
    def test_compact_json(self, make_packet):
        body = encode_packet(make_packet(cursor=1))
        assert " " not in body
        assert json.loads(body)["cursor"] == 1

    def test_unserializable_custom_value(self, make_packet):
        packet = make_packet(handle=object())
        with pytest.raises(ValidationError) as exc_info:
            encode_packet(packet)
        assert isinstance(exc_info.value.__cause__, TypeError)


class TestExtractValid:
    def test_round_trip_string_body(self, make_packet):
        packet = make_packet(sqs_count=7, cursor={"page": 3}, tags=["a", "b"])
        assert extract(make_envelope(packet)) == packet

    def test_round_trip_decoded_body(self, make_packet):
        packet = make_packet(sqs_count=1, cursor=5)
        assert extract(make_envelope(packet, decoded=True)) == packet

    def test_bytes_body(self, make_packet):
        packet = make_packet()
        assert extract(_envelope(encode_packet(packet).encode("utf-8"))) == packet

    def test_backfills_attempt_and_stats(self):
        packet = extract(_envelope({"queueAddress": "https://q", "bindingId": "u-1"}))
        assert packet.attempt == 0
        assert packet.stats == RelayStats(sqs_count=0)
        assert packet.custom == {}

    def test_backfills_missing_sqs_count(self):
        packet = extract(_envelope({"queueAddress": "https://q", "bindingId": "u-1", "stats": {}}))
        assert packet.stats.sqs_count == 0

    def test_preserves_attempt(self):
        packet = extract(
            _envelope({"queueAddress": "https://q", "bindingId": "u-1", "attempt": 3})
        )
        assert packet.attempt == 3

    def test_only_first_record_consumed(self, make_packet):
        first = make_packet(which="first")
        second = make_packet(which="second")
        envelope = {"Records": [{"body": encode_packet(first)}, {"body": encode_packet(second)}]}
        assert extract(envelope)["which"] == "first"

    def test_legacy_identifier_keys(self):
        packet = extract(
            _envelope({"QueueUrl": "https://q", "UUID": "u-1", "stats": {"sqsCount": 2}, "n": 1})
        )
        assert packet.queue_url == "https://q"
        assert packet.binding_id == "u-1"
        assert packet.custom == {"n": 1}

    def test_does_not_mutate_decoded_body(self):
        body = {"queueAddress": "https://q", "bindingId": "u-1", "items": [1]}
        packet = extract(_envelope(body))
        packet["items"].append(2)
        assert body == {"queueAddress": "https://q", "bindingId": "u-1", "items": [1]}


class TestExtractIncomplete:
    @pytest.mark.parametrize(
        "body",
        [
            {"bindingId": "u-1"},
            {"queueAddress": "https://q"},
            {"queueAddress": "", "bindingId": "u-1"},
            {"queueAddress": "https://q", "bindingId": ""},
            {"queueAddress": 42, "bindingId": "u-1"},
            {},
        ],
    )
    def test_returns_none(self, body):
        assert extract(_envelope(json.dumps(body)), observer=RecordingObserver()) is None

    def test_emits_invalid_message(self):
        observer = RecordingObserver()
        extract(_envelope({"cursor": 1}), observer=observer)
        assert observer.names() == ["invalid_message"]
        assert observer.of(RelayEvent.INVALID_MESSAGE)[0].fields["keys"] == ["cursor"]

    def test_decode_packet_returns_none(self):
        assert decode_packet({"queueAddress": "https://q"}) is None


class TestExtractMalformed:
    @pytest.mark.parametrize(
        "envelope",
        [
            {},
            {"Records": []},
            {"Records": "nope"},
            {"Records": [{}]},
            {"Records": [{"body": None}]},
            {"Records": [{"body": 12}]},
            ["not", "a", "mapping"],
        ],
    )
    def test_bad_envelope(self, envelope):
        with pytest.raises(PacketDecodeError):
            extract(envelope)

    def test_invalid_json_is_chained(self):
        with pytest.raises(PacketDecodeError) as exc_info:
            extract(_envelope("{not json"))
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    def test_invalid_utf8_bytes_body(self):
        with pytest.raises(PacketDecodeError) as exc_info:
            extract(_envelope(b"\xff\xfe{"))
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    @pytest.mark.parametrize("body", ["[1, 2]", '"text"', "null", "3"])
    def test_non_object_body(self, body):
        with pytest.raises(PacketDecodeError):
            extract(_envelope(body))

    @pytest.mark.parametrize(
        "extra",
        [
            {"attempt": -1},
            {"attempt": "1"},
            {"attempt": True},
            {"stats": []},
            {"stats": {"sqsCount": -2}},
            {"stats": {"sqsCount": 1.5}},
        ],
    )
    def test_bad_known_field_shapes(self, extra):
        body = {"queueAddress": "https://q", "bindingId": "u-1", **extra}
        with pytest.raises(PacketDecodeError):
            extract(_envelope(body))


class TestMakeEnvelope:
    def test_string_body_by_default(self, make_packet):
        envelope = make_envelope(make_packet())
        assert isinstance(envelope["Records"][0]["body"], str)

    def test_raw_string_decoded(self):
        envelope = make_envelope('{"a": 1}', decoded=True)
        assert envelope["Records"][0]["body"] == {"a": 1}

    def test_mapping_source(self):
        envelope = make_envelope({"queueAddress": "https://q", "bindingId": "u-1"})
        assert extract(envelope) == RelayPacket(queue_url="https://q", binding_id="u-1")
