#!/usr/bin/env python3
"""Unit tests for the FilterRequestBuilder module."""

import json

import pytest
from web3 import Web3

from eth_log_subscriber.exceptions import FilterConfigurationError
from eth_log_subscriber.filter_builder import FilterRequestBuilder
from eth_log_subscriber.transport import PullTransport, PushTransport, TransportMode

ADDRESS_A = "0x" + "aa" * 20
ADDRESS_B = "0x" + "bb" * 20
TOPIC_1 = "0x01" + "00" * 31
TOPIC_2 = "0x02" + "00" * 31
BLOCK_HASH = "0x" + "ab" * 32


@pytest.fixture
def push_builder():
    """Create a push mode builder with two addresses and two topics."""
    return FilterRequestBuilder(
        TransportMode.PUSH, [ADDRESS_A, ADDRESS_B], [TOPIC_1, TOPIC_2]
    )


@pytest.fixture
def pull_builder():
    """Create a pull mode builder with one address and one topic."""
    return FilterRequestBuilder(TransportMode.PULL, [ADDRESS_A], [TOPIC_1])


def decode(request: bytes) -> dict:
    return json.loads(request)


class TestNormalization:
    """Address and topic normalization at construction."""

    def test_addresses_are_checksummed(self, push_builder):
        """Test that addresses come out as checksummed 20-byte addresses."""
        assert push_builder.addresses == [
            Web3.to_checksum_address(ADDRESS_A),
            Web3.to_checksum_address(ADDRESS_B),
        ]

    def test_short_address_is_left_padded(self):
        """Test that a short address is padded to 20 bytes."""
        builder = FilterRequestBuilder("pull", ["0x1"], [])
        assert builder.addresses == [Web3.to_checksum_address("0x" + "00" * 19 + "01")]

    def test_address_without_prefix(self):
        """Test that addresses without 0x prefix are accepted."""
        builder = FilterRequestBuilder("pull", ["aa" * 20], [])
        assert builder.addresses == [Web3.to_checksum_address(ADDRESS_A)]

    def test_long_address_keeps_rightmost_bytes(self):
        """Test that input longer than 20 bytes keeps the last 20 bytes."""
        builder = FilterRequestBuilder("pull", ["0x" + "ff" * 4 + "aa" * 20], [])
        assert builder.addresses == [Web3.to_checksum_address(ADDRESS_A)]

    def test_topics_collapse_into_one_slot(self, push_builder):
        """Test that all topics become alternatives at position 0."""
        assert push_builder.topics == [[TOPIC_1, TOPIC_2]]

    def test_short_topic_is_padded_to_hash(self):
        """Test that short topics are padded to 32 bytes."""
        builder = FilterRequestBuilder("pull", [], ["0x1"])
        assert builder.topics == [["0x" + "00" * 31 + "01"]]

    def test_empty_topics_are_skipped(self):
        """Test that empty topic strings do not produce alternatives."""
        builder = FilterRequestBuilder("pull", [ADDRESS_A], ["", TOPIC_1, ""])
        assert builder.topics == [[TOPIC_1]]

    def test_no_topics_leaves_empty_slot(self):
        """Test that a builder without topics still has one (wildcard) slot."""
        builder = FilterRequestBuilder("pull", [ADDRESS_A], [""])
        assert builder.topics == [[]]

    def test_invalid_address_rejected(self):
        """Test that non-hex addresses raise an error."""
        with pytest.raises(ValueError, match="Invalid hex value"):
            FilterRequestBuilder("pull", ["not-an-address"], [])

    def test_invalid_topic_rejected(self):
        """Test that non-hex topics raise an error."""
        with pytest.raises(ValueError, match="Invalid hex value"):
            FilterRequestBuilder("pull", [ADDRESS_A], ["0xzz"])

    def test_mode_variant(self, push_builder, pull_builder):
        """Test that the mode selects the matching transport variant."""
        assert isinstance(push_builder.transport, PushTransport)
        assert isinstance(pull_builder.transport, PullTransport)
        assert push_builder.mode is TransportMode.PUSH
        assert pull_builder.mode is TransportMode.PULL


class TestRender:
    """Request rendering for both transport modes."""

    def test_push_request_shape(self, push_builder):
        """Test the eth_subscribe request envelope and filter."""
        message = decode(push_builder.render())

        assert message["jsonrpc"] == "2.0"
        assert message["id"] == 1
        assert message["method"] == "eth_subscribe"
        assert message["params"][0] == "logs"
        assert message["params"][1] == {
            "address": push_builder.addresses,
            "topics": [[TOPIC_1, TOPIC_2]],
            "fromBlock": "0x0",
            "toBlock": "latest",
        }

    def test_push_render_leaves_cursor_unset(self, push_builder):
        """Test that push mode never defaults the cursor."""
        push_builder.render()
        assert push_builder.get_from_block() is None

    def test_pull_request_shape(self, pull_builder):
        """Test the eth_getLogs request envelope."""
        message = decode(pull_builder.render())

        assert message["method"] == "eth_getLogs"
        assert len(message["params"]) == 1
        assert message["params"][0]["address"] == pull_builder.addresses

    def test_pull_first_render_starts_at_latest(self, pull_builder):
        """Test that an unset pull cursor renders as 'latest'."""
        message = decode(pull_builder.render())

        assert message["params"][0]["fromBlock"] == "latest"
        assert pull_builder.get_from_block() == "latest"

    def test_pull_render_uses_cursor(self, pull_builder):
        """Test that a numeric cursor is rendered as hex."""
        pull_builder.set_from_block(101)
        message = decode(pull_builder.render())
        assert message["params"][0]["fromBlock"] == "0x65"

    def test_explicit_range(self):
        """Test that configured block numbers are hex encoded."""
        builder = FilterRequestBuilder(
            "push", [ADDRESS_A], [], from_block=16, to_block=255
        )
        filter_arg = builder.to_filter_arg()
        assert filter_arg["fromBlock"] == "0x10"
        assert filter_arg["toBlock"] == "0xff"

    def test_large_block_numbers(self):
        """Test block numbers beyond 64 bits."""
        builder = FilterRequestBuilder("pull", [ADDRESS_A], [], from_block=2**70)
        assert builder.to_filter_arg()["fromBlock"] == hex(2**70)

    def test_block_hash_replaces_range(self):
        """Test that a block hash query has no range fields."""
        builder = FilterRequestBuilder("pull", [ADDRESS_A], [], block_hash=BLOCK_HASH)
        filter_arg = decode(builder.render())["params"][0]

        assert filter_arg["blockHash"] == BLOCK_HASH
        assert "fromBlock" not in filter_arg
        assert "toBlock" not in filter_arg
        assert builder.get_from_block() is None

    @pytest.mark.parametrize("range_kwargs", [
        {"from_block": 1},
        {"to_block": 2},
        {"from_block": "latest"},
        {"from_block": 1, "to_block": 2},
    ])
    def test_block_hash_with_range_rejected(self, range_kwargs):
        """Test that a block hash combined with a range cannot be rendered."""
        builder = FilterRequestBuilder(
            "push", [ADDRESS_A], [], block_hash=BLOCK_HASH, **range_kwargs
        )
        with pytest.raises(FilterConfigurationError, match="cannot specify both"):
            builder.render()

    def test_roundtrip_addresses_and_topics(self, push_builder):
        """Test that two addresses and two topics survive encoding."""
        filter_arg = decode(push_builder.render())["params"][1]

        assert len(filter_arg["address"]) == 2
        assert [a.lower() for a in filter_arg["address"]] == [ADDRESS_A, ADDRESS_B]
        assert filter_arg["topics"] == [[TOPIC_1, TOPIC_2]]


class TestCursor:
    """Cursor accessor behaviour."""

    def test_advance_from_unset(self, pull_builder):
        """Test that an unset cursor always advances."""
        assert pull_builder.advance_from_block(10) is True
        assert pull_builder.get_from_block() == 10

    def test_advance_from_latest(self, pull_builder):
        """Test that a 'latest' cursor is replaced by a real block."""
        pull_builder.set_from_block("latest")
        assert pull_builder.advance_from_block(5) is True
        assert pull_builder.get_from_block() == 5

    def test_cursor_never_moves_backwards(self, pull_builder):
        """Test that equal or lower candidates are ignored."""
        pull_builder.set_from_block(100)

        assert pull_builder.advance_from_block(100) is False
        assert pull_builder.advance_from_block(50) is False
        assert pull_builder.get_from_block() == 100

        assert pull_builder.advance_from_block(101) is True
        assert pull_builder.get_from_block() == 101

    def test_block_hash_query_has_no_cursor(self):
        """Test that the cursor is not moved for block hash queries."""
        builder = FilterRequestBuilder("pull", [ADDRESS_A], [], block_hash=BLOCK_HASH)
        assert builder.advance_from_block(10) is False
        assert builder.get_from_block() is None

    @pytest.mark.parametrize("value", [-1, 1.5, "earliest", True])
    def test_invalid_cursor_rejected(self, pull_builder, value):
        """Test that invalid cursor values are rejected."""
        with pytest.raises(ValueError):
            pull_builder.set_from_block(value)
