#!/usr/bin/env python3
"""Data models for the log subscription core.

This module provides the immutable event record handed to collaborators
and the mutable filter query owned by a request builder.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .utils.hex_utility import decode_quantity

BlockArg = int | str | None


def _optional_int(value: Any) -> int | None:
    try:
        return decode_quantity(value)
    except ValueError:
        return None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _topics(value: Any) -> tuple[str, ...]:
    # Anything but a list of strings carries no usable topic
    if not isinstance(value, list):
        return ()
    return tuple(topic for topic in value if isinstance(topic, str))


@dataclass(frozen=True, slots=True)
class LogEvent:
    """Represents a single log record returned by a node.

    The core does not interpret log data. Every field of the node's raw
    record is kept in ``raw`` and the common ones are exposed as attributes.

    Attributes:
        address: Contract address that emitted the log
        block_hash: Hash of the containing block
        block_number: Number of the containing block, if parseable
        data: Non-indexed event data
        log_index: Position of the log in the block
        topics: Indexed topics, signature first
        transaction_hash: Hash of the emitting transaction
        transaction_index: Position of the transaction in the block
        removed: True when the log was removed by a reorganization
        raw: Read-only view of the record exactly as the node returned it
    """

    address: str | None
    block_hash: str | None
    block_number: int | None
    data: str | None
    log_index: int | None
    topics: tuple[str, ...]
    transaction_hash: str | None
    transaction_index: int | None
    removed: bool = False
    raw: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({}), repr=False, compare=False
    )

    @classmethod
    def from_raw(cls, record: dict[str, Any], block_number: int | None = None) -> "LogEvent":
        """Build an event from one element of a node's log array.

        Fields of an unexpected type are exposed as None (or no topics) but
        remain untouched in ``raw``; building an event never fails.

        Args:
            record: Raw log object
            block_number: Already parsed block number, parsed from the
                record when not given
        """
        if block_number is None:
            block_number = _optional_int(record.get("blockNumber"))

        return cls(
            address=_optional_str(record.get("address")),
            block_hash=_optional_str(record.get("blockHash")),
            block_number=block_number,
            data=_optional_str(record.get("data")),
            log_index=_optional_int(record.get("logIndex")),
            topics=_topics(record.get("topics")),
            transaction_hash=_optional_str(record.get("transactionHash")),
            transaction_index=_optional_int(record.get("transactionIndex")),
            removed=record.get("removed") is True,
            raw=MappingProxyType(dict(record)),
        )

    def __str__(self) -> str:
        """Human-readable string representation."""
        tx = (self.transaction_hash or "")[:10]
        return (
            f"LogEvent(address={self.address}, "
            f"block={self.block_number}, "
            f"tx={tx}..., "
            f"index={self.log_index})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the raw node record."""
        return dict(self.raw)

    def to_json(self) -> bytes:
        """Serialize the raw node record for downstream consumers."""
        return json.dumps(dict(self.raw), separators=(",", ":")).encode("utf-8")

    @property
    def unique_key(self) -> tuple[str | None, str | None, int | None]:
        """Key identifying this log across overlapping deliveries."""
        return (self.block_hash, self.transaction_hash, self.log_index)


@dataclass(slots=True)
class FilterQuery:
    """Which logs to retrieve, by address, topic and block range.

    ``from_block`` doubles as the pull cursor and is only changed through
    the owning builder's accessor methods.

    Attributes:
        addresses: Canonical contract addresses, empty matches any
        topics: Topic slots, each a list of alternatives; None matches any
        from_block: Block number, ``"latest"`` or unset
        to_block: Block number, ``"latest"`` or unset
        block_hash: Exact block selector, exclusive with the range fields
    """

    addresses: list[str] = field(default_factory=list)
    topics: list[list[str]] | None = None
    from_block: BlockArg = None
    to_block: BlockArg = None
    block_hash: str | None = None

    @property
    def has_range(self) -> bool:
        return self.from_block is not None or self.to_block is not None
