"""
Transport mode variants for log subscriptions.

A subscription is either pushed by the node over a long-lived
``eth_subscribe`` stream, or pulled with repeated ``eth_getLogs`` range
queries. Each mode is its own class carrying its request shape and its
record handling. Only the pull variant is given access to the block
cursor.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Protocol

from .models import BlockArg, LogEvent
from .utils.hex_utility import LATEST, decode_quantity

logger = logging.getLogger(__name__)


class TransportMode(Enum):
    """How log records reach the subscriber."""
    PUSH = "push"
    PULL = "pull"

    @classmethod
    def parse(cls, value: "str | TransportMode") -> "TransportMode":
        """Parse a mode name, accepting ``ws``/``rpc`` style aliases."""
        if isinstance(value, cls):
            return value

        aliases = {
            "push": cls.PUSH,
            "ws": cls.PUSH,
            "wss": cls.PUSH,
            "websocket": cls.PUSH,
            "pull": cls.PULL,
            "rpc": cls.PULL,
            "http": cls.PULL,
            "https": cls.PULL,
        }
        try:
            return aliases[str(value).strip().lower()]
        except KeyError:
            raise ValueError(
                f"Unsupported transport mode: {value}. "
                f"Supported modes: {', '.join(sorted(aliases))}"
            ) from None


class BlockCursor(Protocol):
    """Accessors a pull transport uses to read and move the cursor."""

    def get_from_block(self) -> BlockArg: ...

    def set_from_block(self, value: BlockArg) -> None: ...

    def advance_from_block(self, candidate: int) -> bool: ...


@dataclass(frozen=True, slots=True)
class PushTransport:
    """Long-lived ``eth_subscribe`` subscription.

    The node delivers each matching log exactly once, so records are
    emitted as they are and no cursor is kept.
    """

    mode: ClassVar[TransportMode] = TransportMode.PUSH
    method: ClassVar[str] = "eth_subscribe"

    def build_params(self, filter_arg: dict[str, Any]) -> list[Any]:
        return ["logs", filter_arg]

    def collect(self, records: list[dict[str, Any]]) -> list[LogEvent]:
        return [LogEvent.from_raw(record) for record in records]


@dataclass(frozen=True, slots=True)
class PullTransport:
    """Repeated ``eth_getLogs`` range queries.

    Every batch moves the cursor to one past the highest block seen so
    the next query starts strictly after already delivered blocks.
    """

    mode: ClassVar[TransportMode] = TransportMode.PULL
    method: ClassVar[str] = "eth_getLogs"

    def build_params(self, filter_arg: dict[str, Any]) -> list[Any]:
        return [filter_arg]

    def prepare(self, cursor: BlockCursor) -> None:
        """Start an unset cursor at the chain head on the first query."""
        if cursor.get_from_block() is None:
            cursor.set_from_block(LATEST)

    def collect(self, records: list[dict[str, Any]], cursor: BlockCursor) -> list[LogEvent]:
        """
        Emit records with a valid block number and advance the cursor.

        A record whose ``blockNumber`` cannot be parsed is skipped entirely:
        it is neither emitted nor used for the cursor.

        Args:
            records: Raw log objects from one response
            cursor: Cursor owner, normally the request builder

        Returns:
            Events for the records that were kept
        """
        events: list[LogEvent] = []
        for record in records:
            try:
                block_number = decode_quantity(record.get("blockNumber"))
            except ValueError as e:
                logger.warning(f"Skipping log record with bad block number: {e}")
                continue

            events.append(LogEvent.from_raw(record, block_number=block_number))

            # Logs include their own block, so resume after it
            if cursor.advance_from_block(block_number + 1):
                logger.debug(f"Cursor advanced to block {block_number + 1}")
        return events


Transport = PushTransport | PullTransport


def transport_for(mode: TransportMode | str) -> Transport:
    """Return the transport variant for a mode."""
    match TransportMode.parse(mode):
        case TransportMode.PUSH:
            return PushTransport()
        case TransportMode.PULL:
            return PullTransport()
