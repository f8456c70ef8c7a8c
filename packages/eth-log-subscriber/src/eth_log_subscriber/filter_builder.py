#!/usr/bin/env python3
"""Log filter request construction.

This module owns the filter definition of one subscription and renders it
into the JSON-RPC request for the active transport mode. The filter's
``fromBlock`` is also the pull cursor, which the response parser moves
forward through the accessor methods defined here.
"""

import logging
from typing import Any

from .exceptions import FilterConfigurationError
from .jsonrpc import REQUEST_ID, JsonRpcMessage
from .models import BlockArg, FilterQuery
from .transport import PullTransport, Transport, TransportMode, transport_for
from .utils.hex_utility import LATEST, encode_block_number, to_address, to_hash

logger = logging.getLogger(__name__)


def _validate_block_arg(value: BlockArg, name: str) -> BlockArg:
    if value is None or value == LATEST:
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be a block number or '{LATEST}', got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


def _to_block_arg(value: BlockArg) -> str:
    if value is None or value == LATEST:
        return LATEST
    return encode_block_number(value)


class FilterRequestBuilder:
    """Builds ``eth_subscribe`` / ``eth_getLogs`` requests for one subscription.

    Addresses are normalized to checksummed 20-byte addresses and topics to
    32-byte hashes. Empty topic strings are dropped, and all remaining
    topics become alternatives of a single slot at position 0.
    """

    def __init__(
        self,
        mode: TransportMode | str,
        addresses: list[str],
        topics: list[str],
        *,
        from_block: BlockArg = None,
        to_block: BlockArg = None,
        block_hash: str | None = None,
    ) -> None:
        """
        Initialize the builder.

        Args:
            mode: Push or pull transport mode
            addresses: Contract addresses as hex strings of any length
            topics: Topic hashes as hex strings; empty strings are ignored
            from_block: Initial cursor (block number or "latest")
            to_block: Upper block bound (block number or "latest")
            block_hash: Exact block selector, exclusive with the range

        Raises:
            ValueError: If an address, topic or block argument is invalid
        """
        self._transport: Transport = transport_for(mode)

        slot = [to_hash(topic) for topic in topics if topic]

        self._query = FilterQuery(
            addresses=[to_address(address) for address in addresses],
            topics=[slot],
            from_block=_validate_block_arg(from_block, "from_block"),
            to_block=_validate_block_arg(to_block, "to_block"),
            block_hash=to_hash(block_hash) if block_hash else None,
        )

        logger.debug(
            f"FilterRequestBuilder created ({self.mode.value} mode, "
            f"{len(self._query.addresses)} addresses, {len(slot)} topics)"
        )

    @classmethod
    def from_config(cls, config: Any) -> "FilterRequestBuilder":
        """Create a builder from a ``SubscriptionConfig``."""
        return cls(
            config.mode,
            list(config.addresses),
            list(config.topics),
            from_block=config.from_block,
            to_block=config.to_block,
            block_hash=config.block_hash,
        )

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def mode(self) -> TransportMode:
        return self._transport.mode

    @property
    def addresses(self) -> list[str]:
        return list(self._query.addresses)

    @property
    def topics(self) -> list[list[str]]:
        return [list(slot) for slot in self._query.topics or []]

    @property
    def block_hash(self) -> str | None:
        return self._query.block_hash

    @property
    def to_block(self) -> BlockArg:
        return self._query.to_block

    def get_from_block(self) -> BlockArg:
        """Current cursor: a block number, ``"latest"`` or None when unset."""
        return self._query.from_block

    def set_from_block(self, value: BlockArg) -> None:
        """Overwrite the cursor, e.g. to resume from a stored position."""
        self._query.from_block = _validate_block_arg(value, "from_block")

    def advance_from_block(self, candidate: int) -> bool:
        """
        Move the cursor forward to ``candidate`` if that is progress.

        The cursor moves when it is unset or ``"latest"``, or when the
        candidate is strictly greater than the current block number. It
        never moves backwards. A block hash query has no range, so its
        cursor is left alone.

        Args:
            candidate: Next block to query from

        Returns:
            True if the cursor changed
        """
        if self._query.block_hash is not None:
            return False

        current = self._query.from_block
        if current is None or current == LATEST or candidate > current:
            self._query.from_block = candidate
            return True
        return False

    def to_filter_arg(self) -> dict[str, Any]:
        """
        Build the filter object sent as a request parameter.

        Returns:
            Filter dictionary with ``address``, ``topics`` and either
            ``blockHash`` or ``fromBlock``/``toBlock``

        Raises:
            FilterConfigurationError: If both a block hash and a range are set
        """
        query = self._query
        arg: dict[str, Any] = {"address": list(query.addresses)}
        if query.topics is not None:
            arg["topics"] = [list(slot) for slot in query.topics]

        if query.block_hash is not None:
            if query.has_range:
                raise FilterConfigurationError(
                    "cannot specify both BlockHash and FromBlock/ToBlock"
                )
            arg["blockHash"] = query.block_hash
        else:
            arg["fromBlock"] = "0x0" if query.from_block is None else _to_block_arg(query.from_block)
            arg["toBlock"] = _to_block_arg(query.to_block)
        return arg

    def build_message(self) -> JsonRpcMessage:
        """Build the JSON-RPC request for the current filter state."""
        match self._transport:
            case PullTransport() as pull if self._query.block_hash is None:
                pull.prepare(self)

        return JsonRpcMessage(
            id=REQUEST_ID,
            method=self._transport.method,
            params=self._transport.build_params(self.to_filter_arg()),
        )

    def render(self) -> bytes:
        """
        Render the request bytes for the next cycle.

        Returns:
            Encoded JSON-RPC request

        Raises:
            FilterConfigurationError: If both a block hash and a range are set
            RequestEncodingError: If the request cannot be serialized
        """
        request = self.build_message().to_bytes()
        logger.debug(f"Rendered {self._transport.method} request: {request.decode()}")
        return request

    def __repr__(self) -> str:
        return (
            f"FilterRequestBuilder(mode={self.mode.value}, "
            f"addresses={self._query.addresses}, "
            f"from_block={self._query.from_block!r})"
        )
