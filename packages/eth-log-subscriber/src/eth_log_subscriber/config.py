#!/usr/bin/env python3
"""Configuration management for the log subscriber.

This module provides type-safe configuration dataclasses with validation.
Configuration is loaded from environment variables with sensible defaults
where appropriate.
"""

import logging
import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

from .models import BlockArg
from .transport import TransportMode
from .utils.hex_utility import LATEST, is_hex, parse_block_arg

# Get logger for this module
logger = logging.getLogger(__name__)


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True, slots=True)
class MonitoringConfig:
    """Configuration for the polling runner."""
    polling_interval: int = 12  # seconds between polls
    request_timeout: int = 30  # HTTP request timeout in seconds

    def __post_init__(self) -> None:
        """Validate monitoring configuration."""
        if self.polling_interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {self.polling_interval}")
        if self.polling_interval > 300:
            raise ValueError(f"Polling interval too long (max 300s), got {self.polling_interval}")

        if self.request_timeout <= 0:
            raise ValueError(f"Request timeout must be positive, got {self.request_timeout}")
        if self.request_timeout > 120:
            raise ValueError(f"Request timeout too long (max 120s), got {self.request_timeout}")


@dataclass(frozen=True, slots=True)
class SubscriptionConfig:
    """Configuration for one log subscription.

    Attributes:
        mode: Push (eth_subscribe) or pull (eth_getLogs) transport
        addresses: Contract addresses to match, empty matches any
        topics: Topic hashes, all alternatives of the first topic position
        rpc_url: Node endpoint, required only to run the polling loop
        from_block: Starting block number or "latest"
        to_block: Last block number or "latest"
        block_hash: Exact block selector, exclusive with the range
        monitoring: Polling runner settings
    """

    mode: TransportMode
    addresses: tuple[str, ...] = ()
    topics: tuple[str, ...] = ()
    rpc_url: str = ""
    from_block: BlockArg = None
    to_block: BlockArg = None
    block_hash: str | None = None
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    def __post_init__(self) -> None:
        """Validate subscription configuration."""
        # Use object.__setattr__ since dataclass is frozen
        object.__setattr__(self, "mode", TransportMode.parse(self.mode))
        object.__setattr__(self, "addresses", tuple(self.addresses))
        object.__setattr__(self, "topics", tuple(self.topics))

        if self.rpc_url:
            parsed = urlparse(self.rpc_url)
            if parsed.scheme not in ("http", "https", "ws", "wss"):
                raise ValueError(
                    f"Invalid RPC URL scheme: {parsed.scheme}. "
                    "Expected http, https, ws, or wss"
                )

        for address in self.addresses:
            if not address or not is_hex(address):
                raise ValueError(f"Invalid contract address: {address!r}")

        for topic in self.topics:
            if topic and not is_hex(topic):
                raise ValueError(f"Invalid event topic: {topic!r}")

        if self.block_hash is not None and not is_hex(self.block_hash):
            raise ValueError(f"Invalid block hash: {self.block_hash!r}")

        if self.block_hash and (self.from_block is not None or self.to_block is not None):
            raise ValueError(
                "BLOCK_HASH cannot be combined with FROM_BLOCK/TO_BLOCK"
            )

    @classmethod
    def from_env(cls) -> "SubscriptionConfig":
        """Load configuration from environment variables.

        Returns:
            SubscriptionConfig instance with loaded values

        Raises:
            ValueError: If environment variables are missing or invalid
        """
        mode = os.environ.get("SUBSCRIPTION_MODE", TransportMode.PULL.value)

        addresses = _split_list(os.environ.get("CONTRACT_ADDRESSES", ""))
        if not addresses:
            raise ValueError(
                "CONTRACT_ADDRESSES environment variable is required. "
                "Comma separated list of contract addresses to watch."
            )

        topics = _split_list(os.environ.get("EVENT_TOPICS", ""))

        monitoring_config = MonitoringConfig(
            polling_interval=int(os.environ.get("POLLING_INTERVAL", "12")),
            request_timeout=int(os.environ.get("REQUEST_TIMEOUT", "30")),
        )

        return cls(
            mode=mode,
            addresses=addresses,
            topics=topics,
            rpc_url=os.environ.get("RPC_URL", ""),
            from_block=parse_block_arg(os.environ.get("FROM_BLOCK", "")),
            to_block=parse_block_arg(os.environ.get("TO_BLOCK", "")),
            block_hash=os.environ.get("BLOCK_HASH") or None,
            monitoring=monitoring_config,
        )

    def log_config(self) -> None:
        """Log the configuration in a readable format for debugging."""
        logger.info("=" * 60)
        logger.info("Log Subscription Configuration")
        logger.info("=" * 60)

        logger.info(f"Mode: {self.mode.value}")
        logger.info(f"RPC URL: {self.rpc_url or '[NOT SET]'}")

        logger.info("Filter:")
        for address in self.addresses:
            logger.info(f"  Address: {address}")
        for topic in self.topics:
            logger.info(f"  Topic: {topic}")
        if self.block_hash:
            logger.info(f"  Block Hash: {self.block_hash}")
        else:
            logger.info(f"  From Block: {self.from_block if self.from_block is not None else '[UNSET]'}")
            logger.info(f"  To Block: {self.to_block if self.to_block is not None else LATEST}")

        logger.info("Monitoring Settings:")
        logger.info(f"  Polling Interval: {self.monitoring.polling_interval} seconds")
        logger.info(f"  Request Timeout: {self.monitoring.request_timeout} seconds")

        logger.info("=" * 60)
