#!/usr/bin/env python3
"""Log response parsing.

This module decodes JSON-RPC responses carrying log arrays, turns each
record into a LogEvent and, for pull subscriptions, advances the request
builder's cursor past the highest block observed.
"""

import logging
from typing import Any

from .exceptions import JsonRpcDecodeError
from .filter_builder import FilterRequestBuilder
from .jsonrpc import JsonRpcMessage
from .models import LogEvent
from .transport import PullTransport, PushTransport, Transport

# Get logger for this module
logger = logging.getLogger(__name__)


class LogResponseParser:
    """Parses log responses for a subscription.

    This class is responsible for:
    - Decoding the JSON-RPC envelope and its log array
    - Accepting ``eth_subscription`` notifications on push subscriptions
    - Skipping pull records whose block number cannot be parsed
    - Advancing the pull cursor monotonically
    - Maintaining metrics on parsed responses
    """

    def __init__(self) -> None:
        # Metrics tracking
        self.responses_parsed = 0
        self.responses_failed = 0
        self.events_emitted = 0
        self.records_skipped = 0

    def parse(
        self, data: bytes | str, builder: FilterRequestBuilder
    ) -> tuple[list[LogEvent], bool]:
        """
        Parse one response for the builder's subscription.

        Malformed input never raises: a bad envelope or result array yields
        an empty list and False, a bad record is skipped.

        Args:
            data: Raw response bytes from the transport
            builder: Builder whose cursor is advanced in pull mode

        Returns:
            Tuple of (events, success)
        """
        transport = builder.transport
        try:
            message = JsonRpcMessage.from_bytes(data)
            records = self._extract_records(message, transport)
        except JsonRpcDecodeError as e:
            self.responses_failed += 1
            logger.warning(f"Could not decode log response: {e}")
            return [], False

        match transport:
            case PullTransport() as pull:
                events = pull.collect(records, builder)
            case PushTransport() as push:
                events = push.collect(records)

        skipped = len(records) - len(events)
        self.responses_parsed += 1
        self.events_emitted += len(events)
        self.records_skipped += skipped

        logger.debug(
            f"Parsed {len(events)} events ({skipped} skipped), "
            f"cursor at {builder.get_from_block()!r}"
        )
        return events, True

    @staticmethod
    def _extract_records(message: JsonRpcMessage, transport: Transport) -> list[dict[str, Any]]:
        if isinstance(transport, PushTransport) and message.is_subscription_notification:
            return message.subscription_records()
        return message.log_records()

    def get_stats(self) -> dict[str, int]:
        """
        Get current parser statistics.

        Returns:
            Dictionary with parse metrics
        """
        return {
            "responses_parsed": self.responses_parsed,
            "responses_failed": self.responses_failed,
            "events_emitted": self.events_emitted,
            "records_skipped": self.records_skipped,
        }

    def log_metrics(self) -> None:
        """Log current parser metrics."""
        logger.info(
            f"Parser metrics - Parsed: {self.responses_parsed}, "
            f"Failed: {self.responses_failed}, "
            f"Events: {self.events_emitted}, "
            f"Skipped: {self.records_skipped}"
        )
