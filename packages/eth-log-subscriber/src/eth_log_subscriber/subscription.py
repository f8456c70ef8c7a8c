"""
Subscription runner pairing a request builder with a response parser.

"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .config import SubscriptionConfig
from .exceptions import EthLogSubscriberError
from .filter_builder import FilterRequestBuilder
from .log_parser import LogResponseParser
from .models import LogEvent
from .transport import TransportMode

Send = Callable[[bytes], Awaitable[bytes]]
EventCallback = Callable[[LogEvent], Awaitable[Any]]


class LogSubscription:
    """
    One log subscription: render, send, parse, once per cycle.

    The builder's cursor is shared between render and parse, so cycles
    must not overlap. ``start_polling`` awaits each cycle before starting
    the next; callers driving ``run_cycle`` themselves must do the same.
    """

    def __init__(
        self,
        builder: FilterRequestBuilder,
        parser: LogResponseParser | None = None,
        label: str = "logs",
    ) -> None:
        """
        Initialize the subscription.

        Args:
            builder: Request builder owning the filter and cursor
            parser: Response parser, a new one if not given
            label: Name used in log messages and status
        """
        self.builder = builder
        self.parser = parser or LogResponseParser()
        self.label = label

        # State tracking
        self.is_running = False
        self.cycles = 0
        self.failed_cycles = 0

        # Setup logging
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @classmethod
    def from_config(cls, config: SubscriptionConfig, label: str = "logs") -> "LogSubscription":
        """Create a subscription from configuration."""
        return cls(FilterRequestBuilder.from_config(config), label=label)

    async def run_cycle(self, send: Send) -> list[LogEvent]:
        """
        Run one render/send/parse cycle.

        Args:
            send: Transport callable taking request bytes, returning response bytes

        Returns:
            Events extracted this cycle, empty if the response was unusable

        Raises:
            EthLogSubscriberError: If the request cannot be rendered
        """
        request = self.builder.render()
        response = await send(request)
        events, ok = self.parser.parse(response, self.builder)

        self.cycles += 1
        if not ok:
            self.failed_cycles += 1
            self.logger.warning(f"[{self.label}] Response unusable, no events this cycle")
        elif events:
            self.logger.info(
                f"[{self.label}] Found {len(events)} events, "
                f"next query from {self.builder.get_from_block()!r}"
            )
        return events

    async def poll_for_events(self, send: Send, callback: EventCallback) -> None:
        """
        Run one cycle and hand every event to the callback.

        Transport errors are logged and the cycle is dropped; the cursor is
        unchanged so the next cycle covers the same blocks.

        If the callback raises, the rest of the batch is not delivered and
        the cursor is set back to the lowest undelivered block, so the next
        cycle fetches those events again. Events already delivered from
        that block are delivered again as well.
        """
        try:
            events = await self.run_cycle(send)
        except EthLogSubscriberError:
            raise
        except Exception as e:
            self.failed_cycles += 1
            self.logger.error(f"[{self.label}] Error polling for events: {e}")
            return

        for position, event in enumerate(events):
            try:
                await callback(event)
            except Exception as e:
                self.failed_cycles += 1
                self.logger.error(f"[{self.label}] Error handling event {event}: {e}")
                self._rewind(events[position:])
                return

    def _rewind(self, undelivered: list[LogEvent]) -> None:
        blocks = [e.block_number for e in undelivered if e.block_number is not None]
        if self.builder.mode is not TransportMode.PULL or self.builder.block_hash or not blocks:
            return
        self.builder.set_from_block(min(blocks))
        self.logger.warning(
            f"[{self.label}] {len(undelivered)} events not delivered, "
            f"next query from block {min(blocks)}"
        )

    async def start_polling(
        self,
        send: Send,
        callback: EventCallback,
        interval: int = 12
    ) -> None:
        """
        Start polling for events at the specified interval.

        Args:
            send: Transport callable
            callback: Async function called for each event
            interval: Polling interval in seconds

        Raises:
            ValueError: If the subscription is not in pull mode
        """
        if self.builder.mode is not TransportMode.PULL:
            raise ValueError("Polling requires a pull mode subscription")

        if self.is_running:
            self.logger.warning("Polling already running")
            return

        self.is_running = True
        self.logger.info(f"Starting polling for {self.label} every {interval} seconds")

        try:
            while self.is_running:
                try:
                    await self.poll_for_events(send, callback)
                except EthLogSubscriberError:
                    raise
                except Exception as e:
                    self.failed_cycles += 1
                    self.logger.error(f"[{self.label}] Error in polling loop: {e}")
                    # Continue polling despite errors
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            self.logger.info("Polling cancelled")
        finally:
            self.is_running = False

    async def stop(self) -> None:
        """Stop the polling loop."""
        self.logger.info(f"Stopping polling for {self.label}")
        self.is_running = False

    def get_status(self) -> dict[str, Any]:
        """
        Get current status of the subscription.

        Returns:
            Dictionary with status information
        """
        return {
            "label": self.label,
            "mode": self.builder.mode.value,
            "is_running": self.is_running,
            "from_block": self.builder.get_from_block(),
            "cycles": self.cycles,
            "failed_cycles": self.failed_cycles,
            **self.parser.get_stats(),
        }
