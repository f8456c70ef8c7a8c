#!/usr/bin/env python3
"""Entry point for the Ethereum log subscriber.

Renders log filter requests, parses saved responses, or polls a node
over HTTP, using configuration from the environment.
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Configure logging before any other imports create loggers
def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level: int = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

# Get logger for this module
logger = logging.getLogger(__name__)

from eth_log_subscriber.config import SubscriptionConfig
from eth_log_subscriber.exceptions import EthLogSubscriberError
from eth_log_subscriber.filter_builder import FilterRequestBuilder
from eth_log_subscriber.log_parser import LogResponseParser
from eth_log_subscriber.models import LogEvent
from eth_log_subscriber.subscription import LogSubscription
from eth_log_subscriber.utils.http_transport import HttpTransport


async def print_event(event: LogEvent) -> None:
    """Write one event to stdout as a JSON line."""
    print(event.to_json().decode(), flush=True)


def load_config(mode: str | None) -> SubscriptionConfig:
    """Load configuration, letting --mode override SUBSCRIPTION_MODE."""
    if mode:
        os.environ["SUBSCRIPTION_MODE"] = mode
    return SubscriptionConfig.from_env()


def cmd_render(config: SubscriptionConfig) -> None:
    builder = FilterRequestBuilder.from_config(config)
    print(builder.render().decode())


def cmd_parse(config: SubscriptionConfig, response_file: Path) -> bool:
    builder = FilterRequestBuilder.from_config(config)
    parser = LogResponseParser()

    events, ok = parser.parse(response_file.read_bytes(), builder)
    for event in events:
        print(event.to_json().decode())

    logger.info(f"Parsed {len(events)} events, next fromBlock: {builder.get_from_block()!r}")
    return ok


async def cmd_poll(config: SubscriptionConfig) -> None:
    if not config.rpc_url:
        raise ValueError("RPC_URL environment variable is required for polling")

    transport = HttpTransport(config.rpc_url, timeout=config.monitoring.request_timeout)
    subscription = LogSubscription.from_config(config)

    try:
        await subscription.start_polling(
            send=transport.send,
            callback=print_event,
            interval=config.monitoring.polling_interval
        )
    finally:
        await subscription.stop()
        subscription.parser.log_metrics()


async def main() -> None:
    """Main entry point for the log subscriber.

    Raises:
        SystemExit: On configuration or runtime errors
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Ethereum log subscriber - build log filter requests and parse responses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Environment Variables:
  CONTRACT_ADDRESSES   - Comma separated contract addresses (required)
  EVENT_TOPICS         - Comma separated topic hashes
  SUBSCRIPTION_MODE    - push or pull (default: pull)
  FROM_BLOCK           - Starting block (number, hex or 'latest')
  TO_BLOCK             - Last block (number, hex or 'latest')
  BLOCK_HASH           - Exact block hash, instead of a block range
  RPC_URL              - HTTP RPC endpoint (required for poll)
  POLLING_INTERVAL     - Polling interval in seconds (default: 12)
  LOG_LEVEL            - Logging level (can be overridden with --log-level)
        """
    )
    parser.add_argument(
        "--mode",
        choices=["push", "pull"],
        default=None,
        help="Transport mode (overrides SUBSCRIPTION_MODE)"
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: INFO)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("render", help="Print the JSON-RPC request for the configured filter")
    parse_cmd = subparsers.add_parser("parse", help="Parse a saved JSON-RPC response file")
    parse_cmd.add_argument("response_file", type=Path, help="File holding the raw response")
    subparsers.add_parser("poll", help="Poll the node with eth_getLogs and print events")
    args: argparse.Namespace = parser.parse_args()

    setup_logging(args.log_level)

    try:
        config: SubscriptionConfig = load_config(args.mode)
        if args.log_level == "DEBUG":
            config.log_config()

        match args.command:
            case "render":
                cmd_render(config)
            case "parse":
                if not cmd_parse(config, args.response_file):
                    logger.error("Response could not be decoded")
                    sys.exit(1)
            case "poll":
                await cmd_poll(config)

    except (ValueError, EthLogSubscriberError) as e:
        logger.error(f"Configuration Error: {e}")
        logger.error("Please check your environment variables:")
        logger.error("  - CONTRACT_ADDRESSES: Contract addresses to watch")
        logger.error("  - EVENT_TOPICS: Topic hashes to match")
        logger.error("  - FROM_BLOCK / TO_BLOCK or BLOCK_HASH, not both")
        sys.exit(1)

    except KeyboardInterrupt:
        logger.info("\nReceived interrupt signal, shutting down gracefully...")
        sys.exit(0)

    except Exception as e:
        logger.error(f"Fatal Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    load_dotenv()
    asyncio.run(main())
