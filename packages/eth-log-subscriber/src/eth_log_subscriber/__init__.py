"""
eth-log-subscriber package.

Builds Ethereum log filter requests for push (eth_subscribe) and pull
(eth_getLogs) transports and parses the responses into log events.
"""

from .config import MonitoringConfig, SubscriptionConfig
from .exceptions import (
    EthLogSubscriberError,
    FilterConfigurationError,
    JsonRpcDecodeError,
    RequestEncodingError,
)
from .filter_builder import FilterRequestBuilder
from .log_parser import LogResponseParser
from .models import FilterQuery, LogEvent
from .subscription import LogSubscription
from .transport import PullTransport, PushTransport, TransportMode

__all__ = [
    "EthLogSubscriberError",
    "FilterConfigurationError",
    "FilterQuery",
    "FilterRequestBuilder",
    "JsonRpcDecodeError",
    "LogEvent",
    "LogResponseParser",
    "LogSubscription",
    "MonitoringConfig",
    "PullTransport",
    "PushTransport",
    "RequestEncodingError",
    "SubscriptionConfig",
    "TransportMode",
]
__version__ = "0.1.0"
