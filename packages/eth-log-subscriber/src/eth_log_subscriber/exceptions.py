"""Exception types raised by the log subscription core."""


class EthLogSubscriberError(Exception):
    """Base class for all errors raised by this package."""


class FilterConfigurationError(EthLogSubscriberError, ValueError):
    """The filter query cannot be rendered as configured.

    Raised when a block hash and a block range are set at the same time.
    """


class RequestEncodingError(EthLogSubscriberError):
    """A request could not be serialized to JSON."""


class JsonRpcDecodeError(EthLogSubscriberError, ValueError):
    """A JSON-RPC response or its result could not be decoded."""
