"""
JSON-RPC 2.0 envelope used for log filter requests and responses.

The envelope only correlates requests with responses and carries remote
errors. Filter semantics live in the builder and parser.
"""

import json
from dataclasses import dataclass
from typing import Any

from .exceptions import JsonRpcDecodeError, RequestEncodingError

JSONRPC_VERSION = "2.0"

# Single request per transport exchange, so a constant id is enough
REQUEST_ID = 1

SUBSCRIPTION_NOTIFICATION = "eth_subscription"


@dataclass(slots=True)
class JsonRpcMessage:
    """A JSON-RPC 2.0 request, response or notification.

    Attributes:
        id: Correlation id (absent on notifications)
        method: Method name for requests and notifications
        params: Request or notification parameters
        result: Response result
        error: Remote error object
        jsonrpc: Protocol version tag
    """

    id: Any = None
    method: str | None = None
    params: Any = None
    result: Any = None
    error: Any = None
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Convert to a wire dictionary, leaving out empty members."""
        message: dict[str, Any] = {"jsonrpc": self.jsonrpc}
        for key in ("id", "method", "params", "error", "result"):
            value = getattr(self, key)
            if value is not None:
                message[key] = value
        return message

    def to_bytes(self) -> bytes:
        """
        Serialize the message to compact JSON bytes.

        Raises:
            RequestEncodingError: If any member is not JSON serializable
        """
        try:
            return json.dumps(
                self.to_dict(), separators=(",", ":"), allow_nan=False
            ).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise RequestEncodingError(f"Cannot encode JSON-RPC message: {e}") from e

    @classmethod
    def from_bytes(cls, data: bytes | str) -> "JsonRpcMessage":
        """
        Decode a message from raw transport bytes.

        Raises:
            JsonRpcDecodeError: If the data is not a JSON object
        """
        try:
            payload = json.loads(data)
        except (TypeError, ValueError) as e:
            raise JsonRpcDecodeError(f"Malformed JSON-RPC envelope: {e}") from e

        if not isinstance(payload, dict):
            raise JsonRpcDecodeError(
                f"JSON-RPC envelope must be an object, got {type(payload).__name__}"
            )

        return cls(
            id=payload.get("id"),
            method=payload.get("method"),
            params=payload.get("params"),
            result=payload.get("result"),
            error=payload.get("error"),
            jsonrpc=payload.get("jsonrpc", JSONRPC_VERSION),
        )

    @property
    def is_subscription_notification(self) -> bool:
        return self.method == SUBSCRIPTION_NOTIFICATION

    def log_records(self) -> list[dict[str, Any]]:
        """
        Decode the result member as an array of raw log records.

        Raises:
            JsonRpcDecodeError: If the node returned an error, or the result
                is not an array of objects
        """
        if self.error is not None:
            raise JsonRpcDecodeError(f"Node returned an error: {self.error}")
        return _as_records(self.result)

    def subscription_records(self) -> list[dict[str, Any]]:
        """
        Decode an ``eth_subscription`` notification into its log record.

        Notifications carry one log under ``params.result``.

        Raises:
            JsonRpcDecodeError: If the notification is malformed
        """
        if not isinstance(self.params, dict):
            raise JsonRpcDecodeError("Subscription notification has no params object")
        result = self.params.get("result")
        if isinstance(result, list):
            return _as_records(result)
        return _as_records([result])


def _as_records(result: Any) -> list[dict[str, Any]]:
    if not isinstance(result, list):
        raise JsonRpcDecodeError(
            f"Expected an array of log records, got {type(result).__name__}"
        )
    for record in result:
        if not isinstance(record, dict):
            raise JsonRpcDecodeError(
                f"Log record must be an object, got {type(record).__name__}"
            )
    return result
