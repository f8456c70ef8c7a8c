import logging

import httpx

logger = logging.getLogger(__name__)


class HttpTransport:
    """Sends encoded JSON-RPC requests to a node over HTTP.

    One POST per call and no retries. A failed call raises and the caller
    decides what to do with the cycle.
    """

    def __init__(self, rpc_url: str, timeout: float = 30.0) -> None:
        """Initialize the transport.

        Args:
            rpc_url: HTTP(S) JSON-RPC endpoint
            timeout: Request timeout in seconds
        """
        if not rpc_url:
            raise ValueError("RPC URL is required")

        self.rpc_url: str = rpc_url
        self.timeout: float = timeout

    async def send(self, request: bytes) -> bytes:
        """Post a request and return the raw response body.

        Args:
            request: Encoded JSON-RPC request

        Returns:
            Raw response bytes

        Raises:
            httpx.HTTPStatusError: If the node answers with an error status
            httpx.TransportError: If the node cannot be reached
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            logger.debug(f"Posting to {self.rpc_url}: {request.decode()}")
            response: httpx.Response = await client.post(
                self.rpc_url,
                content=request,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            return response.content

    async def __call__(self, request: bytes) -> bytes:
        return await self.send(request)
