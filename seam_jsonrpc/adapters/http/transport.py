"""
HTTP transport

Posts JSON-RPC request bodies to the service URL with httpx and returns the reply
body. The current OpenTelemetry trace context travels in the request headers.
"""

import logging
from typing import Dict, Optional

import httpx

from seam_jsonrpc.adapters.transport_interface import Transport
from seam_jsonrpc.errors import TransportError
from seam_jsonrpc.telemetry.tracer import inject_trace_context

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class HttpTransport(Transport):
    """
    HTTP transport built on one shared httpx.AsyncClient
    """

    def __init__(self,
                 timeout_ms: int = 5000,
                 headers: Optional[Dict[str, str]] = None,
                 client: Optional[httpx.AsyncClient] = None):
        """Initialize HTTP transport
        
        Args:
            timeout_ms: Request timeout (milliseconds)
            headers: Extra headers sent with every request
            client: Existing client to use instead of creating one
        """
        self.timeout_ms = timeout_ms
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}
        self._client = client
        self._owns_client = client is None
        logger.info(f"HTTP transport created, timeout: {timeout_ms}ms")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_ms / 1000.0)
        return self._client

    async def send(self, payload: bytes, address: str) -> bytes:
        headers = inject_trace_context(dict(self.headers))

        try:
            response = await self._get_client().post(address, content=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"HTTP request to {address} timed out after {self.timeout_ms}ms")
            raise TransportError(f"HTTP request timed out ({self.timeout_ms}ms)", cause=e) from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP request to {address} failed: {str(e)}")
            raise TransportError(f"HTTP request failed: {str(e)}", cause=e) from e

        if response.is_success:
            return response.content

        # JSON-RPC servers may answer errors with a non-2xx status and a JSON error body
        content_type = response.headers.get("content-type", "")
        if response.content and "json" in content_type:
            logger.debug(f"HTTP {response.status_code} with JSON body from {address}")
            return response.content

        logger.error(f"HTTP {response.status_code} from {address}")
        raise TransportError(f"HTTP status {response.status_code} from {address}")

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
