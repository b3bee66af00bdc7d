"""
ZeroMQ transport

Sends JSON-RPC request bodies over a REQ socket and waits for the REP reply.
Each request uses its own socket so concurrent calls never share REQ state, and
a lost reply cannot leave a socket stuck in the receiving state.
"""

import logging
from typing import Optional

import zmq
import zmq.asyncio

from seam_jsonrpc.adapters.transport_interface import Transport
from seam_jsonrpc.errors import TransportError

logger = logging.getLogger(__name__)


class ZeroMQTransport(Transport):
    """
    ZeroMQ REQ/REP transport on an asyncio context
    """

    def __init__(self,
                 timeout_ms: int = 5000,
                 context: Optional[zmq.asyncio.Context] = None):
        """Initialize ZeroMQ transport
        
        Args:
            timeout_ms: Reply timeout (milliseconds)
            context: Existing asyncio ZeroMQ context to use
        """
        self.timeout_ms = timeout_ms
        self._owns_context = context is None
        self.context = context or zmq.asyncio.Context()
        logger.info(f"ZeroMQ transport created, timeout: {timeout_ms}ms")

    async def send(self, payload: bytes, address: str) -> bytes:
        socket = self.context.socket(zmq.REQ)
        socket.setsockopt(zmq.LINGER, 0)
        try:
            socket.connect(address)
            await socket.send(payload)

            if not await socket.poll(self.timeout_ms, zmq.POLLIN):
                logger.error(f"ZeroMQ request to {address} timed out after {self.timeout_ms}ms")
                raise TransportError(f"ZeroMQ request timed out ({self.timeout_ms}ms)")

            return await socket.recv()

        except zmq.error.ZMQError as e:
            logger.error(f"ZeroMQ error: {str(e)}")
            raise TransportError(f"ZeroMQ connection error: {str(e)}", cause=e) from e

        finally:
            socket.close()

    async def close(self) -> None:
        if self._owns_context and not self.context.closed:
            self.context.destroy(linger=0)
