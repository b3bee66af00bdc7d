"""
Transport interface

Unified contract implemented by every transport (HTTP, ZeroMQ), so the call
pipeline does not change when the communication mechanism does.
"""

import abc


class Transport(abc.ABC):
    """Carries one request body to an address and returns the reply body"""

    @abc.abstractmethod
    async def send(self, payload: bytes, address: str) -> bytes:
        """Send a serialized request and wait for the reply
        
        Exactly one outcome per call: the reply bytes, or a raised error.
        
        Args:
            payload: UTF-8 encoded JSON-RPC request
            address: Service address (URL or socket endpoint)
            
        Returns:
            bytes: Raw reply body
            
        Raises:
            TransportError: Connection failure, timeout or protocol level refusal
        """
        pass

    async def close(self) -> None:
        """Release connections and other resources"""
        pass
