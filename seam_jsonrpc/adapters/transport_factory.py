"""
Transport factory

Creates transport instances (HTTP, ZeroMQ) from a client configuration.
"""

from typing import Union, Dict, Any

from seam_jsonrpc.adapters.transport_interface import Transport
from seam_jsonrpc.adapters.http.transport import HttpTransport
from seam_jsonrpc.adapters.zeromq.transport import ZeroMQTransport
from seam_jsonrpc.config import ClientConfig, TransportType


class TransportFactory:
    """Transport factory, used to pick the transport named in the configuration"""

    @staticmethod
    def create(transport_type: str, config: Union[ClientConfig, Dict[str, Any], None] = None) -> Transport:
        """Create a transport
        
        Args:
            transport_type: Transport type, "http" or "zeromq"
            config: ClientConfig or dictionary of transport options
            
        Returns:
            Transport: Transport instance
            
        Raises:
            ValueError: Invalid transport type
        """
        if isinstance(config, ClientConfig):
            options = {"timeout_ms": config.timeout_ms, "headers": config.headers}
        else:
            options = dict(config or {})

        kind = transport_type.lower()
        if kind == TransportType.HTTP:
            return HttpTransport(
                timeout_ms=options.get("timeout_ms", 5000),
                headers=options.get("headers"),
            )
        elif kind == TransportType.ZEROMQ:
            return ZeroMQTransport(
                timeout_ms=options.get("timeout_ms", 5000),
            )
        else:
            raise ValueError(f"Invalid transport type: {transport_type}")
