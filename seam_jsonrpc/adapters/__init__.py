"""
Transport Adapters Module

Transport implementations carrying JSON-RPC request/response bytes:
- http: HTTP POST via httpx
- zeromq: ZeroMQ REQ/REP

All transports expose the same asynchronous send contract so the call pipeline
does not depend on the underlying communication mechanism.
"""

from .transport_factory import TransportFactory
from .transport_interface import Transport

__all__ = [
    "TransportFactory",
    "Transport",
]
