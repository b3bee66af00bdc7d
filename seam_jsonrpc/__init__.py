"""
Seam JSON-RPC Client

Asynchronous client for JSON-RPC 1.0 and 2.0 web services:

1. Method calls: immutable request descriptions (method, params, id)
2. Service endpoint: builds and dispatches calls, returns one response handler per call
3. Response handlers: correlate the reply, convert it to a requested type, deliver result or error
4. Error delegation: internal failures go to the call's delegate, then to the endpoint's default delegate
5. Transports:
   - HTTP (httpx)
   - ZeroMQ REQ/REP

All transports record OpenTelemetry spans and metrics for every round trip.
"""

from seam_jsonrpc.config import ClientConfig, ProtocolVersion, TransportType
from seam_jsonrpc.errors import (
    JsonRpcError,
    TransportError,
    ParseError,
    ConversionError,
    ServerError,
)
from seam_jsonrpc.rpc import (
    MethodCall,
    ResponseHandler,
    ServiceEndpoint,
    ServiceProxy,
    JsonConvertible,
    ErrorHandler,
)

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "ProtocolVersion",
    "TransportType",
    "JsonRpcError",
    "TransportError",
    "ParseError",
    "ConversionError",
    "ServerError",
    "MethodCall",
    "ResponseHandler",
    "ServiceEndpoint",
    "ServiceProxy",
    "JsonConvertible",
    "ErrorHandler",
]
