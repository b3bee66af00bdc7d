"""
JSON-RPC 1.0/2.0 Client Pipeline

Builds requests, dispatches them asynchronously and delivers typed results or errors:
- method_call: request description and envelope
- service: endpoint that dispatches calls
- response_handler: per-call reply correlation, conversion and delivery
- delegation: two-tier internal error handling
- conversion: result type contract
- proxy: explicit name-based dispatch

This module is independent of the underlying transport.
"""

from seam_jsonrpc.rpc.method_call import MethodCall, new_call
from seam_jsonrpc.rpc.conversion import JsonConvertible, convert_node, supports_conversion
from seam_jsonrpc.rpc.delegation import ErrorHandler, DelegationChain
from seam_jsonrpc.rpc.response_handler import ResponseHandler, HandlerState
from seam_jsonrpc.rpc.proxy import ServiceProxy
from seam_jsonrpc.rpc.service import ServiceEndpoint

__all__ = [
    "MethodCall",
    "new_call",
    "JsonConvertible",
    "convert_node",
    "supports_conversion",
    "ErrorHandler",
    "DelegationChain",
    "ResponseHandler",
    "HandlerState",
    "ServiceProxy",
    "ServiceEndpoint",
]
