"""
ZeroMQ transport: JSON-RPC requests over REQ/REP sockets.
"""

from seam_jsonrpc.adapters.zeromq.transport import ZeroMQTransport

__all__ = ["ZeroMQTransport"]
