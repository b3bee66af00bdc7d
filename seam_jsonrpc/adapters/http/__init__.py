"""
HTTP transport: JSON-RPC requests as HTTP POST bodies.
"""

from seam_jsonrpc.adapters.http.transport import HttpTransport

__all__ = ["HttpTransport"]
