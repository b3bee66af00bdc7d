"""
JSON-RPC client error taxonomy

Internal errors (transport, parse, conversion) are offered to the error delegation
chain and to the call's callback. Server errors are valid protocol outcomes and are
only delivered to the callback.

None of these errors is raised across the asynchronous boundary: the response
handler builds them and delivers them as values.
"""

from typing import Any, Optional


class JsonRpcError(Exception):
    """Base class for every error delivered by the call pipeline"""

    domain = "jsonrpc"

    def __init__(self, message: str, call=None):
        super().__init__(message)
        self.message = message
        self.call = call

    def __str__(self) -> str:
        return f"[{self.domain}] {self.message}"


class TransportError(JsonRpcError):
    """Network or connectivity failure reported by the transport"""

    domain = "transport"

    def __init__(self, message: str, cause: Optional[BaseException] = None, call=None):
        super().__init__(message, call=call)
        self.cause = cause


class ParseError(JsonRpcError):
    """The reply body is not valid JSON

    Attributes:
        raw_text: The text we tried to parse
        cause: Underlying codec error, if any
    """

    domain = "parse"

    def __init__(self, raw_text: str, cause: Optional[BaseException] = None, call=None):
        reason = str(cause) if cause is not None else "invalid JSON"
        super().__init__(f"Failed to parse response: {reason}", call=call)
        self.raw_text = raw_text
        self.cause = cause


class ConversionError(JsonRpcError):
    """The reply could not be turned into the expected shape or type

    Covers malformed envelopes, id mismatches and result type construction failures.

    Attributes:
        node: The JSON node we tried to convert
        type_name: Name of the type we tried to convert to, if any
    """

    domain = "internal"

    def __init__(self, node: Any, type_name: Optional[str], reason: str, call=None):
        if type_name:
            message = f"Cannot convert JSON to {type_name}: {reason}"
        else:
            message = f"Invalid JSON-RPC response: {reason}"
        super().__init__(message, call=call)
        self.node = node
        self.type_name = type_name
        self.reason = reason


class ServerError(JsonRpcError):
    """Error object returned by the remote peer, carried verbatim"""

    domain = "server"

    def __init__(self, code: Optional[int], message: str, data: Any = None, call=None):
        super().__init__(message, call=call)
        self.code = code
        self.data = data

    def __str__(self) -> str:
        return f"[{self.domain}] {self.code}: {self.message}"

    @classmethod
    def from_node(cls, node: Any, call=None) -> "ServerError":
        """Build from the reply's ``error`` member

        Non-object errors (allowed by some JSON-RPC 1.0 servers) keep the raw value
        as ``data`` and have no code.
        """
        if isinstance(node, dict):
            return cls(
                code=node.get("code"),
                message=str(node.get("message", "")),
                data=node.get("data"),
                call=call,
            )
        return cls(code=None, message=str(node), data=node, call=call)


# Errors offered to the delegation chain
INTERNAL_ERRORS = (TransportError, ParseError, ConversionError)
