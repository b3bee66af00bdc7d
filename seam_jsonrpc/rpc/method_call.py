"""
JSON-RPC method call

Immutable description of one remote invocation and its request envelope.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Sequence, Tuple

from seam_jsonrpc.config import ProtocolVersion
from seam_jsonrpc.utils.serialization import encode_json


def _new_call_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class MethodCall:
    """One JSON-RPC request: method name, positional params and correlation id

    The id is generated at construction time and is unique per call, so replies can
    be matched against the call that issued them.
    """

    method: str
    params: Tuple[Any, ...] = ()
    id: str = field(default_factory=_new_call_id)

    def __post_init__(self):
        if not isinstance(self.method, str) or not self.method:
            raise ValueError("Method name must be a non-empty string")
        if self.params is None:
            object.__setattr__(self, "params", ())
        elif isinstance(self.params, (str, bytes, dict)):
            raise TypeError(f"params must be a sequence of values, got {type(self.params).__name__}")
        else:
            object.__setattr__(self, "params", tuple(self.params))

    def to_request(self, version: ProtocolVersion = ProtocolVersion.V2_0) -> Dict[str, Any]:
        """Build the request envelope for the given protocol version

        JSON-RPC 2.0 carries the ``"jsonrpc": "2.0"`` marker, 1.0 does not.
        """
        request = {
            "method": self.method,
            "params": list(self.params),
            "id": self.id,
        }
        if version == ProtocolVersion.V2_0:
            request = {"jsonrpc": "2.0", **request}
        return request

    def encode(self, version: ProtocolVersion = ProtocolVersion.V2_0) -> bytes:
        """Serialize the request envelope to UTF-8 JSON

        Raises:
            TypeError: A parameter is not JSON serializable
        """
        return encode_json(self.to_request(version))

    @classmethod
    def from_request(cls, node: Any) -> "MethodCall":
        """Rebuild a call from a parsed request envelope

        Raises:
            ValueError: ``node`` is not a request envelope
        """
        if not isinstance(node, dict) or "method" not in node or "id" not in node:
            raise ValueError(f"Not a JSON-RPC request envelope: {node!r}")
        params = node.get("params", [])
        if not isinstance(params, list):
            raise ValueError("Only positional params are supported")
        return cls(method=node["method"], params=tuple(params), id=node["id"])

    def __str__(self) -> str:
        return f"{self.method}#{self.id}"


def new_call(method: str, params: Sequence[Any] = ()) -> MethodCall:
    """Create a method call with a fresh id"""
    return MethodCall(method=method, params=tuple(params or ()))
