"""
Result conversion contract

A result type opts in by exposing a ``from_json`` classmethod that builds an
instance from a generic JSON node. Instances may also expose ``to_json()`` so they
can be sent back as params. Protobuf message classes are supported as well.
"""

import logging
from typing import Any, Protocol, runtime_checkable

from google.protobuf.message import Message

from seam_jsonrpc.errors import ConversionError
from seam_jsonrpc.utils.serialization import dict_to_protobuf

logger = logging.getLogger(__name__)


@runtime_checkable
class JsonConvertible(Protocol):
    """Type that can be built from a JSON node and turned back into one."""

    @classmethod
    def from_json(cls, node: Any) -> "JsonConvertible":
        ...

    def to_json(self) -> Any:
        ...


def type_name(result_type: Any) -> str:
    return getattr(result_type, "__qualname__", None) or repr(result_type)


def _is_protobuf_type(result_type: Any) -> bool:
    return isinstance(result_type, type) and issubclass(result_type, Message)


def supports_conversion(result_type: Any) -> bool:
    """Whether ``result_type`` can build instances from JSON nodes"""
    if _is_protobuf_type(result_type):
        return True
    return callable(getattr(result_type, "from_json", None))


def _construct(node: Any, result_type: Any) -> Any:
    if _is_protobuf_type(result_type):
        return dict_to_protobuf(node, result_type)
    return result_type.from_json(node)


def convert_node(node: Any, result_type: Any) -> Any:
    """Convert a result node into instances of ``result_type``

    An array node is converted element-wise and gives a list in the same order,
    anything else gives a single instance.

    Raises:
        ConversionError: The type does not support conversion or construction failed
    """
    name = type_name(result_type)
    if not supports_conversion(result_type):
        raise ConversionError(node, name, "type does not implement from_json")

    try:
        if isinstance(node, list):
            return [_construct(item, result_type) for item in node]
        return _construct(node, result_type)
    except ConversionError:
        raise
    except Exception as e:
        logger.debug(f"Conversion to {name} failed: {e}")
        raise ConversionError(node, name, str(e)) from e
