"""
JSON codec and Protobuf serialization tools

Provides the JSON text codec used on the wire, plus conversion between Protobuf
messages and Python dictionaries so messages can be sent as params or requested
as result types.
"""

import json
from typing import Dict, Any, Type, Union
from google.protobuf.message import Message
from google.protobuf.json_format import MessageToDict, ParseDict

def _default(obj: Any) -> Any:
    """Fallback encoder for objects the json module cannot serialize

    Objects exposing ``to_json()`` are serialized through it, Protobuf messages through
    ``MessageToDict``.
    """
    to_json = getattr(obj, "to_json", None)
    if callable(to_json):
        return to_json()
    if isinstance(obj, Message):
        return protobuf_to_dict(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

def encode_json(node: Any) -> bytes:
    """Serialize a JSON node to UTF-8 bytes
    
    Args:
        node: dict/list/str/number/bool/None tree, may contain convertible objects
        
    Returns:
        bytes: UTF-8 encoded JSON text
        
    Raises:
        TypeError: A value cannot be serialized
    """
    return json.dumps(node, default=_default, ensure_ascii=False).encode("utf-8")

def decode_json(data: Union[bytes, str]) -> Any:
    """Parse JSON text into a generic node
    
    Args:
        data: UTF-8 bytes or text
        
    Returns:
        Any: Parsed node
        
    Raises:
        json.JSONDecodeError: Malformed JSON text
        UnicodeDecodeError: Bytes are not valid UTF-8
    """
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    return json.loads(data)

def protobuf_to_dict(message: Message) -> Dict[str, Any]:
    """Convert Protobuf message to dictionary
    
    Args:
        message: Protobuf message object
        
    Returns:
        Dict: Dictionary containing message fields
    """
    if message is None:
        return {}
    
    return MessageToDict(message, preserving_proto_field_name=True)

def dict_to_protobuf(data: Dict[str, Any], message_type: Type[Message]) -> Message:
    """Convert dictionary to Protobuf message
    
    Only None gives an empty message. Other values, falsy scalars included, go
    through ParseDict so a value that is not an object fails for message types.

    Args:
        data: Dictionary data
        message_type: Protobuf message type
        
    Returns:
        Message: Protobuf message object
        
    Raises:
        google.protobuf.json_format.ParseError: Data does not match the message fields
    """
    if data is None:
        return message_type()
    
    message = message_type()
    ParseDict(data, message)
    return message
