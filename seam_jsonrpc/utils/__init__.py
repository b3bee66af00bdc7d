"""
Utility helpers: JSON codec and protobuf conversions.
"""

from .serialization import (
    encode_json,
    decode_json,
    protobuf_to_dict,
    dict_to_protobuf,
)

__all__ = ["encode_json", "decode_json", "protobuf_to_dict", "dict_to_protobuf"]
