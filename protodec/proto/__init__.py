"""protodec runtime: protobuf wire decoding for generated messages."""

from .decoder import (
    FieldDispatcher,
    InvalidText,
    decode_bytearray,
    decode_fp,
    decode_integral,
    decode_message,
    decode_zigzag,
    narrow,
)
from .message import Message, MissingRequiredField
from .types import DecodeDomain, ScalarType, WireType
from .wire import (
    DecodeError,
    Truncated,
    UnsupportedWireType,
    VarintOverflow,
    WireCursor,
    WireTypeMismatch,
)

__all__ = [
    "DecodeDomain",
    "DecodeError",
    "FieldDispatcher",
    "InvalidText",
    "Message",
    "MissingRequiredField",
    "ScalarType",
    "Truncated",
    "UnsupportedWireType",
    "VarintOverflow",
    "WireCursor",
    "WireType",
    "WireTypeMismatch",
    "decode_bytearray",
    "decode_fp",
    "decode_integral",
    "decode_message",
    "decode_zigzag",
    "narrow",
]
