"""Wire-level and value-level type tags for protodec decoding.

These enums describe how a value is physically encoded on the wire and
how a decoded value is interpreted, used by the dispatcher and by
generated message code.
"""

from enum import IntEnum, StrEnum


class WireType(IntEnum):
    """3-bit wire type carried in the low bits of every field tag."""

    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    START_GROUP = 3  # legacy, never decodable
    END_GROUP = 4  # legacy, never decodable
    FIXED32 = 5


class DecodeDomain(StrEnum):
    """Value kind requested from the decoder for a field.

    The value is also the suffix of the matching FieldDispatcher read
    method, e.g. ``read_zigzag``.
    """

    INTEGRAL = "integral"
    ZIGZAG = "zigzag"
    FP = "fp"
    BYTEARRAY = "bytearray"
    MESSAGE = "message"


class ScalarType(StrEnum):
    """Target representation of a decoded scalar value."""

    INT32 = "int32"
    INT64 = "int64"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT = "float"
    DOUBLE = "double"
    BOOL = "bool"
    STRING = "string"
    BYTES = "bytes"
