"""Typed value decoding and field dispatch over a WireCursor.

The decoder has three levels:
- WireCursor grabs raw varints, fixed-width integers and slices
- decode_*() interprets one value given its wire type and value kind
- FieldDispatcher walks the tag/value pairs of one message
"""

import math
import struct
from collections.abc import Iterator
from typing import Protocol, TypeVar

from .types import ScalarType, WireType
from .wire import DecodeError, UnsupportedWireType, WireCursor, WireTypeMismatch

_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1


class InvalidText(DecodeError):
    """Raised when a string field doesn't hold valid UTF-8."""


class Decodable(Protocol):
    """Anything that can populate itself from a FieldDispatcher."""

    def decode_from(self, pb: "FieldDispatcher") -> None: ...


TMessage = TypeVar("TMessage", bound=Decodable)


def _to_signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >> (bits - 1):
        value -= 1 << bits
    return value


def decode_integral(cursor: WireCursor, wire_type: int) -> int:
    """Decode an unsigned integer from a varint or fixed-width value."""
    if wire_type == WireType.VARINT:
        return cursor.read_varint()
    if wire_type == WireType.FIXED64:
        return cursor.read_fixed(8)
    if wire_type == WireType.FIXED32:
        return cursor.read_fixed(4)
    raise WireTypeMismatch(wire_type, "integral")


def decode_zigzag(cursor: WireCursor, wire_type: int) -> int:
    """Decode a signed integer.

    Varints are zigzag-decoded. Fixed-width values are reinterpreted as
    two's-complement without the zigzag transform.
    """
    if wire_type == WireType.VARINT:
        value = cursor.read_varint()
        return (value >> 1) ^ -(value & 1)
    if wire_type == WireType.FIXED64:
        return _to_signed(cursor.read_fixed(8), 64)
    if wire_type == WireType.FIXED32:
        return _to_signed(cursor.read_fixed(4), 32)
    raise WireTypeMismatch(wire_type, "zigzag integral")


def decode_fp(cursor: WireCursor, wire_type: int) -> float:
    """Decode an IEEE-754 float (FIXED32) or double (FIXED64)."""
    if wire_type == WireType.FIXED64:
        return struct.unpack("<d", cursor.take_slice(8))[0]
    if wire_type == WireType.FIXED32:
        return struct.unpack("<f", cursor.take_slice(4))[0]
    raise WireTypeMismatch(wire_type, "floating-point")


def decode_bytearray(cursor: WireCursor, wire_type: int) -> memoryview:
    """Decode a length-delimited byte sequence as a view into the buffer."""
    if wire_type != WireType.LENGTH_DELIMITED:
        raise WireTypeMismatch(wire_type, "bytearray")
    return cursor.take_prefixed()


def decode_message(cursor: WireCursor, wire_type: int, message: TMessage) -> TMessage:
    """Decode a nested message from exactly its length-delimited span."""
    if wire_type != WireType.LENGTH_DELIMITED:
        raise WireTypeMismatch(wire_type, "message")

    payload = decode_bytearray(cursor, wire_type)
    message.decode_from(FieldDispatcher(WireCursor(payload)))
    return message


def _to_single(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        # Out of single-precision range
        return math.copysign(math.inf, value)


def narrow(value: int | float | memoryview, scalar: str) -> int | float | bool | bytes | str:
    """Convert a decoded value to its declared scalar type.

    Integers wider than the target wrap silently, the same way the wire
    contract allows a 64-bit encoding for a 32-bit field.
    """
    if scalar == ScalarType.INT32:
        return _to_signed(int(value), 32)  # type: ignore[arg-type]
    if scalar == ScalarType.INT64:
        return _to_signed(int(value), 64)  # type: ignore[arg-type]
    if scalar == ScalarType.UINT32:
        return int(value) & _MASK32  # type: ignore[arg-type]
    if scalar == ScalarType.UINT64:
        return int(value) & _MASK64  # type: ignore[arg-type]
    if scalar == ScalarType.BOOL:
        return value != 0
    if scalar == ScalarType.FLOAT:
        return _to_single(float(value))  # type: ignore[arg-type]
    if scalar == ScalarType.DOUBLE:
        return float(value)  # type: ignore[arg-type]
    if scalar == ScalarType.BYTES:
        return bytes(value)  # type: ignore[arg-type]
    if scalar == ScalarType.STRING:
        try:
            return str(value, "utf-8")  # type: ignore[arg-type]
        except UnicodeDecodeError as e:
            raise InvalidText(f"String field is not valid UTF-8: {e}") from e
    raise ValueError(f"Unknown scalar type {scalar}")


class FieldDispatcher:
    """Iterates the fields of one message buffer.

    Generated code drives it like this::

        for field_num, wire_type in pb:
            match field_num:
                case 1:
                    self.size = pb.read_integral(wire_type, "int64")
                    self.has_size = True
                case _:
                    pb.skip_field(wire_type)
    """

    __slots__ = ("cursor",)

    def __init__(self, source: WireCursor | bytes | bytearray | memoryview) -> None:
        self.cursor = source if isinstance(source, WireCursor) else WireCursor(source)

    @property
    def exhausted(self) -> bool:
        return self.cursor.at_end

    def next_field(self) -> tuple[int, int] | None:
        """Return the next (field_number, wire_type), or None when exhausted."""
        if self.cursor.at_end:
            return None
        return self.cursor.read_tag()

    def __iter__(self) -> Iterator[tuple[int, int]]:
        while (tag := self.next_field()) is not None:
            yield tag

    def skip_field(self, wire_type: int) -> None:
        """Discard one value of an unrecognized field."""
        if wire_type not in (WireType.VARINT, WireType.FIXED64, WireType.LENGTH_DELIMITED, WireType.FIXED32):
            raise UnsupportedWireType(wire_type)
        self.cursor.skip(wire_type)

    def read_integral(self, wire_type: int, scalar: str = ScalarType.UINT64) -> int:
        return narrow(decode_integral(self.cursor, wire_type), scalar)  # type: ignore[return-value]

    def read_zigzag(self, wire_type: int, scalar: str = ScalarType.INT64) -> int:
        return narrow(decode_zigzag(self.cursor, wire_type), scalar)  # type: ignore[return-value]

    def read_fp(self, wire_type: int, scalar: str = ScalarType.DOUBLE) -> float:
        return narrow(decode_fp(self.cursor, wire_type), scalar)  # type: ignore[return-value]

    def read_bytearray(self, wire_type: int, scalar: str = ScalarType.BYTES) -> bytes | str:
        return narrow(decode_bytearray(self.cursor, wire_type), scalar)  # type: ignore[return-value]

    def read_message(self, wire_type: int, message: TMessage) -> TMessage:
        return decode_message(self.cursor, wire_type, message)
