"""Bounds-checked cursor over protobuf wire data."""

from .types import WireType

# ceil(64 / 7) groups hold a full 64-bit value
MAX_VARINT_GROUPS = 10


class DecodeError(RuntimeError):
    """Base exception for wire decoding errors."""


class Truncated(DecodeError):
    """Raised when a read would run past the end of the buffer."""


class VarintOverflow(DecodeError):
    """Raised when a varint has more than 10 groups."""


class WireTypeMismatch(DecodeError):
    """Raised when a wire type can't hold the requested value kind."""

    def __init__(self, wire_type: int, kind: str) -> None:
        super().__init__(f"Can't parse {kind} value with wire type {wire_type}")
        self.wire_type = wire_type
        self.kind = kind


class UnsupportedWireType(DecodeError):
    """Raised for group wire types or any wire type outside {0, 1, 2, 5}."""

    def __init__(self, wire_type: int) -> None:
        super().__init__(f"Unsupported wire type {wire_type}")
        self.wire_type = wire_type


class WireCursor:
    """Forward-only read position over a borrowed byte range.

    The cursor never copies: slices are returned as memoryviews into the
    original buffer. ``start <= position <= end`` holds at all times, and a
    failed read leaves the position where it was.
    """

    __slots__ = ("_data", "_pos", "_end")

    def __init__(self, data: bytes | bytearray | memoryview, start: int = 0, end: int | None = None) -> None:
        view = memoryview(data)
        if view.format != "B" or view.ndim != 1:
            view = view.cast("B")
        if end is None:
            end = len(view)
        if not 0 <= start <= end <= len(view):
            raise ValueError(f"Invalid cursor range [{start}, {end}) for {len(view)} bytes")

        self._data = view
        self._pos = start
        self._end = end

    @property
    def position(self) -> int:
        return self._pos

    @property
    def end(self) -> int:
        return self._end

    @property
    def remaining(self) -> int:
        return self._end - self._pos

    @property
    def at_end(self) -> bool:
        return self._pos == self._end

    def read_varint(self) -> int:
        """Read one base-128 varint."""
        data = self._data
        pos = self._pos
        value = 0

        for group in range(MAX_VARINT_GROUPS):
            if pos == self._end:
                raise Truncated("Unexpected end of buffer in varint")
            byte = data[pos]
            pos += 1
            # The last group only has room for bit 63
            if group == MAX_VARINT_GROUPS - 1 and byte > 0x01:
                raise VarintOverflow("Varint exceeds 64 bits")
            value |= (byte & 0x7F) << (7 * group)
            if not byte & 0x80:
                self._pos = pos
                return value

        raise VarintOverflow(f"More than {MAX_VARINT_GROUPS} bytes in varint")

    def read_fixed(self, width: int) -> int:
        """Read a little-endian unsigned integer of 4 or 8 bytes."""
        if width not in (4, 8):
            raise ValueError(f"Fixed width must be 4 or 8, not {width}")
        return int.from_bytes(self.take_slice(width), "little")

    def take_slice(self, length: int) -> memoryview:
        """Consume ``length`` bytes and return them without copying."""
        if length > self._end - self._pos:
            raise Truncated(f"Unexpected end of buffer: need {length} bytes, have {self.remaining}")

        start = self._pos
        self._pos += length
        return self._data[start : self._pos]

    def take_prefixed(self) -> memoryview:
        """Consume a varint length followed by that many bytes."""
        start = self._pos
        length = self.read_varint()
        try:
            return self.take_slice(length)
        except Truncated:
            self._pos = start
            raise

    def read_tag(self) -> tuple[int, int]:
        """Read a field tag as (field_number, wire_type)."""
        value = self.read_varint()
        return value >> 3, value & 7

    def skip(self, wire_type: int) -> None:
        """Consume one value of the given wire type."""
        if wire_type == WireType.VARINT:
            self.read_varint()
        elif wire_type == WireType.FIXED32:
            self.take_slice(4)
        elif wire_type == WireType.FIXED64:
            self.take_slice(8)
        elif wire_type == WireType.LENGTH_DELIMITED:
            self.take_prefixed()
        else:
            raise UnsupportedWireType(wire_type)
