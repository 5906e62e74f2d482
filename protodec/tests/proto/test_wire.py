"""Tests for the wire cursor"""

# pylint: disable=redefined-outer-name,unused-variable,expression-not-assigned,singleton-comparison

import pytest

from protodec.proto import Truncated, UnsupportedWireType, VarintOverflow, WireCursor, WireType


def describe_read_varint():
    def reads_single_byte(expect):
        cursor = WireCursor(b"\x05")
        expect(cursor.read_varint()) == 5
        expect(cursor.at_end) == True

    def reads_multi_byte(expect):
        cursor = WireCursor(b"\xac\x02")
        expect(cursor.read_varint()) == 300
        expect(cursor.position) == 2

    def reads_max_uint64(expect):
        cursor = WireCursor(b"\xff" * 9 + b"\x01")
        expect(cursor.read_varint()) == (1 << 64) - 1
        expect(cursor.at_end) == True

    def accepts_non_minimal_encoding(expect):
        cursor = WireCursor(b"\x81\x80\x80\x00")
        expect(cursor.read_varint()) == 1
        expect(cursor.position) == 4

    def stops_at_terminating_byte(expect):
        cursor = WireCursor(b"\x01\x02")
        expect(cursor.read_varint()) == 1
        expect(cursor.remaining) == 1

    def fails_when_truncated(expect):
        cursor = WireCursor(b"\x80\x80")
        with pytest.raises(Truncated):
            cursor.read_varint()
        expect(cursor.position) == 0

    def fails_on_empty_buffer(expect):
        with pytest.raises(Truncated):
            WireCursor(b"").read_varint()

    def fails_with_eleven_groups(expect):
        cursor = WireCursor(b"\xff" * 10 + b"\x01")
        with pytest.raises(VarintOverflow):
            cursor.read_varint()
        expect(cursor.position) == 0

    def fails_when_tenth_group_exceeds_64_bits(expect):
        for last in (b"\x02", b"\x7f"):
            cursor = WireCursor(b"\xff" * 9 + last)
            with pytest.raises(VarintOverflow):
                cursor.read_varint()
            expect(cursor.position) == 0

    def accepts_tenth_group_with_top_bit(expect):
        cursor = WireCursor(b"\x80" * 9 + b"\x01")
        expect(cursor.read_varint()) == 1 << 63


def describe_read_fixed():
    def reads_little_endian_32(expect):
        cursor = WireCursor(b"\x01\x02\x03\x04")
        expect(cursor.read_fixed(4)) == 0x04030201
        expect(cursor.at_end) == True

    def reads_little_endian_64(expect):
        cursor = WireCursor(b"\xff" * 8)
        expect(cursor.read_fixed(8)) == (1 << 64) - 1

    def fails_when_truncated(expect):
        cursor = WireCursor(b"\x01\x02\x03")
        with pytest.raises(Truncated):
            cursor.read_fixed(4)
        expect(cursor.position) == 0

    def rejects_other_widths(expect):
        with pytest.raises(ValueError):
            WireCursor(b"\x00\x00").read_fixed(2)


def describe_take_slice():
    def returns_view_without_copy(expect):
        data = bytearray(b"abcdef")
        cursor = WireCursor(data)
        cursor.read_varint()
        view = cursor.take_slice(3)
        expect(bytes(view)) == b"bcd"
        data[1] = ord("B")
        expect(bytes(view)) == b"Bcd"

    def rejects_untrusted_length(expect):
        cursor = WireCursor(b"abc")
        with pytest.raises(Truncated):
            cursor.take_slice(1 << 62)
        expect(cursor.position) == 0

    def takes_zero_bytes_at_end(expect):
        cursor = WireCursor(b"")
        expect(bytes(cursor.take_slice(0))) == b""

    def takes_prefixed_slice(expect):
        cursor = WireCursor(b"\x03abcd")
        expect(bytes(cursor.take_prefixed())) == b"abc"
        expect(cursor.remaining) == 1

    def rewinds_truncated_prefixed_slice(expect):
        cursor = WireCursor(b"\x05abc")
        with pytest.raises(Truncated):
            cursor.take_prefixed()
        expect(cursor.position) == 0


def describe_cursor_range():
    def reads_only_within_window(expect):
        cursor = WireCursor(b"\x01\x02\x03\x04", start=1, end=3)
        expect(cursor.remaining) == 2
        expect(cursor.read_varint()) == 2
        expect(cursor.read_varint()) == 3
        with pytest.raises(Truncated):
            cursor.read_varint()

    def rejects_invalid_window(expect):
        with pytest.raises(ValueError):
            WireCursor(b"\x01\x02", start=2, end=1)
        with pytest.raises(ValueError):
            WireCursor(b"\x01\x02", end=5)


def describe_skip():
    def skips_each_wire_type(expect):
        data = b"\xac\x02" + b"\x00" * 8 + b"\x02ab" + b"\x00" * 4
        cursor = WireCursor(data)
        for wire_type in (WireType.VARINT, WireType.FIXED64, WireType.LENGTH_DELIMITED, WireType.FIXED32):
            cursor.skip(wire_type)
        expect(cursor.at_end) == True

    def rejects_groups(expect):
        cursor = WireCursor(b"\x00")
        with pytest.raises(UnsupportedWireType):
            cursor.skip(WireType.START_GROUP)
        with pytest.raises(UnsupportedWireType):
            cursor.skip(WireType.END_GROUP)
        with pytest.raises(UnsupportedWireType):
            cursor.skip(7)

    def reads_tag(expect):
        cursor = WireCursor(b"\x7a")
        expect(cursor.read_tag()) == (15, WireType.LENGTH_DELIMITED)
