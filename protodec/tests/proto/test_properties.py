"""Property-based tests for the wire primitives.

Run with:
    pytest protodec/tests/proto/test_properties.py --hypothesis-show-statistics
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from protodec.proto import DecodeError, FieldDispatcher, Truncated, WireCursor, WireType, decode_zigzag
from protodec.tests.encoding import bytes_field, key, varint, varint_field, zigzag

u64_values = st.integers(min_value=0, max_value=(1 << 64) - 1)
s64_values = st.integers(min_value=-(1 << 63), max_value=(1 << 63) - 1)
wire_types = st.sampled_from([WireType.VARINT, WireType.FIXED64, WireType.LENGTH_DELIMITED, WireType.FIXED32])


@given(u64_values)
def test_varint_round_trip(value):
    cursor = WireCursor(varint(value))
    assert cursor.read_varint() == value
    assert cursor.at_end


@given(s64_values)
def test_zigzag_round_trip(value):
    assert decode_zigzag(WireCursor(varint(zigzag(value))), WireType.VARINT) == value


@given(u64_values)
def test_truncated_varint_never_reads_out_of_bounds(value):
    encoded = varint(value)
    for cut in range(len(encoded)):
        cursor = WireCursor(encoded[:cut])
        with pytest.raises(Truncated):
            cursor.read_varint()
        assert cursor.position == 0


@given(st.binary(min_size=1, max_size=64))
def test_truncated_length_delimited_fails(payload):
    encoded = bytes_field(1, payload)
    pb = FieldDispatcher(encoded[:-1])
    _, wire_type = pb.next_field()
    with pytest.raises(Truncated):
        pb.read_bytearray(wire_type)


@given(st.integers(min_value=16, max_value=1000), wire_types, st.binary(max_size=16), u64_values)
def test_unknown_fields_are_skippable(number, wire_type, payload, value):
    if wire_type == WireType.VARINT:
        unknown = varint_field(number, value)
    elif wire_type == WireType.FIXED64:
        unknown = key(number, wire_type) + value.to_bytes(8, "little")
    elif wire_type == WireType.FIXED32:
        unknown = key(number, wire_type) + (value & 0xFFFFFFFF).to_bytes(4, "little")
    else:
        unknown = bytes_field(number, payload)

    pb = FieldDispatcher(varint_field(1, 42) + unknown + varint_field(2, 7))
    seen = {}
    for field_num, field_wire_type in pb:
        if field_num in (1, 2):
            seen[field_num] = pb.read_integral(field_wire_type)
        else:
            pb.skip_field(field_wire_type)
    assert seen == {1: 42, 2: 7}


@given(st.binary(max_size=64))
def test_arbitrary_input_fails_cleanly(data):
    pb = FieldDispatcher(data)
    try:
        for _, wire_type in pb:
            pb.skip_field(wire_type)
    except DecodeError:
        pass
