# coding=utf-8
import pytest
from proto_tree.wire import (
    MalformedTag,
    TruncatedFixed,
    TruncatedFixed32,
    TruncatedFixed64,
    TruncatedLengthPrefix,
    TruncatedVarint,
    UnsupportedWireType,
    VarintOverflow,
    bytes_to_encode_varint,
    check_wire_type,
    read_fixed32,
    read_fixed64,
    read_length_prefix,
    read_tag,
    read_varint,
    signed_to_uint,
    twos_complement,
    uint_to_signed,
    write_fixed64,
    write_tag,
    write_varint,
)


def test_zig_zag():
    for i in range(1000):
        assert signed_to_uint(uint_to_signed(i)) == i
    assert uint_to_signed(1) == -1
    assert signed_to_uint(-2) == 3


def test_varint_parsing():
    for i in range(1000):
        serialized = write_varint(i)
        assert len(serialized) == bytes_to_encode_varint(i)
        embedded = b'foo' + serialized + b'bar'
        assert read_varint(embedded, offset=3) == (i, len(serialized))


def test_varint_no_negatives():
    with pytest.raises(ValueError):
        write_varint(-1)
    with pytest.raises(ValueError):
        bytes_to_encode_varint(-1)


def test_truncated_varint():
    serialized = write_varint(999999999)
    assert read_varint(serialized) == (999999999, len(serialized))
    with pytest.raises(TruncatedVarint):
        read_varint(serialized[:-1])


def test_varint_stops_at_limit():
    with pytest.raises(TruncatedVarint) as info:
        read_varint(b'\x96\x01', limit=1)
    assert info.value.offset == 0


def test_varint_excess_bytes():
    assert write_varint(0, excess_bytes=2) == b'\x80\x80\x00'
    assert read_varint(b'\x80\x80\x00') == (0, 3)
    assert write_varint(150, excess_bytes=1) == b'\x96\x81\x00'
    assert read_varint(b'\x96\x81\x00') == (150, 3)


def test_varint_64_bit_bounds():
    largest = write_varint(0xffff_ffff_ffff_ffff)
    assert largest == b'\xff' * 9 + b'\x01'
    assert read_varint(largest) == (0xffff_ffff_ffff_ffff, 10)
    with pytest.raises(VarintOverflow):
        read_varint(b'\xff' * 9 + b'\x02')
    with pytest.raises(VarintOverflow):
        read_varint(b'\x80' * 10 + b'\x00')


def test_read_tag():
    assert read_tag(b'\x08') == (1, 0, 1)
    assert read_tag(b'\x12') == (2, 2, 1)
    assert write_tag(2, 2) == b'\x12'
    # unsupported wire types are only rejected by check_wire_type
    assert read_tag(b'\x0b') == (1, 3, 1)


def test_malformed_tags():
    with pytest.raises(MalformedTag):
        read_tag(b'\x00')
    with pytest.raises(MalformedTag):
        read_tag(b'\x88')
    with pytest.raises(MalformedTag):
        read_tag(b'')


def test_check_wire_type():
    for wire_type in (0, 1, 2, 5):
        check_wire_type(wire_type)
    for wire_type in (3, 4, 6, 7):
        with pytest.raises(UnsupportedWireType) as info:
            check_wire_type(wire_type, offset=7)
        assert info.value.wire_type == wire_type
        assert info.value.offset == 7


def test_fixed_values():
    assert read_fixed32(b'\x01\x00\x00\x00') == (1, 4)
    assert read_fixed64(b'xx' + write_fixed64(2 ** 64 - 1), offset=2) == (
        2 ** 64 - 1, 8
    )
    with pytest.raises(TruncatedFixed32):
        read_fixed32(b'\x01\x00\x00')
    with pytest.raises(TruncatedFixed):
        read_fixed64(b'\x00' * 8, limit=7)
    with pytest.raises(TruncatedFixed64):
        read_fixed64(b'\x00' * 7)


def test_length_prefix():
    assert read_length_prefix(b'\x02ab') == (2, 1)
    assert read_length_prefix(b'\x82\x00ab') == (2, 2)
    with pytest.raises(TruncatedLengthPrefix):
        read_length_prefix(b'\x03ab')
    with pytest.raises(TruncatedLengthPrefix):
        read_length_prefix(b'\x02ab', limit=2)
    with pytest.raises(TruncatedLengthPrefix):
        read_length_prefix(b'\x80')


def test_twos_complement():
    assert twos_complement(0xffff_ffff, 32) == -1
    assert twos_complement(0x7fff_ffff, 32) == 0x7fff_ffff
    assert twos_complement(0x8000_0000_0000_0000, 64) == -(2 ** 63)
