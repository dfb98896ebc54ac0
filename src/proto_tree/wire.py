# coding=utf-8
"""
Wire codec primitives: reading and writing tags, varints, fixed-width values
and length prefixes.

Every read_* function takes the data and a keyword offset (and optionally a
limit, an absolute position past which the data is treated as absent), and
returns the value read along with the number of bytes consumed. Malformed or
truncated input raises a DecodeError subclass naming the position.
"""
from struct import pack, unpack_from



class DecodeError(ValueError):
    """
    Base class for every failure to decode wire-format data.

    offset is the absolute position in the input buffer where the offending
    item begins, and wire_type is the wire type of the field being read when
    it is known (None otherwise).
    """

    def __init__(self, message, *, offset=None, wire_type=None):
        if offset is not None:
            message = f'{message} at position {offset}'
        super().__init__(message)
        self.offset = offset
        self.wire_type = wire_type


class MalformedTag(DecodeError):
    pass


class TruncatedVarint(DecodeError):
    pass


class VarintOverflow(DecodeError):
    """Varint longer than 10 bytes or wider than 64 bits."""


class TruncatedFixed(DecodeError):
    pass


class TruncatedFixed32(TruncatedFixed):
    pass


class TruncatedFixed64(TruncatedFixed):
    pass


class TruncatedLengthPrefix(DecodeError):
    pass


class UnsupportedWireType(DecodeError):
    """Group start/end markers and the reserved wire types 6 and 7."""


VARINT = 0
FIXED64 = 1
LENGTH_DELIMITED = 2
START_GROUP = 3
END_GROUP = 4
FIXED32 = 5

SUPPORTED_WIRE_TYPES = frozenset((VARINT, FIXED64, LENGTH_DELIMITED, FIXED32))

MAX_VARINT_BYTES = 10
# Largest field number a builder will write. Tags with numbers up to
# MAX_DECODED_FIELD_NUMBER are still accepted when reading.
MAX_FIELD_NUMBER = 0x1fff_ffff
MAX_DECODED_FIELD_NUMBER = 0x7fff_ffff

UNSIGNED_64_BIT_RANGE = range(0x1_0000_0000_0000_0000)
UNSIGNED_32_BIT_RANGE = range(0x1_0000_0000)


def uint_to_signed(n):
    """
    Convert a non-negative integer to the signed value with zig-zag decoding.
    """
    return (n >> 1) ^ (0 - (n & 1))


def signed_to_uint(n):
    """
    Convert a signed integer to the non-negative value with zig-zag encoding.
    """
    if n < 0:
        return ((n ^ -1) << 1) | 1
    else:
        return n << 1


def twos_complement(n, bits):
    """Reinterpret an unsigned integer of the given width as signed."""
    if n & (1 << (bits - 1)):
        return n - (1 << bits)
    return n


def bytes_to_encode_varint(n):
    """
    Return the minimum number of bytes needed to represent a number in varint
    encoding.
    """
    if n < 0:
        raise ValueError('Encoded varint must be non-negative')
    return max(1, (n.bit_length() + 6) // 7)


def write_varint(value, *, excess_bytes=0):
    """
    Converts an unsigned varint to bytes, padded with excess_bytes redundant
    continuation bytes.
    """

    def varint_bytes(n):
        while n > 0x7f:
            yield 0x80 | (n & 0x7f)
            n >>= 7
        if excess_bytes > 0:
            yield 0x80 | n
            for _ in range(excess_bytes - 1):
                yield 0x80
            yield 0x00
        else:
            yield n

    if value < 0:
        raise ValueError('Encoded varint must be non-negative')
    return bytes(varint_bytes(value))


def write_tag(number, wire_type, *, excess_bytes=0):
    return write_varint((number << 3) | wire_type, excess_bytes=excess_bytes)


def write_fixed32(value):
    return pack('<L', value)


def write_fixed64(value):
    return pack('<Q', value)


def _end_of(data, limit):
    if limit is None:
        return len(data)
    return min(limit, len(data))


def read_varint(data, *, offset=0, limit=None):
    """
    Read a varint from the given offset in the given byte data.

    Returns a tuple containing the numeric value of the varint and
    the number of bytes consumed.

    If the varint representation does not end before the end of the data (or
    the limit), TruncatedVarint is raised; if it runs longer than 10 bytes or
    exceeds 64 bits, VarintOverflow is raised.
    """
    end = _end_of(data, limit)
    result = 0
    bytes_read = 0
    while True:
        if offset + bytes_read >= end:
            raise TruncatedVarint('Data truncated in varint', offset=offset)
        byte = data[offset + bytes_read]
        if bytes_read == MAX_VARINT_BYTES - 1 and byte > 1:
            raise VarintOverflow('Varint exceeds 64 bits', offset=offset)
        result |= (byte & 0x7f) << (7 * bytes_read)
        bytes_read += 1
        if byte & 0x80 == 0:
            return result, bytes_read


def read_tag(data, *, offset=0, limit=None):
    """
    Read a field tag, returning (field number, wire type, bytes consumed).

    Only the tag itself is validated here: a well-formed tag with an
    unsupported wire type is returned normally, see check_wire_type().
    """
    try:
        tag, tag_bytes = read_varint(data, offset=offset, limit=limit)
    except DecodeError as ex:
        raise MalformedTag(
            f'Truncated or overlong field tag ({type(ex).__name__})',
            offset=offset,
        ) from ex
    number = tag >> 3
    wire_type = tag & 0b111
    if number < 1 or number > MAX_DECODED_FIELD_NUMBER:
        raise MalformedTag(
            f'Invalid field number {number} in tag',
            offset=offset,
            wire_type=wire_type,
        )
    return number, wire_type, tag_bytes


def check_wire_type(wire_type, *, offset=None):
    if wire_type not in SUPPORTED_WIRE_TYPES:
        raise UnsupportedWireType(
            f'Invalid or unsupported field wire type {wire_type} in tag',
            offset=offset,
            wire_type=wire_type,
        )


def read_fixed32(data, *, offset=0, limit=None):
    if offset + 4 > _end_of(data, limit):
        raise TruncatedFixed32(
            'Data truncated in fixed32 value beginning',
            offset=offset,
            wire_type=FIXED32,
        )
    value, = unpack_from('<L', data, offset)
    return value, 4


def read_fixed64(data, *, offset=0, limit=None):
    if offset + 8 > _end_of(data, limit):
        raise TruncatedFixed64(
            'Data truncated in fixed64 value beginning',
            offset=offset,
            wire_type=FIXED64,
        )
    value, = unpack_from('<Q', data, offset)
    return value, 8


def read_length_prefix(data, *, offset=0, limit=None):
    """
    Read the length prefix of a length-delimited value and check that the
    whole span is present.

    Returns (length, prefix bytes consumed); the span itself begins at
    offset + prefix bytes consumed.
    """
    try:
        length, length_bytes = read_varint(data, offset=offset, limit=limit)
    except DecodeError as ex:
        raise TruncatedLengthPrefix(
            f'Unreadable length prefix ({type(ex).__name__})',
            offset=offset,
            wire_type=LENGTH_DELIMITED,
        ) from ex
    start = offset + length_bytes
    if start + length > _end_of(data, limit):
        raise TruncatedLengthPrefix(
            f'Data truncated in length-delimited data ({length} bytes long) '
            f'beginning',
            offset=start,
            wire_type=LENGTH_DELIMITED,
        )
    return length, length_bytes
