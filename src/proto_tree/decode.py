# coding=utf-8
"""
Schema-less decoding of wire-format data into a Message tree.

Length-delimited fields are ambiguous without a schema: they may hold strings,
opaque bytes, or an embedded message. Each one is decoded speculatively as a
nested message; if that consumes the whole span cleanly and finds at least one
record, the field becomes an AmbiguousLengthPrefixed carrying both the raw
bytes and the parse. Otherwise it is plain Bytes.

The acceptance test is deliberately permissive. Binary blobs or strings that
happen to form valid records will be classified as ambiguous, never the other
way around; the raw bytes are always kept, so encoding is unaffected either
way.
"""
import logging

from .message import (
    AmbiguousLengthPrefixed,
    Bytes,
    Fixed32,
    Fixed64,
    Message,
    Record,
    Varint,
)
from .wire import (
    FIXED32,
    FIXED64,
    LENGTH_DELIMITED,
    VARINT,
    DecodeError,
    bytes_to_encode_varint,
    check_wire_type,
    read_fixed32,
    read_fixed64,
    read_length_prefix,
    read_tag,
    read_varint,
)

logger = logging.getLogger(__name__)

# Same nesting limit the official protobuf runtimes apply.
DEFAULT_MAX_DEPTH = 100


def decode(data, *, max_depth=DEFAULT_MAX_DEPTH):
    """
    Decode a complete message from a bytes-like object.

    Every byte must belong to a well-formed record, otherwise a DecodeError
    is raised and no message is returned. Spans nested deeper than max_depth
    are not speculatively parsed and stay Bytes.
    """
    data = memoryview(data).cast('B')
    return _decode_span(data, 0, len(data), 0, max_depth)


def _decode_span(data, start, end, depth, max_depth):
    records = []
    offset = start
    while offset < end:
        record, bytes_read = _decode_record(
            data, offset, end, depth, max_depth
        )
        records.append(record)
        offset += bytes_read
    return Message(records)


def _decode_record(data, offset, end, depth, max_depth):
    number, wire_type, tag_bytes = read_tag(data, offset=offset, limit=end)
    check_wire_type(wire_type, offset=offset)
    excess_tag_bytes = tag_bytes - bytes_to_encode_varint(
        (number << 3) | wire_type
    )
    value_offset = offset + tag_bytes

    if wire_type == VARINT:
        value, value_bytes = read_varint(data, offset=value_offset, limit=end)
        payload = Varint(
            value,
            excess_bytes=value_bytes - bytes_to_encode_varint(value),
        )
    elif wire_type == FIXED32:
        value, value_bytes = read_fixed32(data, offset=value_offset, limit=end)
        payload = Fixed32(value)
    elif wire_type == FIXED64:
        value, value_bytes = read_fixed64(data, offset=value_offset, limit=end)
        payload = Fixed64(value)
    elif wire_type == LENGTH_DELIMITED:
        length, length_bytes = read_length_prefix(
            data, offset=value_offset, limit=end
        )
        span_start = value_offset + length_bytes
        payload = _classify_span(
            data,
            span_start,
            span_start + length,
            length_bytes - bytes_to_encode_varint(length),
            depth,
            max_depth,
        )
        value_bytes = length_bytes + length
    else:
        raise AssertionError(f'unhandled wire type {wire_type}')

    record = Record(number, payload, excess_tag_bytes=excess_tag_bytes)
    return record, tag_bytes + value_bytes


def _classify_span(data, start, end, excess_bytes, depth, max_depth):
    raw = data[start:end].tobytes()
    if not raw:
        return Bytes(raw, excess_bytes=excess_bytes)
    if depth + 1 > max_depth:
        logger.debug(
            'Not parsing span at position %d as a message: '
            'nesting exceeds %d levels', start, max_depth
        )
        return Bytes(raw, excess_bytes=excess_bytes)
    try:
        parsed = _decode_span(data, start, end, depth + 1, max_depth)
    except DecodeError as ex:
        logger.debug('Span at position %d is opaque bytes: %s', start, ex)
        return Bytes(raw, excess_bytes=excess_bytes)
    return AmbiguousLengthPrefixed(raw, parsed, excess_bytes=excess_bytes)
