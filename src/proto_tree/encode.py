# coding=utf-8
"""
Encoding Message trees back to wire format, plus size and excess-byte
accounting.

Ambiguous length-prefixed values are always written from their raw bytes,
never re-derived from the parsed message, so encode(decode(data)) == data for
any data that decodes.
"""
from .message import (
    AmbiguousLengthPrefixed,
    Bytes,
    Fixed32,
    Fixed64,
    Message,
    Varint,
)
from .wire import (
    bytes_to_encode_varint,
    write_fixed32,
    write_fixed64,
    write_tag,
    write_varint,
)


def _unknown_payload(payload):
    return TypeError(f'Cannot encode payload of type {type(payload).__name__}')


def encode(message):
    """Serialize a message and return it as a bytes object."""
    return b''.join(iter_encode(message))


def iter_encode(message):
    """Yields the constituent chunks of the message's serialization."""
    for record in message:
        payload = record.payload
        yield write_tag(
            record.number,
            payload.wire_type,
            excess_bytes=record.excess_tag_bytes,
        )
        yield from _iter_encode_payload(payload)


def _iter_encode_payload(payload):
    if isinstance(payload, Varint):
        yield write_varint(payload.value, excess_bytes=payload.excess_bytes)
    elif isinstance(payload, Fixed32):
        yield write_fixed32(payload.value)
    elif isinstance(payload, Fixed64):
        yield write_fixed64(payload.value)
    elif isinstance(payload, Bytes):
        yield write_varint(
            len(payload.value), excess_bytes=payload.excess_bytes
        )
        yield payload.value
    elif isinstance(payload, AmbiguousLengthPrefixed):
        yield write_varint(len(payload.raw), excess_bytes=payload.excess_bytes)
        yield payload.raw
    elif isinstance(payload, Message):
        # Not exactly efficient, but we're not prescient.
        yield write_varint(byte_size(payload))
        yield from iter_encode(payload)
    else:
        raise _unknown_payload(payload)


def byte_size(message):
    """
    Return the total length this message will occupy when serialized in
    bytes.
    """
    return sum(
        bytes_to_encode_varint((record.number << 3) | record.payload.wire_type)
        + record.excess_tag_bytes
        + _payload_size(record.payload)
        for record in message
    )


def _length_prefixed_size(length, excess_bytes=0):
    return bytes_to_encode_varint(length) + excess_bytes + length


def _payload_size(payload):
    if isinstance(payload, Varint):
        return bytes_to_encode_varint(payload.value) + payload.excess_bytes
    elif isinstance(payload, Fixed32):
        return 4
    elif isinstance(payload, Fixed64):
        return 8
    elif isinstance(payload, Bytes):
        return _length_prefixed_size(len(payload.value), payload.excess_bytes)
    elif isinstance(payload, AmbiguousLengthPrefixed):
        return _length_prefixed_size(len(payload.raw), payload.excess_bytes)
    elif isinstance(payload, Message):
        return _length_prefixed_size(byte_size(payload))
    else:
        raise _unknown_payload(payload)


def total_excess_bytes(message):
    """
    Return the total number of excess bytes used to encode varints (tags,
    varint values, and lengths).

    Redundant bytes inside the raw span of an ambiguous value are part of
    that value's bytes and are not counted.
    """
    total = 0
    for record in message:
        payload = record.payload
        total += record.excess_tag_bytes
        if isinstance(payload, (Varint, Bytes, AmbiguousLengthPrefixed)):
            total += payload.excess_bytes
        elif isinstance(payload, Message):
            total += total_excess_bytes(payload)
        elif not isinstance(payload, (Fixed32, Fixed64)):
            raise _unknown_payload(payload)
    return total


def strip_excess_bytes(message):
    """
    Strip all excess bytes from this message's records and payloads, so that
    it encodes with minimal varints. The raw bytes of ambiguous values are
    left untouched.
    """
    for record in message:
        payload = record.payload
        record.excess_tag_bytes = 0
        if isinstance(payload, (Varint, Bytes, AmbiguousLengthPrefixed)):
            payload.excess_bytes = 0
        elif isinstance(payload, Message):
            strip_excess_bytes(payload)
        elif not isinstance(payload, (Fixed32, Fixed64)):
            raise _unknown_payload(payload)
