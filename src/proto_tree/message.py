# coding=utf-8
"""
The generic message tree: payload variants, records, and messages.

A Message is an ordered list of Records, and each Record pairs a field number
with exactly one of the payload variants below. The set of variants is closed;
code that consumes payloads dispatches over PAYLOAD_TYPES and raises TypeError
for anything else.
"""
from collections.abc import Iterable
from struct import pack, unpack
from typing import Union

from .wire import (
    FIXED32,
    FIXED64,
    LENGTH_DELIMITED,
    MAX_DECODED_FIELD_NUMBER,
    MAX_FIELD_NUMBER,
    MAX_VARINT_BYTES,
    UNSIGNED_32_BIT_RANGE,
    UNSIGNED_64_BIT_RANGE,
    VARINT,
    twos_complement,
    uint_to_signed,
)


def _check_int(value, value_range, kind):
    if not isinstance(value, int):
        raise TypeError(
            f'{kind} value must be an int, not {type(value).__name__}'
        )
    if value not in value_range:
        raise ValueError(f'Value out of range for {kind}: {value}')
    return int(value)


def _check_excess(excess_bytes):
    return _check_int(excess_bytes, range(MAX_VARINT_BYTES), 'excess bytes')


def _check_bytes(value, kind):
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(
            f'{kind} value must be bytes-like, not {type(value).__name__}'
        )
    return bytes(value)


class Varint:
    __slots__ = ('value', 'excess_bytes',)
    wire_type = VARINT

    def __init__(self, value=0, *, excess_bytes=0):
        self.value = _check_int(value, UNSIGNED_64_BIT_RANGE, 'Varint')
        self.excess_bytes = _check_excess(excess_bytes)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return other.value == self.value

    def __repr__(self):
        if self.excess_bytes:
            return (
                f'{type(self).__name__}({repr(self.value)}, '
                f'excess_bytes={self.excess_bytes})'
            )
        else:
            return f'{type(self).__name__}({repr(self.value)})'

    @property
    def signed(self):
        """The value as a zig-zag encoded sint32/sint64."""
        return uint_to_signed(self.value)

    @property
    def int64(self):
        return twos_complement(self.value, 64)

    @property
    def int32(self):
        n = self.int64
        if not -0x8000_0000 <= n < 0x8000_0000:
            raise ValueError('Varint out of range for int32')
        return n

    @property
    def bool(self):
        return bool(self.value)


class Fixed32:
    __slots__ = ('value',)
    wire_type = FIXED32

    def __init__(self, value=0):
        self.value = _check_int(value, UNSIGNED_32_BIT_RANGE, 'Fixed32')

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return other.value == self.value

    def __repr__(self):
        return f'{type(self).__name__}({repr(self.value)})'

    @property
    def sfixed32(self):
        return twos_complement(self.value, 32)

    @property
    def float(self):
        result, = unpack('<f', pack('<L', self.value))
        return result


class Fixed64:
    __slots__ = ('value',)
    wire_type = FIXED64

    def __init__(self, value=0):
        self.value = _check_int(value, UNSIGNED_64_BIT_RANGE, 'Fixed64')

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return other.value == self.value

    def __repr__(self):
        return f'{type(self).__name__}({repr(self.value)})'

    @property
    def sfixed64(self):
        return twos_complement(self.value, 64)

    @property
    def double(self):
        result, = unpack('<d', pack('<Q', self.value))
        return result


class Bytes:
    """An opaque length-delimited payload."""
    __slots__ = ('value', 'excess_bytes',)
    wire_type = LENGTH_DELIMITED

    def __init__(self, value=b'', *, excess_bytes=0):
        self.value = _check_bytes(value, 'Bytes')
        self.excess_bytes = _check_excess(excess_bytes)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return other.value == self.value

    def __repr__(self):
        if self.excess_bytes:
            return (
                f'{type(self).__name__}({repr(self.value)}, '
                f'excess_bytes={self.excess_bytes})'
            )
        else:
            return f'{type(self).__name__}({repr(self.value)})'

    @property
    def string(self):
        return self.value.decode('utf-8')


class AmbiguousLengthPrefixed:
    """
    A length-delimited payload that also parses cleanly as a nested message.

    raw holds the exact bytes of the original span and is what gets encoded;
    parsed is the speculative interpretation of those bytes. Changes made to
    parsed are NOT reflected when encoding. To edit the nested message, build
    a replacement Message and encode that instead.
    """
    __slots__ = ('_raw', 'parsed', 'excess_bytes',)
    wire_type = LENGTH_DELIMITED

    def __init__(self, raw, parsed, *, excess_bytes=0):
        if not isinstance(parsed, Message):
            raise TypeError(
                f'parsed must be a Message, not {type(parsed).__name__}'
            )
        self._raw = _check_bytes(raw, 'AmbiguousLengthPrefixed')
        self.parsed = parsed
        self.excess_bytes = _check_excess(excess_bytes)

    @property
    def raw(self):
        return self._raw

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return other.raw == self.raw and other.parsed == self.parsed

    def __repr__(self):
        extra = ''
        if self.excess_bytes:
            extra = f', excess_bytes={self.excess_bytes}'
        return (
            f'{type(self).__name__}('
            f'{repr(self.raw)}, '
            f'{repr(self.parsed)}'
            f'{extra})'
        )


class Record:
    __slots__ = ('number', 'payload', 'excess_tag_bytes',)
    payload: 'Payload'

    def __init__(self, number, payload, *, excess_tag_bytes=0):
        self.number = _check_int(
            number, range(1, MAX_DECODED_FIELD_NUMBER + 1), 'field number'
        )
        if not isinstance(payload, PAYLOAD_TYPES):
            raise TypeError(
                f'Unsupported payload type {type(payload).__name__}'
            )
        self.payload = payload
        self.excess_tag_bytes = _check_excess(excess_tag_bytes)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return other.number == self.number and other.payload == self.payload

    def __repr__(self):
        if self.excess_tag_bytes:
            return (
                f'{type(self).__name__}('
                f'{repr(self.number)}, '
                f'{repr(self.payload)}, '
                f'excess_tag_bytes={repr(self.excess_tag_bytes)}'
                f')'
            )
        else:
            return (
                f'{type(self).__name__}('
                f'{repr(self.number)}, '
                f'{repr(self.payload)}'
                f')'
            )


def nested_message(payload):
    """
    Return the nested message carried by a payload, or None if the payload
    is a scalar or opaque bytes.
    """
    if isinstance(payload, Message):
        return payload
    elif isinstance(payload, AmbiguousLengthPrefixed):
        return payload.parsed
    else:
        return None


def _contains_message(message, target):
    for record in message.records:
        nested = nested_message(record.payload)
        if nested is not None and (
                nested is target or _contains_message(nested, target)
        ):
            return True
    return False


class Message:
    """
    An ordered sequence of Records.

    Field numbers are not unique: repeated and unknown fields simply appear as
    several records with the same number, in the order they were decoded or
    added. Messages only ever grow; there are no removal operations.

    The get_* accessors are lazy generators. Do not add records to a message
    while iterating one of its accessors.
    """
    __slots__ = ('records',)
    wire_type = LENGTH_DELIMITED

    def __init__(self, records=()):
        if not isinstance(records, Iterable):
            raise TypeError(f'Cannot create message with non-iterable type '
                            f'{repr(type(records).__name__)}')
        self.records = list(records)
        for record in self.records:
            if not isinstance(record, Record):
                raise TypeError(
                    f'Messages contain Records, not {type(record).__name__}'
                )

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return other.records == self.records

    def __iter__(self):
        return iter(self.records)

    def __len__(self):
        return len(self.records)

    def __repr__(self):
        return f'{type(self).__name__}({repr(self.records)})'

    def append(self, record):
        """Append a record. A message may not contain itself at any depth."""
        if not isinstance(record, Record):
            raise TypeError(
                f'Messages contain Records, not {type(record).__name__}'
            )
        nested = nested_message(record.payload)
        if nested is not None and (
                nested is self or _contains_message(nested, self)
        ):
            raise ValueError('A message cannot be nested inside itself')
        self.records.append(record)

    # Query accessors

    def _matching(self, number):
        for record in self.records:
            if record.number == number:
                yield record.payload

    def get_message(self, number):
        """
        Yields the nested message of each record with the given number,
        whether it was built as a Message or decoded as an ambiguous
        length-prefixed value. Other payload kinds are skipped.
        """
        for payload in self._matching(number):
            nested = nested_message(payload)
            if nested is not None:
                yield nested

    def get_bytes(self, number):
        """
        Yields the bytes of each record with the given number that is opaque
        Bytes or an ambiguous length-prefixed value (its raw bytes).
        """
        for payload in self._matching(number):
            if isinstance(payload, Bytes):
                yield payload.value
            elif isinstance(payload, AmbiguousLengthPrefixed):
                yield payload.raw

    def _get_exact(self, number, klass):
        for payload in self._matching(number):
            if type(payload) is klass:
                yield payload.value

    def get_varint(self, number):
        return self._get_exact(number, Varint)

    def get_i32(self, number):
        return self._get_exact(number, Fixed32)

    def get_i64(self, number):
        return self._get_exact(number, Fixed64)

    # Builders

    def _add(self, number, payload):
        _check_int(number, range(1, MAX_FIELD_NUMBER + 1), 'field number')
        self.append(Record(number, payload))

    def add_message(self, number, build_fn):
        """
        Append a nested message with the given number.

        A fresh empty Message is passed to build_fn, which populates it; once
        build_fn returns, the message is appended as a record. If build_fn
        raises, nothing is appended.
        """
        submessage = Message()
        build_fn(submessage)
        self._add(number, submessage)

    def add_varint(self, number, value):
        self._add(number, Varint(value))

    def add_i32(self, number, value):
        self._add(number, Fixed32(value))

    def add_i64(self, number, value):
        self._add(number, Fixed64(value))

    def add_bytes(self, number, value):
        self._add(number, Bytes(value))

    def paths_and_payloads(self, *, path_prefix=()):
        """
        Yields (path, payload) tuples for each record in the message,
        recursively descending into nested messages. The path is a tuple of
        field numbers; (2, 1) means field 1 inside field 2 at the top level.
        It says nothing about where in a repeated field the payload sits.

        For example, to account for which fields use the most space:

        account = collections.Counter()
        for path, payload in msg.paths_and_payloads():
            if isinstance(payload, Bytes):
                account[path] += len(payload.value)
        """
        for record in self.records:
            this_path = (*path_prefix, record.number)
            yield this_path, record.payload
            nested = nested_message(record.payload)
            if nested is not None:
                yield from nested.paths_and_payloads(path_prefix=this_path)


Payload = Union[
    Varint,
    Fixed32,
    Fixed64,
    Bytes,
    AmbiguousLengthPrefixed,
    Message,
]
PAYLOAD_TYPES = (
    Varint,
    Fixed32,
    Fixed64,
    Bytes,
    AmbiguousLengthPrefixed,
    Message,
)
