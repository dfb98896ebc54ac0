# coding=utf-8
from .decode import DEFAULT_MAX_DEPTH, decode
from .encode import (
    byte_size,
    encode,
    iter_encode,
    strip_excess_bytes,
    total_excess_bytes,
)
from .message import (
    AmbiguousLengthPrefixed,
    Bytes,
    Fixed32,
    Fixed64,
    Message,
    Record,
    Varint,
)
from .pretty import pretty_print, repr_pretty
from .wire import (
    DecodeError,
    MalformedTag,
    TruncatedFixed,
    TruncatedFixed32,
    TruncatedFixed64,
    TruncatedLengthPrefix,
    TruncatedVarint,
    UnsupportedWireType,
    VarintOverflow,
)

__doc__ = """
Pure python tools for reading and editing protobuf data without a schema.

License: MIT

To decode a proto, pass a bytes-like object to decode(). This returns a
Message whose records list holds every field of the message in the exact order
it appeared, as Record(number, payload) pairs.

No assumptions are made about the schema of the message. Protobufs are fully
parseable without knowledge of the meaning of their contents, except for one
thing: a length-delimited field may be a string, opaque bytes, or an embedded
message, and the wire format does not say which. Every length-delimited field
is therefore decoded speculatively as a message. If that works cleanly, the
payload is an AmbiguousLengthPrefixed holding both the raw bytes and the
parsed message; otherwise it is plain Bytes.


Payloads:

    * Varint(value), Fixed32(value), Fixed64(value)
        Unsigned integer scalars. Typed views are available as properties:
        Varint.signed (zig-zag), .int64, .int32, .bool; Fixed32.sfixed32,
        .float; Fixed64.sfixed64, .double.

    * Bytes(value)
        Opaque length-delimited bytes. Bytes.string decodes it as utf-8.

    * AmbiguousLengthPrefixed(raw, parsed)
        Length-delimited bytes that also parse as a message. Only raw is ever
        encoded; edits to parsed have no effect on the serialized output.

    * Message(records)
        A nested message built explicitly. Encoded from its records.


Reading:

    Message.get_message(n), get_bytes(n), get_varint(n), get_i32(n),
    get_i64(n) lazily yield the values of records numbered n whose payload is
    compatible with the requested kind, skipping any others.

    Message.paths_and_payloads() recursively yields every payload with the
    path of field numbers traversed to reach it.


Building:

    Message.add_varint(n, v), add_i32(n, v), add_i64(n, v), add_bytes(n, v)
    append records. Message.add_message(n, build_fn) passes a fresh Message to
    build_fn to populate and then appends it.


Serializing:

    * encode(message), iter_encode(message)
        Returns the serialized bytes, or the chunks that make them up.
        encode(decode(data)) == data for any data that decodes.

    * byte_size(message)
        Returns the exact number of bytes when serialized.

    * total_excess_bytes(message), strip_excess_bytes(message)
        Most varints have multiple valid representations, because trailing
        zero groups are still accepted. Any message this library decodes
        re-encodes with the EXACT bytes it came from, including such redundant
        bytes; these count them, or remove them so that the message encodes
        minimally.


Debugging:

    Every object's repr is valid code that rebuilds it after
    `from proto_tree import *`. repr_pretty() returns the same code broken
    into indented lines, and pretty_print() prints it.
"""

# The types that appear in repr strings are listed so that import * always
# yields repr values that eval back to an equivalent object.
__all__ = (
    'Message',
    'Record',
    'Varint',
    'Fixed32',
    'Fixed64',
    'Bytes',
    'AmbiguousLengthPrefixed',
    'decode',
    'encode',
    'iter_encode',
    'byte_size',
    'total_excess_bytes',
    'strip_excess_bytes',
    'repr_pretty',
    'pretty_print',
    'DEFAULT_MAX_DEPTH',
    'DecodeError',
    'MalformedTag',
    'TruncatedVarint',
    'VarintOverflow',
    'TruncatedFixed',
    'TruncatedFixed32',
    'TruncatedFixed64',
    'TruncatedLengthPrefix',
    'UnsupportedWireType',
)
