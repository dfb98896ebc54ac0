# coding=utf-8
from struct import pack

from proto_tree import (
    AmbiguousLengthPrefixed,
    Bytes,
    Message,
    Record,
    Varint,
    byte_size,
    decode,
    encode,
    iter_encode,
    strip_excess_bytes,
    total_excess_bytes,
)


def _built_message():
    msg = Message()
    msg.add_varint(1, 150)
    msg.add_message(2, lambda sub: sub.add_varint(1, 1))
    msg.add_bytes(3, b'hi')
    msg.add_i32(4, 1)
    msg.add_i64(5, 2)
    return msg


BUILT_BYTES = (
    b'\x08\x96\x01'
    b'\x12\x02\x08\x01'
    b'\x1a\x02hi'
    b'\x25' + pack('<L', 1) +
    b'\x29' + pack('<Q', 2)
)


def test_encode_empty_message():
    assert encode(Message()) == b''


def test_encode_single_varint():
    assert encode(Message([Record(1, Varint(150))])) == b'\x08\x96\x01'


def test_encode_built_message():
    assert encode(_built_message()) == BUILT_BYTES


def test_iter_encode_chunks_join_to_encoding():
    msg = _built_message()
    assert b''.join(iter_encode(msg)) == encode(msg)


def test_built_message_decodes_back():
    decoded = decode(encode(_built_message()))
    assert list(decoded.get_varint(1)) == [150]
    assert list(decoded.get_message(2)) == [Message([Record(1, Varint(1))])]
    assert list(decoded.get_bytes(3)) == [b'hi']
    assert list(decoded.get_i32(4)) == [1]
    assert list(decoded.get_i64(5)) == [2]


def test_nested_built_messages():
    msg = Message()

    def build_outer(outer):
        outer.add_varint(1, 5)
        outer.add_message(2, lambda inner: inner.add_bytes(1, b'x'))

    msg.add_message(7, build_outer)
    assert encode(msg) == b'\x3a\x07\x08\x05\x12\x03\x0a\x01x'


def test_empty_nested_message():
    msg = Message()
    msg.add_message(1, lambda sub: None)
    assert encode(msg) == b'\x0a\x00'
    assert decode(encode(msg)) == Message([Record(1, Bytes(b''))])


def test_ambiguous_encodes_raw_not_parsed():
    msg = decode(b'\x12\x02\x08\x01')
    payload = msg.records[0].payload
    payload.parsed.add_varint(2, 3)
    assert encode(msg) == b'\x12\x02\x08\x01'


def test_replacing_ambiguous_payload_with_message():
    msg = decode(b'\x12\x02\x08\x01')
    edited = Message(next(msg.get_message(2)))
    edited.add_varint(2, 3)
    rebuilt = Message()
    rebuilt.append(Record(2, edited))
    assert encode(rebuilt) == b'\x12\x04\x08\x01\x10\x03'


def test_byte_size():
    samples = [
        _built_message(),
        decode(b'\x88\x00\x80\x00'),
        decode(b'\x0a\x82\x00\x08\x01'),
        Message(),
    ]
    for msg in samples:
        assert byte_size(msg) == len(encode(msg))


def test_excess_bytes():
    data = b'\x88\x00\x80\x00\x0a\x82\x00\x08\x01'
    msg = decode(data)
    assert total_excess_bytes(msg) == 3
    assert encode(msg) == data

    strip_excess_bytes(msg)
    assert total_excess_bytes(msg) == 0
    assert encode(msg) == b'\x08\x00\x0a\x02\x08\x01'
    assert decode(encode(msg)) == msg


def test_excess_inside_raw_span_is_kept():
    # the nested varint has a redundant byte, which belongs to the raw bytes
    data = b'\x0a\x03\x08\x80\x00'
    msg = decode(data)
    assert isinstance(msg.records[0].payload, AmbiguousLengthPrefixed)
    assert total_excess_bytes(msg) == 0
    strip_excess_bytes(msg)
    assert encode(msg) == data


def test_strip_excess_bytes_recurses_into_messages():
    inner = Message([Record(1, Varint(0, excess_bytes=2))])
    msg = Message([Record(1, inner, excess_tag_bytes=1)])
    assert total_excess_bytes(msg) == 3
    assert encode(msg) == b'\x8a\x00\x04\x08\x80\x80\x00'
    strip_excess_bytes(msg)
    assert encode(msg) == b'\x0a\x02\x08\x00'


def test_byte_size_matches_encoding_at_excess_limits():
    msg = Message([
        Record(1, Varint(0, excess_bytes=9), excess_tag_bytes=9),
        Record(2, Bytes(b'x', excess_bytes=3)),
    ])
    assert byte_size(msg) == len(encode(msg))
    assert decode(encode(msg)) == msg
