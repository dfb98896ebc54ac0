# coding=utf-8
"""
Multi-line rendering of messages for debugging.

The output is the same valid code that repr() produces, broken into lines with
hierarchical indents, so it can be pasted back into a repl after
`from proto_tree import *`.
"""
from .message import (
    AmbiguousLengthPrefixed,
    Bytes,
    Fixed32,
    Fixed64,
    Message,
    Record,
    Varint,
)


def iter_pretty(obj, indent, depth):
    if isinstance(obj, Message):
        if obj.records:
            yield f'{type(obj).__name__}([\n'
            for record in obj:
                yield indent * (depth + 1)
                yield from iter_pretty(record, indent, depth + 1)
                yield ',\n'
            yield f'{indent * depth}])'
        else:
            yield repr(obj)
    elif isinstance(obj, Record):
        yield f'{type(obj).__name__}({repr(obj.number)}, '
        yield from iter_pretty(obj.payload, indent, depth)
        if obj.excess_tag_bytes:
            yield f', excess_tag_bytes={repr(obj.excess_tag_bytes)}'
        yield ')'
    elif isinstance(obj, AmbiguousLengthPrefixed):
        yield f'{type(obj).__name__}({repr(obj.raw)}, '
        yield from iter_pretty(obj.parsed, indent, depth)
        if obj.excess_bytes:
            yield f', excess_bytes={obj.excess_bytes}'
        yield ')'
    elif isinstance(obj, (Varint, Fixed32, Fixed64, Bytes)):
        yield repr(obj)
    else:
        raise TypeError(f'Cannot render object of type {type(obj).__name__}')


def repr_pretty(obj, indent=4):
    return ''.join(iter_pretty(obj, ' ' * indent, 0))


def pretty_print(obj, *args, **kwargs):
    print(repr_pretty(obj, *args, **kwargs))
