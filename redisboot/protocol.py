"""
Redis wire protocol helpers used during the handshake.

`parse` decodes exactly one reply from the front of a buffer. When the
buffer holds only part of a reply it returns a `NeedMore` carrying a
`ReplyParser`, which keeps the bytes seen so far and is called again with
the next chunk read from the socket.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from hiredis import ProtocolError, Reader, pack_command


def pack(parts: Sequence[Union[str, bytes, int]]) -> bytes:
    """Serialize a command and its arguments into wire bytes."""
    return pack_command(tuple(parts))


@dataclass(frozen=True)
class Complete:
    value: Any
    rest: bytes


@dataclass(frozen=True)
class NeedMore:
    continuation: ReplyParser


ParseResult = Union[Complete, NeedMore]


class ReplyParser:
    """incremental decoder for a single reply"""

    def __init__(self):
        self.buffer = b''

    def __call__(self, data: bytes) -> ParseResult:
        self.buffer += data
        end = reply_end(self.buffer)
        if end is None:
            return NeedMore(self)

        reader = Reader()
        reader.feed(self.buffer[:end])
        value = reader.gets()
        if value is False:
            raise ProtocolError(f"incomplete reply: {self.buffer[:end]!r}")
        return Complete(value, self.buffer[end:])


def parse(buffer: bytes) -> ParseResult:
    return ReplyParser()(buffer)


def reply_end(buffer: bytes, pos: int = 0) -> Optional[int]:
    """
    Return the offset just past the reply starting at `pos`, or None when
    `buffer` does not hold all of it yet.

    Raises:
        ProtocolError: when the bytes at `pos` do not start a valid reply
    """
    kind = buffer[pos:pos + 1]
    if not kind:
        return None
    if kind not in (b'+', b'-', b':', b'$', b'*'):
        raise ProtocolError(f"invalid reply type: {kind!r}")

    line_end = buffer.find(b'\r\n', pos)
    if line_end == -1:
        return None

    if kind in (b'+', b'-', b':'):
        return line_end + 2

    try:
        length = int(buffer[pos + 1:line_end])
    except ValueError:
        raise ProtocolError(f"invalid length line: {buffer[pos:line_end]!r}")

    if kind == b'$':
        if length < 0:
            return line_end + 2
        end = line_end + 2 + length + 2
        return end if len(buffer) >= end else None

    pos = line_end + 2
    for _ in range(max(length, 0)):
        pos = reply_end(buffer, pos)
        if pos is None:
            return None
    return pos
