""" Newline framing for a TCP byte stream. A single read may carry several
    lines, and a single line may be split across several reads.
    :class:`LineBuffer` accumulates bytes and hands back complete lines,
    without their terminators, in the order they were received.
"""

from __future__ import annotations

from typing import List

from ...protocol import fields
from ..base import TransportProtocolError


default_limit = 1024 * 1024


class LineOverflow(TransportProtocolError):
    """ An unterminated line grew past the buffer limit and was discarded.

        :ivar lines: Complete lines that arrived in the same chunk, ahead of
            the oversized one; they are still valid and should be processed.
    """

    def __init__(self, message, lines):
        self.lines = lines
        TransportProtocolError.__init__(self, message)


class LineBuffer:
    """ Accumulate received bytes and split them on newlines. The *limit* is
        the largest number of bytes an unterminated line may occupy; a line
        that grows past the limit is discarded through its eventual newline,
        and :func:`feed` raises :class:`LineOverflow` when that happens.
    """

    def __init__(self, limit: int = default_limit):
        self.limit = int(limit)
        self.buffer = bytearray()
        self.discarding = False


    def __len__(self):
        return len(self.buffer)


    def clear(self) -> None:
        self.buffer = bytearray()
        self.discarding = False


    def feed(self, chunk: bytes) -> List[bytes]:
        """ Add *chunk* to the buffer and return every line it completes.
        """

        delimiter = fields.DELIMITER

        if self.discarding:
            index = chunk.find(delimiter)
            if index == -1:
                return list()

            chunk = chunk[index + 1:]
            self.discarding = False

        self.buffer.extend(chunk)
        lines = list()

        if delimiter in chunk:
            *lines, remainder = bytes(self.buffer).split(delimiter)
            self.buffer = bytearray(remainder)

        if len(self.buffer) > self.limit:
            size = len(self.buffer)
            self.buffer = bytearray()
            self.discarding = True

            error = 'unterminated line exceeds %d bytes (%d buffered), discarding'
            error = error % (self.limit, size)
            raise LineOverflow(error, lines)

        return lines


# end of class LineBuffer
