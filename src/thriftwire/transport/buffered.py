from __future__ import annotations

import logging

from thriftwire.transport.base import Transport, TransportError, TransportFactory

logger = logging.getLogger(__name__)


class Buffer:
    """Fixed-capacity byte arena with ``pos``/``limit`` cursors.

    Invariant: ``0 <= pos <= limit <= capacity``.
    """

    __slots__ = ("data", "pos", "limit")

    def __init__(self, capacity: int, limit: int = 0) -> None:
        self.data = bytearray(capacity)
        self.pos = 0
        self.limit = limit

    @property
    def capacity(self) -> int:
        return len(self.data)


class BufferedTransport(Transport):
    """Read-ahead and write-coalescing decorator over another transport.

    Short reads from the wrapped transport are passed through: a refill issues
    exactly one underlying ``read`` and a single call never returns more than
    that refill produced. A ``write`` larger than the free space flushes first
    and then buffers as much as fits, returning the accepted count. A capacity
    of 0 turns both directions into pass-through.
    """

    def __init__(self, trans: Transport, buffer_size: int = 4096) -> None:
        if buffer_size < 0:
            raise ValueError("buffer_size must be >= 0")
        self._trans = trans
        self._rbuf = Buffer(buffer_size)
        self._wbuf = Buffer(buffer_size, limit=buffer_size)

    @property
    def transport(self) -> Transport:
        return self._trans

    @property
    def buffer_size(self) -> int:
        return self._rbuf.capacity

    @property
    def pending(self) -> int:
        """Bytes written but not yet handed to the wrapped transport."""
        return self._wbuf.pos

    def open(self) -> None:
        self._trans.open()

    def close(self) -> None:
        self._trans.close()

    def is_open(self) -> bool:
        return self._trans.is_open()

    def read(self, size: int) -> bytes:
        if size <= 0:
            return b""
        rbuf = self._rbuf
        if rbuf.capacity == 0:
            return self._trans.read(size)
        if rbuf.pos == rbuf.limit:
            chunk = self._trans.read(rbuf.capacity)
            n = len(chunk)
            rbuf.data[:n] = chunk
            rbuf.pos = 0
            rbuf.limit = n
            logger.debug("Refilled read buffer with %d bytes", n)
        n = min(size, rbuf.limit - rbuf.pos)
        out = bytes(rbuf.data[rbuf.pos : rbuf.pos + n])
        rbuf.pos += n
        return out

    def write(self, data: bytes) -> int:
        wbuf = self._wbuf
        if wbuf.capacity == 0:
            return self._trans.write(data)
        if wbuf.pos + len(data) > wbuf.limit:
            self.flush()
        n = min(len(data), wbuf.limit - wbuf.pos)
        wbuf.data[wbuf.pos : wbuf.pos + n] = data[:n]
        wbuf.pos += n
        return n

    def flush(self) -> None:
        wbuf = self._wbuf
        start = 0
        try:
            while start < wbuf.pos:
                n = self._trans.write(bytes(wbuf.data[start : wbuf.pos]))
                if n <= 0:
                    raise TransportError(
                        f"{type(self._trans).__name__} accepted no bytes during flush"
                    )
                start += n
        except TransportError:
            # Keep only what the wrapped transport has not taken.
            remaining = wbuf.pos - start
            wbuf.data[:remaining] = wbuf.data[start : wbuf.pos]
            wbuf.pos = remaining
            logger.debug("Flush failed with %d of %d bytes written", start, start + remaining)
            raise
        if start:
            logger.debug("Flushed %d buffered bytes", start)
        wbuf.pos = 0
        self._trans.flush()

    def peek(self) -> bool:
        return self._rbuf.pos < self._rbuf.limit or self._trans.peek()


class BufferedTransportFactory(TransportFactory):
    def __init__(self, buffer_size: int = 4096) -> None:
        self.buffer_size = buffer_size

    def get_transport(self, trans: Transport) -> Transport:
        return BufferedTransport(trans, self.buffer_size)
