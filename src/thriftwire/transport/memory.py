from __future__ import annotations

from thriftwire.transport.base import Transport, TransportError, TransportErrorKind


class MemoryTransport(Transport):
    """Transport over an in-process byte buffer.

    Writes append to the buffer, reads consume from the front. The transport
    starts open; ``open`` on an open instance is a no-op.
    """

    def __init__(self, initial: bytes = b"") -> None:
        self._buf = bytearray(initial)
        self._pos = 0
        self._open = True

    def open(self) -> None:
        self._open = True

    def close(self) -> None:
        self._open = False

    def is_open(self) -> bool:
        return self._open

    def _check_open(self) -> None:
        if not self._open:
            raise TransportError("Memory transport is closed", TransportErrorKind.NOT_OPEN)

    def read(self, size: int) -> bytes:
        self._check_open()
        if size <= 0:
            return b""
        if self._pos >= len(self._buf):
            raise TransportError("No more data in memory buffer", TransportErrorKind.END_OF_FILE)
        chunk = bytes(self._buf[self._pos : self._pos + size])
        self._pos += len(chunk)
        return chunk

    def write(self, data: bytes) -> int:
        self._check_open()
        self._buf.extend(data)
        return len(data)

    def flush(self) -> None:
        self._check_open()

    def peek(self) -> bool:
        return self._open and self._pos < len(self._buf)

    def getvalue(self) -> bytes:
        """Unread contents, without consuming them."""
        return bytes(self._buf[self._pos :])

    def reset(self) -> None:
        self._buf.clear()
        self._pos = 0

    def __len__(self) -> int:
        return len(self._buf) - self._pos
