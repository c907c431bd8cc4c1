from __future__ import annotations

import abc
import enum


class TransportErrorKind(enum.IntEnum):
    UNKNOWN = 0
    NOT_OPEN = 1
    ALREADY_OPEN = 2
    TIMED_OUT = 3
    END_OF_FILE = 4


class TransportError(Exception):
    """Failure of the underlying byte channel."""

    def __init__(self, message: str, kind: TransportErrorKind = TransportErrorKind.UNKNOWN) -> None:
        super().__init__(message)
        self.kind = kind


class Transport(abc.ABC):
    """Abstract duplex byte channel.

    ``read`` and ``write`` may move fewer bytes than asked for; use
    ``read_all``/``write_all`` when an exact count is required.
    """

    @abc.abstractmethod
    def open(self) -> None:
        """Establish the channel."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the channel and any OS resource behind it."""

    @abc.abstractmethod
    def is_open(self) -> bool: ...

    @abc.abstractmethod
    def read(self, size: int) -> bytes:
        """Return at most ``size`` bytes.

        Returns ``b""`` only for ``size == 0``; end of stream raises
        ``TransportError`` with kind ``END_OF_FILE``.
        """

    @abc.abstractmethod
    def write(self, data: bytes) -> int:
        """Accept up to ``len(data)`` bytes and return how many were taken."""

    @abc.abstractmethod
    def flush(self) -> None: ...

    @abc.abstractmethod
    def peek(self) -> bool:
        """Whether at least one byte can be read without blocking."""

    def read_all(self, size: int) -> bytes:
        chunks: list[bytes] = []
        have = 0
        while have < size:
            try:
                chunk = self.read(size - have)
            except TransportError as e:
                if e.kind is TransportErrorKind.END_OF_FILE:
                    raise TransportError(
                        f"End of stream after {have} of {size} bytes",
                        TransportErrorKind.END_OF_FILE,
                    ) from e
                raise
            chunks.append(chunk)
            have += len(chunk)
        return b"".join(chunks)

    def write_all(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            n = self.write(view.tobytes())
            if n <= 0:
                raise TransportError(f"{type(self).__name__} accepted no bytes")
            view = view[n:]


class TransportFactory:
    """Builds the transport handed to a protocol; the base factory wraps nothing."""

    def get_transport(self, trans: Transport) -> Transport:
        return trans
