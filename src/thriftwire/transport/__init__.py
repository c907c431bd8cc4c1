"""Byte transports: the abstract contract, an in-memory transport and the buffered decorator."""

from thriftwire.transport.base import (
    Transport,
    TransportError,
    TransportErrorKind,
    TransportFactory,
)
from thriftwire.transport.buffered import BufferedTransport, BufferedTransportFactory
from thriftwire.transport.memory import MemoryTransport

__all__ = [
    "Transport",
    "TransportError",
    "TransportErrorKind",
    "TransportFactory",
    "BufferedTransport",
    "BufferedTransportFactory",
    "MemoryTransport",
]
