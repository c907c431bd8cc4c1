"""Transport and Simple JSON protocol core for cross-language RPC serialization."""

from thriftwire.protocol import (
    MessageType,
    Protocol,
    ProtocolError,
    ProtocolFormatError,
    ProtocolRangeError,
    ProtocolTruncationError,
    SimpleJSONProtocol,
    SimpleJSONProtocolFactory,
    TType,
)
from thriftwire.transport import (
    BufferedTransport,
    BufferedTransportFactory,
    MemoryTransport,
    Transport,
    TransportError,
    TransportErrorKind,
    TransportFactory,
)

__version__ = "0.1.0"

__all__ = [
    "MessageType",
    "Protocol",
    "ProtocolError",
    "ProtocolFormatError",
    "ProtocolRangeError",
    "ProtocolTruncationError",
    "SimpleJSONProtocol",
    "SimpleJSONProtocolFactory",
    "TType",
    "BufferedTransport",
    "BufferedTransportFactory",
    "MemoryTransport",
    "Transport",
    "TransportError",
    "TransportErrorKind",
    "TransportFactory",
]
