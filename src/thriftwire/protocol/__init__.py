"""Structured encoders/decoders over a transport."""

from thriftwire.protocol.base import (
    Protocol,
    ProtocolError,
    ProtocolFactory,
    ProtocolFormatError,
    ProtocolRangeError,
    ProtocolTruncationError,
)
from thriftwire.protocol.numeric import Numeric
from thriftwire.protocol.simple_json import SimpleJSONProtocol, SimpleJSONProtocolFactory
from thriftwire.protocol.ttype import MessageType, TType

__all__ = [
    "Protocol",
    "ProtocolError",
    "ProtocolFactory",
    "ProtocolFormatError",
    "ProtocolRangeError",
    "ProtocolTruncationError",
    "Numeric",
    "SimpleJSONProtocol",
    "SimpleJSONProtocolFactory",
    "MessageType",
    "TType",
]
