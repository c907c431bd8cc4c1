from __future__ import annotations

import abc

from thriftwire.protocol.ttype import MessageType, TType
from thriftwire.transport.base import Transport


class ProtocolError(Exception):
    """Base class for encoding/decoding failures."""


class ProtocolFormatError(ProtocolError):
    """A token does not match the grammar expected by the operation."""


class ProtocolRangeError(ProtocolError):
    """A number parsed but does not fit the requested type."""


class ProtocolTruncationError(ProtocolError):
    """The stream ended inside a token or an open container."""


class Protocol(abc.ABC):
    """Structured encoder/decoder bound to a transport.

    Every ``*_begin`` must be closed by the matching ``*_end`` at the same
    depth. Writers call ``flush`` after a complete message.
    """

    def __init__(self, trans: Transport) -> None:
        self.trans = trans

    def flush(self) -> None:
        self.trans.flush()

    # Writing

    @abc.abstractmethod
    def write_message_begin(self, name: str, mtype: MessageType, seqid: int) -> None: ...

    @abc.abstractmethod
    def write_message_end(self) -> None: ...

    @abc.abstractmethod
    def write_struct_begin(self, name: str) -> None: ...

    @abc.abstractmethod
    def write_struct_end(self) -> None: ...

    @abc.abstractmethod
    def write_field_begin(self, name: str, ttype: TType, fid: int) -> None: ...

    @abc.abstractmethod
    def write_field_end(self) -> None: ...

    @abc.abstractmethod
    def write_field_stop(self) -> None: ...

    @abc.abstractmethod
    def write_map_begin(self, ktype: TType, vtype: TType, size: int) -> None: ...

    @abc.abstractmethod
    def write_map_end(self) -> None: ...

    @abc.abstractmethod
    def write_list_begin(self, etype: TType, size: int) -> None: ...

    @abc.abstractmethod
    def write_list_end(self) -> None: ...

    @abc.abstractmethod
    def write_set_begin(self, etype: TType, size: int) -> None: ...

    @abc.abstractmethod
    def write_set_end(self) -> None: ...

    @abc.abstractmethod
    def write_bool(self, value: bool) -> None: ...

    @abc.abstractmethod
    def write_byte(self, value: int) -> None: ...

    @abc.abstractmethod
    def write_i16(self, value: int) -> None: ...

    @abc.abstractmethod
    def write_i32(self, value: int) -> None: ...

    @abc.abstractmethod
    def write_i64(self, value: int) -> None: ...

    @abc.abstractmethod
    def write_double(self, value: float) -> None: ...

    @abc.abstractmethod
    def write_string(self, value: str) -> None: ...

    @abc.abstractmethod
    def write_binary(self, value: bytes) -> None: ...

    # Reading

    @abc.abstractmethod
    def read_message_begin(self) -> tuple[str, MessageType, int]: ...

    @abc.abstractmethod
    def read_message_end(self) -> None: ...

    @abc.abstractmethod
    def read_struct_begin(self) -> str: ...

    @abc.abstractmethod
    def read_struct_end(self) -> None: ...

    @abc.abstractmethod
    def read_field_begin(self) -> tuple[str, TType, int]: ...

    @abc.abstractmethod
    def read_field_end(self) -> None: ...

    @abc.abstractmethod
    def read_map_begin(self) -> tuple[TType, TType, int]: ...

    @abc.abstractmethod
    def read_map_end(self) -> None: ...

    @abc.abstractmethod
    def read_list_begin(self) -> tuple[TType, int]: ...

    @abc.abstractmethod
    def read_list_end(self) -> None: ...

    @abc.abstractmethod
    def read_set_begin(self) -> tuple[TType, int]: ...

    @abc.abstractmethod
    def read_set_end(self) -> None: ...

    @abc.abstractmethod
    def read_bool(self) -> bool: ...

    @abc.abstractmethod
    def read_byte(self) -> int: ...

    @abc.abstractmethod
    def read_i16(self) -> int: ...

    @abc.abstractmethod
    def read_i32(self) -> int: ...

    @abc.abstractmethod
    def read_i64(self) -> int: ...

    @abc.abstractmethod
    def read_double(self) -> float: ...

    @abc.abstractmethod
    def read_string(self) -> str: ...

    @abc.abstractmethod
    def read_binary(self) -> bytes: ...


class ProtocolFactory(abc.ABC):
    @abc.abstractmethod
    def get_protocol(self, trans: Transport) -> Protocol: ...
