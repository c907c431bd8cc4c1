from __future__ import annotations

import base64
import binascii
import json
import logging
import re
import string
from typing import Any

from thriftwire.protocol import numeric
from thriftwire.protocol.base import (
    Protocol,
    ProtocolError,
    ProtocolFactory,
    ProtocolFormatError,
    ProtocolRangeError,
    ProtocolTruncationError,
)
from thriftwire.protocol.context import ContextKind, ContextStack
from thriftwire.protocol.ttype import INT_RANGES, MessageType, TType
from thriftwire.transport.base import Transport, TransportError, TransportErrorKind

logger = logging.getLogger(__name__)

_LBRACE, _RBRACE, _LBRACKET, _RBRACKET, _COMMA, _COLON, _QUOTE, _BACKSLASH = b'{}[],:"\\'
_WHITESPACE = frozenset(b" \t\n\r")
_LITERAL_CHARS = frozenset((string.ascii_letters + string.digits + "+-.").encode("ascii"))

_INT_RE = re.compile(r"-?(?:0|[1-9][0-9]*)")
_NUMBER_PREFIX_RE = re.compile(r"-?(?:0|[1-9][0-9]*)?(?:\.[0-9]*)?(?:[eE][+-]?[0-9]*)?")

_CLOSERS = {ContextKind.ARRAY: _RBRACKET, ContextKind.OBJECT: _RBRACE}
_NO_KEY = object()


def _could_continue_number(text: str) -> bool:
    """Whether ``text`` is an unfinished numeric literal or sentinel."""
    if any(s.startswith(text) for s in numeric.SENTINELS):
        return True
    return _NUMBER_PREFIX_RE.fullmatch(text) is not None and not numeric.is_number_literal(text)


def _format_error(message: str) -> ProtocolFormatError:
    logger.debug("Simple JSON format error: %s", message)
    return ProtocolFormatError(message)


class _LookaheadReader:
    """One byte of lookahead over a transport; end of stream peeks as ``None``."""

    def __init__(self, trans: Transport) -> None:
        self._trans = trans
        self._next: int | None = None

    def peek(self) -> int | None:
        if self._next is None:
            try:
                chunk = self._trans.read(1)
            except TransportError as e:
                if e.kind is TransportErrorKind.END_OF_FILE:
                    return None
                raise
            if not chunk:
                return None
            self._next = chunk[0]
        return self._next

    def next(self, what: str) -> int:
        c = self.peek()
        if c is None:
            raise ProtocolTruncationError(f"End of stream while reading {what}")
        self._next = None
        return c

    def skip_whitespace(self) -> int | None:
        c = self.peek()
        while c is not None and c in _WHITESPACE:
            self._next = None
            c = self.peek()
        return c

    def expect(self, char: int, what: str) -> None:
        c = self.skip_whitespace()
        if c is None:
            raise ProtocolTruncationError(f"End of stream while expecting {chr(char)!r} in {what}")
        if c != char:
            raise _format_error(f"Expected {chr(char)!r} in {what}, found {chr(c)!r}")
        self._next = None


class SimpleJSONProtocol(Protocol):
    """Human-readable JSON encoding.

    Lists, sets and messages are JSON arrays; maps and structs are JSON
    objects. Object keys are always quoted, so scalar keys such as the integer
    ``0`` appear as ``"0"``. Non-finite doubles are the quoted strings
    ``"Infinity"``, ``"-Infinity"`` and ``"NaN"``; binaries are quoted base64.
    Consecutive top-level values are separated by a single space.

    Element types and sizes are not carried on the wire: readers get
    ``TType.VOID`` and ``-1`` back from the ``*_begin`` calls and iterate with
    ``has_next``.
    """

    def __init__(self, trans: Transport) -> None:
        super().__init__(trans)
        self._wctx = ContextStack()
        self._rctx = ContextStack()
        self._reader = _LookaheadReader(trans)

    # Writing

    def _out(self, text: str) -> None:
        self.trans.write_all(text.encode("utf-8"))

    def _separator(self, *, container: bool = False) -> str:
        ctx = self._wctx.top
        if ctx.kind is ContextKind.ARRAY:
            return "" if ctx.first else ","
        if ctx.kind is ContextKind.OBJECT:
            if not ctx.expect_key:
                return ":"
            if container:
                raise _format_error("Containers cannot be used as object keys")
            return "" if ctx.first else ","
        # Top-level values are space separated so scalars stay distinct.
        return "" if ctx.first else " "

    def _write_scalar(self, text: str, *, quote_key: bool = True) -> None:
        ctx = self._wctx.top
        if quote_key and ctx.in_key:
            text = f'"{text}"'
        self._out(self._separator() + text)
        ctx.advance()

    def _write_open(self, kind: ContextKind, char: str) -> None:
        self._out(self._separator(container=True) + char)
        self._wctx.push(kind)

    def _write_close(self, kind: ContextKind, char: str) -> None:
        self._wctx.pop(kind)
        self._out(char)
        self._wctx.top.advance()

    @staticmethod
    def _check_size(size: int) -> None:
        if size < 0:
            raise _format_error(f"Negative container size: {size}")

    def _write_int(self, value: int, ttype: TType) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise _format_error(f"{ttype.name} value must be an int, got {type(value).__name__}")
        lo, hi = INT_RANGES[ttype]
        if not lo <= value <= hi:
            raise ProtocolRangeError(f"{ttype.name} value out of range: {value}")
        self._write_scalar(str(int(value)))

    def write_message_begin(self, name: str, mtype: MessageType, seqid: int) -> None:
        self._write_open(ContextKind.ARRAY, "[")
        self.write_string(name)
        self.write_byte(int(mtype))
        self.write_i32(seqid)

    def write_message_end(self) -> None:
        self._write_close(ContextKind.ARRAY, "]")

    def write_struct_begin(self, name: str) -> None:
        self._write_open(ContextKind.OBJECT, "{")

    def write_struct_end(self) -> None:
        self._write_close(ContextKind.OBJECT, "}")

    def write_field_begin(self, name: str, ttype: TType, fid: int) -> None:
        if not self._wctx.top.in_key:
            raise _format_error(f"Field {name!r} written outside a struct")
        self.write_string(name)

    def write_field_end(self) -> None:
        ctx = self._wctx.top
        if ctx.kind is not ContextKind.OBJECT or not ctx.expect_key:
            raise _format_error("Field ended before its value was written")

    def write_field_stop(self) -> None:
        pass

    def write_map_begin(self, ktype: TType, vtype: TType, size: int) -> None:
        self._check_size(size)
        self._write_open(ContextKind.OBJECT, "{")

    def write_map_end(self) -> None:
        self._write_close(ContextKind.OBJECT, "}")

    def write_list_begin(self, etype: TType, size: int) -> None:
        self._check_size(size)
        self._write_open(ContextKind.ARRAY, "[")

    def write_list_end(self) -> None:
        self._write_close(ContextKind.ARRAY, "]")

    def write_set_begin(self, etype: TType, size: int) -> None:
        self._check_size(size)
        self._write_open(ContextKind.ARRAY, "[")

    def write_set_end(self) -> None:
        self._write_close(ContextKind.ARRAY, "]")

    def write_bool(self, value: bool) -> None:
        self._write_scalar("true" if value else "false")

    def write_byte(self, value: int) -> None:
        self._write_int(value, TType.BYTE)

    def write_i16(self, value: int) -> None:
        self._write_int(value, TType.I16)

    def write_i32(self, value: int) -> None:
        self._write_int(value, TType.I32)

    def write_i64(self, value: int) -> None:
        self._write_int(value, TType.I64)

    def write_double(self, value: float) -> None:
        text = numeric.to_json(value)
        self._write_scalar(text, quote_key=not text.startswith('"'))

    def write_string(self, value: str) -> None:
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise _format_error(f"String is not encodable as UTF-8: {e}") from e
        self._write_scalar(json.dumps(value, ensure_ascii=False), quote_key=False)

    def write_binary(self, value: bytes) -> None:
        encoded = base64.b64encode(bytes(value)).decode("ascii")
        self._write_scalar(f'"{encoded}"', quote_key=False)

    # Reading

    def _read_separator(self, *, container: bool = False) -> bool:
        """Consume the separator owed before the next value; return whether it is a key."""
        ctx = self._rctx.top
        in_key = ctx.in_key
        if ctx.kind is ContextKind.ARRAY:
            if not ctx.first and not ctx.separated:
                self._reader.expect(_COMMA, "array")
        elif ctx.kind is ContextKind.OBJECT:
            if not ctx.expect_key:
                self._reader.expect(_COLON, "object")
            else:
                if not ctx.first and not ctx.separated:
                    self._reader.expect(_COMMA, "object")
                if container:
                    c = self._reader.skip_whitespace()
                    if c in (_LBRACE, _LBRACKET):
                        raise _format_error("Containers cannot be used as object keys")
        ctx.separated = False
        return in_key

    def _read_quoted_raw(self, what: str) -> bytes:
        self._reader.expect(_QUOTE, what)
        raw = bytearray()
        while True:
            c = self._reader.next(what)
            if c == _QUOTE:
                return bytes(raw)
            raw.append(c)
            if c == _BACKSLASH:
                raw.append(self._reader.next(what))

    def _read_string_token(self, what: str) -> str:
        raw = self._read_quoted_raw(what)
        try:
            return json.loads(b'"' + raw + b'"')
        except ValueError as e:
            raise _format_error(f"Malformed string literal in {what}: {e}") from e

    def _read_literal(self, what: str) -> str:
        c = self._reader.skip_whitespace()
        if c is None:
            raise ProtocolTruncationError(f"End of stream while reading {what}")
        chars = bytearray()
        while c is not None and c in _LITERAL_CHARS:
            chars.append(self._reader.next(what))
            c = self._reader.peek()
        if not chars:
            raise _format_error(f"Unexpected {chr(c)!r} while reading {what}")
        return chars.decode("ascii")

    def _read_token(self, what: str) -> tuple[str, bool, bool]:
        """Return ``(text, quoted, in_key)`` for the next scalar."""
        in_key = self._read_separator()
        if self._reader.skip_whitespace() == _QUOTE:
            return self._read_string_token(what), True, in_key
        return self._read_literal(what), False, in_key

    def _literal_error(self, text: str, quoted: bool, what: str, unfinished: bool) -> ProtocolError:
        if not quoted and unfinished and self._reader.peek() is None:
            return ProtocolTruncationError(f"End of stream inside {what} literal {text!r}")
        return _format_error(f"Invalid {what} literal {text!r}")

    @staticmethod
    def _check_quoting(quoted: bool, in_key: bool, what: str) -> None:
        if in_key and not quoted:
            raise _format_error(f"Object key for {what} must be quoted")
        if quoted and not in_key:
            raise _format_error(f"Unexpected quoted {what} value")

    def _read_int(self, ttype: TType) -> int:
        what = ttype.name.lower()
        text, quoted, in_key = self._read_token(what)
        self._check_quoting(quoted, in_key, what)
        if _INT_RE.fullmatch(text) is None:
            raise self._literal_error(text, quoted, what, _could_continue_number(text))
        value = int(text)
        lo, hi = INT_RANGES[ttype]
        if not lo <= value <= hi:
            raise ProtocolRangeError(f"{ttype.name} value out of range: {text}")
        self._rctx.top.advance()
        return value

    def _read_open(self, kind: ContextKind, char: int, what: str) -> None:
        self._read_separator(container=True)
        self._reader.expect(char, what)
        self._rctx.push(kind)

    def _read_close(self, kind: ContextKind, char: int, what: str) -> None:
        if not self._rctx.top.separated and self._reader.skip_whitespace() == _COMMA:
            self._reader.next(what)
        self._rctx.pop(kind)
        self._reader.expect(char, what)
        self._rctx.top.advance()

    def has_next(self) -> bool:
        """Whether another element precedes the innermost container's closing character.

        At the top level this reports whether the stream holds another value.
        A comma between elements is consumed here, so a single trailing comma
        before the closing character ends the iteration.
        """
        ctx = self._rctx.top
        c = self._reader.skip_whitespace()
        if ctx.kind is ContextKind.ROOT:
            return c is not None
        if c == _COMMA and not ctx.first and not ctx.separated and (
            ctx.kind is ContextKind.ARRAY or ctx.expect_key
        ):
            self._reader.next(ctx.kind.value)
            ctx.separated = True
            c = self._reader.skip_whitespace()
        if c is None:
            raise ProtocolTruncationError(f"End of stream inside open {ctx.kind.value}")
        return c != _CLOSERS[ctx.kind]

    def read_message_begin(self) -> tuple[str, MessageType, int]:
        self._read_open(ContextKind.ARRAY, _LBRACKET, "message")
        name = self.read_string()
        raw_type = self.read_byte()
        try:
            mtype = MessageType(raw_type)
        except ValueError as e:
            raise _format_error(f"Unknown message type: {raw_type}") from e
        seqid = self.read_i32()
        return name, mtype, seqid

    def read_message_end(self) -> None:
        self._read_close(ContextKind.ARRAY, _RBRACKET, "message")

    def read_struct_begin(self) -> str:
        self._read_open(ContextKind.OBJECT, _LBRACE, "struct")
        return ""

    def read_struct_end(self) -> None:
        self._read_close(ContextKind.OBJECT, _RBRACE, "struct")

    def read_field_begin(self) -> tuple[str, TType, int]:
        if not self._rctx.top.in_key:
            raise _format_error("Field read outside a struct")
        if not self.has_next():
            return "", TType.STOP, 0
        return self.read_string(), TType.VOID, -1

    def read_field_end(self) -> None:
        ctx = self._rctx.top
        if ctx.kind is not ContextKind.OBJECT or not ctx.expect_key:
            raise _format_error("Field ended before its value was read")

    def read_map_begin(self) -> tuple[TType, TType, int]:
        self._read_open(ContextKind.OBJECT, _LBRACE, "map")
        return TType.VOID, TType.VOID, -1

    def read_map_end(self) -> None:
        self._read_close(ContextKind.OBJECT, _RBRACE, "map")

    def read_list_begin(self) -> tuple[TType, int]:
        self._read_open(ContextKind.ARRAY, _LBRACKET, "list")
        return TType.VOID, -1

    def read_list_end(self) -> None:
        self._read_close(ContextKind.ARRAY, _RBRACKET, "list")

    def read_set_begin(self) -> tuple[TType, int]:
        self._read_open(ContextKind.ARRAY, _LBRACKET, "set")
        return TType.VOID, -1

    def read_set_end(self) -> None:
        self._read_close(ContextKind.ARRAY, _RBRACKET, "set")

    def read_bool(self) -> bool:
        text, quoted, in_key = self._read_token("bool")
        self._check_quoting(quoted, in_key, "bool")
        if text == "true":
            value = True
        elif text == "false":
            value = False
        else:
            unfinished = "true".startswith(text) or "false".startswith(text)
            raise self._literal_error(text, quoted, "bool", unfinished)
        self._rctx.top.advance()
        return value

    def read_byte(self) -> int:
        return self._read_int(TType.BYTE)

    def read_i16(self) -> int:
        return self._read_int(TType.I16)

    def read_i32(self) -> int:
        return self._read_int(TType.I32)

    def read_i64(self) -> int:
        return self._read_int(TType.I64)

    def read_double(self) -> float:
        text, quoted, in_key = self._read_token("double")
        if in_key and not quoted:
            raise _format_error("Object key for double must be quoted")
        try:
            value = numeric.parse_double(
                text, quoted=quoted, allow_bare_sentinel=True, allow_quoted_number=in_key
            )
        except ProtocolFormatError as e:
            raise self._literal_error(text, quoted, "double", _could_continue_number(text)) from e
        self._rctx.top.advance()
        return value

    def read_string(self) -> str:
        self._read_separator()
        value = self._read_string_token("string")
        self._rctx.top.advance()
        return value

    def read_binary(self) -> bytes:
        self._read_separator()
        text = self._read_string_token("binary")
        try:
            value = base64.b64decode(text.encode("ascii"), validate=True)
        except (binascii.Error, ValueError) as e:
            raise _format_error(f"Malformed base64 binary: {e}") from e
        self._rctx.top.advance()
        return value

    def _read_scalar_value(self, in_key: bool) -> Any:
        if self._reader.skip_whitespace() == _QUOTE:
            value: Any = self._read_string_token("value")
        elif in_key:
            raise _format_error("Object keys must be quoted strings")
        else:
            text = self._read_literal("value")
            if text == "true":
                value = True
            elif text == "false":
                value = False
            elif text == "null":
                value = None
            elif _INT_RE.fullmatch(text):
                value = int(text)
            elif numeric.is_number_literal(text) or text in numeric.SENTINELS:
                value = numeric.parse_double(text, allow_bare_sentinel=True)
            else:
                unfinished = _could_continue_number(text) or any(
                    w.startswith(text) for w in ("true", "false", "null")
                )
                raise self._literal_error(text, False, "value", unfinished)
        self._rctx.top.advance()
        return value

    def read_value(self) -> Any:
        """Read one JSON value of any shape into plain Python objects.

        Objects become dicts with string keys, arrays become lists, quoted
        sentinels stay strings. Nesting is tracked on an explicit stack.
        """
        pending: list[list[Any]] = []
        while True:
            if pending and not self.has_next():
                obj = pending.pop()[0]
                if isinstance(obj, dict):
                    self._read_close(ContextKind.OBJECT, _RBRACE, "object")
                else:
                    self._read_close(ContextKind.ARRAY, _RBRACKET, "array")
                value = obj
            else:
                in_key = self._read_separator(container=True)
                c = self._reader.skip_whitespace()
                if c == _LBRACE or c == _LBRACKET:
                    self._reader.next("value")
                    if c == _LBRACE:
                        self._rctx.push(ContextKind.OBJECT)
                        pending.append([{}, _NO_KEY])
                    else:
                        self._rctx.push(ContextKind.ARRAY)
                        pending.append([[], _NO_KEY])
                    continue
                value = self._read_scalar_value(in_key)

            if not pending:
                return value
            entry = pending[-1]
            if isinstance(entry[0], list):
                entry[0].append(value)
            elif entry[1] is _NO_KEY:
                entry[1] = value
            else:
                entry[0][entry[1]] = value
                entry[1] = _NO_KEY

    def skip(self) -> None:
        self.read_value()


class SimpleJSONProtocolFactory(ProtocolFactory):
    def get_protocol(self, trans: Transport) -> SimpleJSONProtocol:
        return SimpleJSONProtocol(trans)
