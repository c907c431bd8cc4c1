from __future__ import annotations

import enum
from dataclasses import dataclass

from thriftwire.protocol.base import ProtocolFormatError


class ContextKind(enum.Enum):
    ROOT = "root"
    ARRAY = "array"  # list, set, message
    OBJECT = "object"  # map, struct


@dataclass
class ContainerContext:
    kind: ContextKind
    first: bool = True
    expect_key: bool = True
    # The reader already consumed the comma before the next element.
    separated: bool = False

    @property
    def in_key(self) -> bool:
        return self.kind is ContextKind.OBJECT and self.expect_key

    def advance(self) -> None:
        """Record that one value (or map key) has been completed."""
        if self.kind is ContextKind.OBJECT:
            if self.expect_key:
                self.first = False
            self.expect_key = not self.expect_key
        else:
            self.first = False


class ContextStack:
    """Explicit nesting stack; the bottom entry is the root and never pops."""

    def __init__(self) -> None:
        self._stack: list[ContainerContext] = [ContainerContext(ContextKind.ROOT)]

    @property
    def top(self) -> ContainerContext:
        return self._stack[-1]

    @property
    def depth(self) -> int:
        return len(self._stack) - 1

    def push(self, kind: ContextKind) -> ContainerContext:
        ctx = ContainerContext(kind)
        self._stack.append(ctx)
        return ctx

    def pop(self, kind: ContextKind) -> ContainerContext:
        top = self._stack[-1]
        if top.kind is ContextKind.ROOT:
            raise ProtocolFormatError(f"Closing {kind.value} with no open container")
        if top.kind is not kind:
            raise ProtocolFormatError(
                f"Mismatched nesting: closing {kind.value} inside {top.kind.value}"
            )
        if kind is ContextKind.OBJECT and not top.expect_key:
            raise ProtocolFormatError("Object closed after a key without a value")
        return self._stack.pop()
