"""Byte-level builder for descriptor literals.

The literal is a JSON document, but it is never assembled as a string: each
character goes to the sink as one byte value and is counted. The count is
what the embedding step uses to size the ``[N x i8]`` constant, so it must
match the number of values appended exactly.

Strings are emitted without escaping. Every string that reaches the builder
is an identifier, a shim name, a version or a fixed key; anything that would
need escaping is rejected instead of being emitted.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, MutableSequence, Sequence, Tuple, TypeVar

from bindgen_descriptor.backend.descriptors import Descriptor
from bindgen_descriptor.internals.errors import raise_internal_error

T = TypeVar("T")

FieldWriter = Callable[["LiteralBuilder"], None]

_U32_MAX = 0xFFFFFFFF


def needs_escape(s: str) -> bool:
    return any(ch in '"\\' or ord(ch) < 0x20 for ch in s)


class LiteralBuilder:
    """Append-only sink of byte values with a running count."""

    def __init__(self, dst: MutableSequence[int]):
        self.dst = dst
        self.cnt = 0

    def finish(self) -> int:
        return self.cnt

    # --- primitives

    def byte(self, b: int) -> None:
        if not 0 <= b <= 0xFF:
            raise_internal_error("CE0007", value=b)
        self.dst.append(b)
        self.cnt += 1

    def append(self, s: str) -> None:
        for b in s.encode("utf-8"):
            self.byte(b)

    def str(self, s: str) -> None:
        if needs_escape(s):
            raise_internal_error("CE0003", value=s)
        self.append('"')
        self.append(s)
        self.append('"')

    def bool(self, v: bool) -> None:
        self.append("true" if v else "false")

    def u32(self, v: int) -> None:
        if not 0 <= v <= _U32_MAX:
            raise_internal_error("CE0004", value=v)
        self.append(str(v))

    def null(self) -> None:
        self.append("null")

    def as_char(self, descriptor: Descriptor) -> None:
        # Fixed width: four values whatever the descriptor is.
        b0, b1, b2, b3 = descriptor
        self.byte(b0)
        self.byte(b1)
        self.byte(b2)
        self.byte(b3)

    # --- combinators

    def fields(self, fields: Sequence[Tuple[str, FieldWriter]]) -> None:
        """Emit an object; keys keep the order they are given in."""
        self.append("{")
        for i, (name, cb) in enumerate(fields):
            if i > 0:
                self.append(",")
            self.str(name)
            self.append(":")
            cb(self)
        self.append("}")

    def list(self, items: Iterable[T], cb: Callable[[T, "LiteralBuilder"], None]) -> None:
        self.append("[")
        for i, element in enumerate(items):
            if i > 0:
                self.append(",")
            cb(element, self)
        self.append("]")

    def list_of(self, items: Iterable[Any]) -> None:
        """Emit an array of AST nodes, each through its own encoder."""
        from bindgen_descriptor.backend.encoders import literal

        self.list(items, literal)

    def optional(self, value: T | None, cb: Callable[[T, "LiteralBuilder"], None]) -> None:
        """Emit ``value`` through ``cb``, or ``null`` when it is absent."""
        if value is None:
            self.null()
        else:
            cb(value, self)

    def optional_str(self, value: str | None) -> None:
        self.optional(value, lambda s, a: a.str(s))
