"""Host-side reader for descriptor literals.

Parses the bytes produced by ``backend.encoders`` back into plain Python
values with a Lark LALR parser. This is what a binding generator sees once it
has pulled the literal out of the compiled artifact.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from lark import Lark, Transformer, UnexpectedInput

from bindgen_descriptor import shared
from bindgen_descriptor.internals.errors import ERR
from bindgen_descriptor.internals.report import Span, span_of

GRAMMAR_PATH = Path(__file__).parent.parent / "literal.lark"


class DecodeError(Exception):
    """Raised when a literal cannot be read back."""

    def __init__(self, code: str, span: Optional[Span] = None, **kwargs):
        self.code = code
        self.kwargs = kwargs
        self.span = span
        msg = ERR[code]
        self.message = msg.text.format(**kwargs)
        super().__init__(f"{code}: {self.message}")


class _ToPython(Transformer):
    def string(self, items):
        (tok,) = items
        return str(tok)[1:-1]

    def number(self, items):
        (tok,) = items
        return int(tok)

    def true(self, _):
        return True

    def false(self, _):
        return False

    def null(self, _):
        return None

    def pair(self, items):
        key, value = items
        return str(key)[1:-1], value

    def object(self, items):
        return dict(items)

    def array(self, items):
        return list(items)


@lru_cache(maxsize=1)
def _parser() -> Lark:
    return Lark.open(
        str(GRAMMAR_PATH),
        parser="lalr",
        lexer="basic",
        maybe_placeholders=False,
    )


def decode_literal(data: bytes | bytearray) -> Any:
    """Decode a descriptor literal into dicts, lists, strings, ints, bools and None."""
    try:
        text = bytes(data).decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError("CE4201", reason=f"invalid UTF-8 at byte {e.start}") from None

    try:
        tree = _parser().parse(text)
    except UnexpectedInput as e:
        span = span_of(e)
        where = f" at {span}" if span else ""
        raise DecodeError("CE4201", span, reason=f"unexpected input{where}") from None

    return _ToPython().transform(tree)


def decode_document(data: bytes | bytearray) -> dict:
    """Decode a full program literal and check its schema version."""
    doc = decode_literal(data)
    if not isinstance(doc, dict):
        raise DecodeError("CE4201", reason="top-level value is not an object")
    for key in ("exports", "imports", "enums", "custom_type_names", "version", "schema_version"):
        if key not in doc:
            raise DecodeError("CE4201", reason=f"missing top-level key '{key}'")
    if doc["schema_version"] != shared.SCHEMA_VERSION:
        raise DecodeError("CE4202", version=doc["schema_version"],
                          supported=shared.SCHEMA_VERSION)
    return doc
