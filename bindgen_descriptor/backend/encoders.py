"""Encoders from AST nodes to descriptor literal objects.

Each ``encode_*`` function writes one node as a JSON object through a
``LiteralBuilder``. Field order is part of the format read by the binding
generator and must not change without bumping ``shared.SCHEMA_VERSION``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, MutableSequence, Optional

from bindgen_descriptor import shared
from bindgen_descriptor.backend import descriptors
from bindgen_descriptor.backend.literal import LiteralBuilder
from bindgen_descriptor.internals.errors import raise_internal_error
from bindgen_descriptor.internals.version import version
from bindgen_descriptor.semantics import ast


@dataclass(frozen=True)
class EncodedLiteral:
    data: bytes
    count: int


def encode_program(program: ast.Program, dst: Optional[MutableSequence[int]] = None) -> EncodedLiteral:
    """Encode ``program`` and return the bytes and their count.

    Encoding happens in a private buffer. ``dst``, when given, only receives
    the bytes once the whole program encoded successfully.
    """
    buf = bytearray()
    a = LiteralBuilder(buf)
    encode_program_into(program, a)
    count = a.finish()
    if dst is not None:
        dst.extend(buf)
    return EncodedLiteral(bytes(buf), count)


def encode_program_into(program: ast.Program, a: LiteralBuilder) -> None:
    def custom_type_names(a: LiteralBuilder) -> None:
        def entry(name: str, a: LiteralBuilder) -> None:
            val = shared.name_to_descriptor(name)
            a.fields([
                ("descriptor", lambda a: a.u32(val)),
                ("name", lambda a: a.str(name)),
            ])
        a.list(program.custom_type_names(), entry)

    a.fields([
        ("exports", lambda a: a.list_of(program.exports)),
        ("imports", lambda a: a.list_of(program.imports)),
        ("enums", lambda a: a.list_of(program.enums)),
        ("custom_type_names", custom_type_names),
        ("version", lambda a: a.str(version())),
        ("schema_version", lambda a: a.str(shared.SCHEMA_VERSION)),
    ])


def encode_function(f: ast.Function, a: LiteralBuilder) -> None:
    a.fields([
        ("name", lambda a: a.str(f.name)),
        ("arguments", lambda a: a.list_of(f.arguments)),
        ("ret", lambda a: a.optional(f.ret, encode_type)),
    ])


def encode_type(t: ast.Type, a: LiteralBuilder) -> None:
    a.as_char(descriptors.resolve(t))


def encode_export(e: ast.Export, a: LiteralBuilder) -> None:
    a.fields([
        ("class", lambda a: a.optional_str(e.class_name)),
        ("method", lambda a: a.bool(e.method)),
        ("function", lambda a: encode_function(e.function, a)),
    ])


def encode_import(i: ast.Import, a: LiteralBuilder) -> None:
    a.fields([
        ("module", lambda a: a.optional_str(i.module)),
        ("js_namespace", lambda a: a.optional_str(i.js_namespace)),
        ("kind", lambda a: encode_import_kind(i.kind, a)),
    ])


def encode_import_kind(kind: ast.ImportKind, a: LiteralBuilder) -> None:
    match kind:
        case ast.ImportFunction():
            encode_import_function(kind, a)
        case ast.ImportStatic():
            encode_import_static(kind, a)
        case ast.ImportType():
            encode_import_type(kind, a)
        case _:
            raise_internal_error("CE0008", what="import kind", node=type(kind).__name__)


def encode_import_function(f: ast.ImportFunction, a: LiteralBuilder) -> None:
    method = False
    js_new = False
    class_name = None
    match f.kind:
        case ast.Method(class_name=cls):
            method = True
            class_name = cls
        case ast.JsConstructor(class_name=cls):
            js_new = True
            class_name = cls
        case ast.Normal():
            pass
        case _:
            raise_internal_error("CE0008", what="import function kind", node=type(f.kind).__name__)

    getter = f.getter_property()
    setter = f.setter_property()

    a.fields([
        ("kind", lambda a: a.str("function")),
        ("catch", lambda a: a.bool(f.opts.catch)),
        ("method", lambda a: a.bool(method)),
        ("js_new", lambda a: a.bool(js_new)),
        ("structural", lambda a: a.bool(f.opts.structural)),
        ("shim", lambda a: a.str(f.shim)),
        ("getter", lambda a: a.optional_str(getter)),
        ("setter", lambda a: a.optional_str(setter)),
        ("function", lambda a: encode_function(f.function, a)),
        ("class", lambda a: a.optional_str(class_name)),
    ])


def encode_enum(e: ast.Enum, a: LiteralBuilder) -> None:
    a.fields([
        ("name", lambda a: a.str(e.name)),
        ("variants", lambda a: a.list_of(e.variants)),
    ])


def encode_variant(v: ast.Variant, a: LiteralBuilder) -> None:
    a.fields([
        ("name", lambda a: a.str(v.name)),
        ("value", lambda a: a.u32(v.value)),
    ])


def encode_import_static(s: ast.ImportStatic, a: LiteralBuilder) -> None:
    a.fields([
        ("kind", lambda a: a.str("static")),
        ("name", lambda a: a.str(s.js_name)),
        ("shim", lambda a: a.str(s.shim)),
    ])


def encode_import_type(t: ast.ImportType, a: LiteralBuilder) -> None:
    a.fields([("kind", lambda a: a.str("type"))])


def literal(node: Any, a: LiteralBuilder) -> None:
    """Encode any node that can appear in a list."""
    match node:
        case ast.Export():
            encode_export(node, a)
        case ast.Import():
            encode_import(node, a)
        case ast.Enum():
            encode_enum(node, a)
        case ast.Variant():
            encode_variant(node, a)
        case ast.Type():
            encode_type(node, a)
        case _:
            raise_internal_error("CE0008", what="list element", node=type(node).__name__)
