"""Boundary types and their descriptor capabilities.

A boundary type is anything that can appear in an exported or imported
signature. Each type advertises up to three descriptor constants:

    descriptor           passed or returned by value
    to_ref_descriptor    lent to the other side (import argument, export return)
    from_ref_descriptor  borrowed from the other side (import return, export argument)

A missing constant means the type cannot be used in that position.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from bindgen_descriptor import shared


@dataclass(frozen=True)
class BoundaryType:
    name: str
    descriptor: Optional[int] = None
    to_ref_descriptor: Optional[int] = None
    from_ref_descriptor: Optional[int] = None

    def __str__(self) -> str:
        return self.name


def custom_type(name: str) -> BoundaryType:
    """Exported class: by value it moves, by reference it is a borrowed pointer."""
    d = shared.name_to_descriptor(name)
    ref = d | shared.TYPE_CUSTOM_REF_FLAG
    return BoundaryType(name, descriptor=d, to_ref_descriptor=ref, from_ref_descriptor=ref)


def enum_type(name: str) -> BoundaryType:
    return BoundaryType(name, descriptor=shared.TYPE_ENUM)


def imported_type(name: str) -> BoundaryType:
    """A JS type brought in with an ``ImportType``; handled like ``JsValue``."""
    return BoundaryType(
        name,
        descriptor=shared.TYPE_JS_OWNED,
        to_ref_descriptor=shared.TYPE_JS_REF,
        from_ref_descriptor=shared.TYPE_JS_REF,
    )


def _numbers() -> Dict[str, BoundaryType]:
    names = ("u8", "i8", "u16", "i16", "u32", "i32", "isize", "usize", "f32", "f64")
    return {n: BoundaryType(n, descriptor=shared.TYPE_NUMBER) for n in names}


def _slices() -> Dict[str, BoundaryType]:
    table = {
        "u8": (shared.TYPE_SLICE_U8, shared.TYPE_VECTOR_U8),
        "i8": (shared.TYPE_SLICE_I8, shared.TYPE_VECTOR_I8),
        "u16": (shared.TYPE_SLICE_U16, shared.TYPE_VECTOR_U16),
        "i16": (shared.TYPE_SLICE_I16, shared.TYPE_VECTOR_I16),
        "u32": (shared.TYPE_SLICE_U32, shared.TYPE_VECTOR_U32),
        "i32": (shared.TYPE_SLICE_I32, shared.TYPE_VECTOR_I32),
        "f32": (shared.TYPE_SLICE_F32, shared.TYPE_VECTOR_F32),
        "f64": (shared.TYPE_SLICE_F64, shared.TYPE_VECTOR_F64),
    }
    out: Dict[str, BoundaryType] = {}
    for elem, (slice_d, vec_d) in table.items():
        # A slice is only ever seen through a reference.
        out[f"[{elem}]"] = BoundaryType(f"[{elem}]", to_ref_descriptor=slice_d,
                                        from_ref_descriptor=slice_d)
        out[f"Vec<{elem}>"] = BoundaryType(f"Vec<{elem}>", descriptor=vec_d)
    return out


BUILTINS: Dict[str, BoundaryType] = {
    **_numbers(),
    **_slices(),
    "bool": BoundaryType("bool", descriptor=shared.TYPE_BOOLEAN),
    "str": BoundaryType("str", to_ref_descriptor=shared.TYPE_BORROWED_STR,
                        from_ref_descriptor=shared.TYPE_BORROWED_STR),
    "String": BoundaryType("String", descriptor=shared.TYPE_STRING),
    "JsValue": BoundaryType("JsValue", descriptor=shared.TYPE_JS_OWNED,
                            to_ref_descriptor=shared.TYPE_JS_REF,
                            from_ref_descriptor=shared.TYPE_JS_REF),
}


def lookup(name: str, classes: Iterable[str] = (), enums: Iterable[str] = (),
           imported: Iterable[str] = ()) -> Optional[BoundaryType]:
    """Resolve a type name the way a signature would see it.

    Built-ins win over user-defined names; among user names, enums are
    checked before imported types and exported classes.
    """
    if name in BUILTINS:
        return BUILTINS[name]
    if name in set(enums):
        return enum_type(name)
    if name in set(imported):
        return imported_type(name)
    if name in set(classes):
        return custom_type(name)
    return None
