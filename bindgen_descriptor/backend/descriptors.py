"""Type descriptor resolution.

Every type occurrence in a signature is tagged with one descriptor. Which of
the type's three descriptors applies depends on how it is passed (by value or
by reference) and which direction it travels:

    kind            location                        descriptor
    ----            --------                        ----------
    by value        any                             descriptor
    ref / mut ref   import argument, export return  to_ref_descriptor
    ref / mut ref   import return, export argument  from_ref_descriptor
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

from bindgen_descriptor import shared
from bindgen_descriptor.internals.errors import raise_internal_error
from bindgen_descriptor.semantics.ast import Type, TypeKind, TypeLocation


@dataclass(frozen=True)
class Descriptor:
    """A descriptor split into the four byte values it occupies in the literal."""
    x: Tuple[int, int, int, int]

    @classmethod
    def from_u32(cls, value: int) -> "Descriptor":
        if not 0 <= value < shared.MAX_DESCRIPTOR:
            raise_internal_error("CE0005", value=value, limit=shared.MAX_DESCRIPTOR)
        text = str(value).rjust(shared.DESCRIPTOR_WIDTH).encode("ascii")
        return cls(tuple(text))

    def __iter__(self) -> Iterator[int]:
        return iter(self.x)

    def __int__(self) -> int:
        return int(bytes(self.x))


# Capability names, used in diagnostics
WASM_BOUNDARY = "WasmBoundary"
TO_REF_WASM_BOUNDARY = "ToRefWasmBoundary"
FROM_REF_WASM_BOUNDARY = "FromRefWasmBoundary"


def capability_for(kind: TypeKind, loc: TypeLocation) -> str:
    """Select which descriptor capability a (kind, location) pair needs."""
    match kind:
        case TypeKind.BY_VALUE:
            return WASM_BOUNDARY
        case TypeKind.BY_REF | TypeKind.BY_MUT_REF:
            match loc:
                case TypeLocation.IMPORT_ARGUMENT | TypeLocation.EXPORT_RET:
                    return TO_REF_WASM_BOUNDARY
                case TypeLocation.IMPORT_RET | TypeLocation.EXPORT_ARGUMENT:
                    return FROM_REF_WASM_BOUNDARY
    raise_internal_error("CE0001", kind=kind, loc=loc)


def resolve(t: Type) -> Descriptor:
    """Resolve the descriptor for one type occurrence."""
    capability = capability_for(t.kind, t.loc)
    if capability == WASM_BOUNDARY:
        value = t.ty.descriptor
    elif capability == TO_REF_WASM_BOUNDARY:
        value = t.ty.to_ref_descriptor
    else:
        value = t.ty.from_ref_descriptor
    if value is None:
        raise_internal_error("CE0002", ty=t.ty, capability=capability)
    return Descriptor.from_u32(value)
