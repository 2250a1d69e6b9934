"""Constants shared between the descriptor encoder and the host-side reader.

Descriptor values are small integers that fit in four ASCII digits. They are
emitted right-aligned and space padded, so every descriptor occupies exactly
four bytes of the literal and still reads back as a JSON number.
"""
from __future__ import annotations

# Bumped whenever the document layout changes in a way readers must notice.
SCHEMA_VERSION = "1"

# Section the embedded literal is placed in.
CUSTOM_SECTION_NAME = "__wasm_bindgen_unstable"

DESCRIPTOR_WIDTH = 4
MAX_DESCRIPTOR = 10_000

# Built-in descriptors
TYPE_NUMBER = 1
TYPE_BORROWED_STR = 2
TYPE_STRING = 3
TYPE_BOOLEAN = 4
TYPE_JS_OWNED = 5
TYPE_JS_REF = 6
TYPE_ENUM = 7

TYPE_SLICE_U8 = 10
TYPE_VECTOR_U8 = 11
TYPE_SLICE_I8 = 12
TYPE_VECTOR_I8 = 13
TYPE_SLICE_U16 = 14
TYPE_VECTOR_U16 = 15
TYPE_SLICE_I16 = 16
TYPE_VECTOR_I16 = 17
TYPE_SLICE_U32 = 18
TYPE_VECTOR_U32 = 19
TYPE_SLICE_I32 = 20
TYPE_VECTOR_I32 = 21
TYPE_SLICE_F32 = 22
TYPE_VECTOR_F32 = 23
TYPE_SLICE_F64 = 24
TYPE_VECTOR_F64 = 25

# Exported classes hash into [TYPE_CUSTOM_START, MAX_DESCRIPTOR). The low bit
# is reserved to mark a borrowed occurrence of the class.
TYPE_CUSTOM_START = 40
TYPE_CUSTOM_REF_FLAG = 1

# FNV-1a (32-bit)
FNV1A_OFFSET_BASIS = 2166136261
FNV1A_PRIME = 16777619


def _fnv1a(data: bytes) -> int:
    h = FNV1A_OFFSET_BASIS
    for b in data:
        h ^= b
        h = (h * FNV1A_PRIME) & 0xFFFFFFFF
    return h


def name_to_descriptor(name: str) -> int:
    """Map a user-defined type name to its stable descriptor.

    The result is always even (the reference flag bit is clear) and lies in
    ``[TYPE_CUSTOM_START, MAX_DESCRIPTOR)``.
    """
    h = _fnv1a(name.encode("utf-8"))
    value = (h % (MAX_DESCRIPTOR - TYPE_CUSTOM_START)) + TYPE_CUSTOM_START
    return value & ~TYPE_CUSTOM_REF_FLAG
