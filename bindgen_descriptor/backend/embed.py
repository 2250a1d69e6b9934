"""Embedding descriptor literals into LLVM modules.

The literal becomes a constant ``[N x i8]`` global in the custom section the
binding generator scans. ``N`` is the builder's count, so the global is sized
without measuring any string.
"""
from __future__ import annotations

import hashlib

from llvmlite import ir
from llvmlite import binding as llvm

from bindgen_descriptor import shared
from bindgen_descriptor.backend.encoders import EncodedLiteral

GLOBAL_PREFIX = "__wasm_bindgen_generated_"


def literal_fingerprint(encoded: EncodedLiteral) -> str:
    """Short content hash naming the global, so identical literals link together."""
    return hashlib.sha256(encoded.data).hexdigest()[:16]


def embed_literal(module: ir.Module, encoded: EncodedLiteral,
                  section: str = shared.CUSTOM_SECTION_NAME) -> ir.GlobalVariable:
    """Add ``encoded`` to ``module`` as a constant byte array global.

    Args:
        module: Module receiving the global.
        encoded: Output of ``encode_program``.
        section: Object file section for the global.

    Returns:
        The global variable holding the literal.
    """
    name = GLOBAL_PREFIX + literal_fingerprint(encoded)

    # Already embedded (same bytes encoded twice into one module)
    existing = module.globals.get(name)
    if existing is not None:
        return existing

    i8 = ir.IntType(8)
    const_type = ir.ArrayType(i8, encoded.count)
    const_value = ir.Constant(const_type, bytearray(encoded.data))

    global_var = ir.GlobalVariable(module, const_type, name=name)
    global_var.initializer = const_value
    global_var.global_constant = True
    global_var.section = section
    return global_var


def build_module(encoded: EncodedLiteral, name: str = "descriptor",
                 triple: str | None = None) -> ir.Module:
    module = ir.Module(name=name)
    if triple:
        module.triple = triple
    embed_literal(module, encoded)
    return module


def emit_bitcode(module: ir.Module) -> bytes:
    """Verify ``module`` and return its LLVM bitcode."""
    llmod = llvm.parse_assembly(str(module))
    llmod.verify()
    return llmod.as_bitcode()
