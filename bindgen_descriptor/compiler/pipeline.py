"""Description-to-artifact orchestration."""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

from bindgen_descriptor.backend.encoders import EncodedLiteral, encode_program
from bindgen_descriptor.compiler.loader import load_program
from bindgen_descriptor.internals.report import Reporter


def default_output(src_path: Path) -> Path:
    return src_path.with_suffix(".ll")


def write_output(encoded: EncodedLiteral, out_path: Path, triple: Optional[str] = None,
                 dump_ll: bool = False) -> None:
    """Write ``encoded`` in the format chosen by the output suffix.

    ``.ll`` writes LLVM IR text and ``.bc`` bitcode, both holding the literal
    as a ``[N x i8]`` global. Anything else gets the raw bytes.
    """
    from bindgen_descriptor.backend.embed import build_module, emit_bitcode

    suffix = out_path.suffix
    if suffix in (".ll", ".bc") or dump_ll:
        module = build_module(encoded, name=out_path.stem, triple=triple)
        if dump_ll:
            print(str(module))
        if suffix == ".ll":
            out_path.write_text(str(module), encoding="utf-8")
            return
        if suffix == ".bc":
            out_path.write_bytes(emit_bitcode(module))
            return
    out_path.write_bytes(encoded.data)


def compile_description(src_path: Path, reporter: Reporter, args) -> int:
    """Load a description, encode it and write the artifact.

    Args:
        src_path: Program description (.toml).
        reporter: Reporter for diagnostics.
        args: Parsed command line arguments (out, dump_json, dump_ll, triple).

    Returns:
        Exit code (0=success, 1=warnings, 2=errors).
    """
    program = load_program(src_path, reporter)
    if program is None:
        return 2

    encoded = encode_program(program)

    if args.dump_json:
        from bindgen_descriptor.internals.decoder import decode_document
        print(json.dumps(decode_document(encoded.data), indent=2))

    out_path = Path(args.out) if args.out else default_output(src_path)
    write_output(encoded, out_path, triple=args.triple, dump_ll=args.dump_ll)
    print(f"Wrote {encoded.count} bytes of descriptor data to {out_path}", file=sys.stderr)

    return 1 if reporter.has_warnings else 0
