"""CLI entry point and argument parsing."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from bindgen_descriptor.internals.version import print_banner


def _type_str(descriptor) -> str:
    return "?" if descriptor is None else str(descriptor)


def _signature(f: dict) -> str:
    args = ", ".join(_type_str(d) for d in f["arguments"])
    ret = f" -> {f['ret']}" if f["ret"] is not None else ""
    return f"{f['name']}({args}){ret}"


def _summary(doc: dict) -> list[str]:
    # Header
    out = [f"Encoder: {doc['version']}", f"Schema: {doc['schema_version']}", ""]

    exports = doc["exports"]
    if exports:
        out.append(f"Exports ({len(exports)}):")
        for e in exports:
            owner = f"{e['class']}." if e["class"] is not None else ""
            marker = " [method]" if e["method"] else ""
            out.append(f"  {owner}{_signature(e['function'])}{marker}")
        out.append("")

    imports = doc["imports"]
    if imports:
        out.append(f"Imports ({len(imports)}):")
        for i in imports:
            kind = i["kind"]
            origin = i["module"] or "<global>"
            if i["js_namespace"] is not None:
                origin = f"{origin} ({i['js_namespace']})"
            if kind["kind"] == "function":
                owner = f"{kind['class']}." if kind["class"] is not None else ""
                flags = [name for name in ("catch", "method", "js_new", "structural") if kind[name]]
                if kind["getter"] is not None:
                    flags.append(f"getter={kind['getter']}")
                if kind["setter"] is not None:
                    flags.append(f"setter={kind['setter']}")
                extra = f" [{', '.join(flags)}]" if flags else ""
                out.append(f"  fn {owner}{_signature(kind['function'])} from {origin} via {kind['shim']}{extra}")
            elif kind["kind"] == "static":
                out.append(f"  static {kind['name']} from {origin} via {kind['shim']}")
            else:
                out.append(f"  type from {origin}")
        out.append("")

    enums = doc["enums"]
    if enums:
        out.append(f"Enums ({len(enums)}):")
        for enum in enums:
            out.append(f"  enum {enum['name']}:")
            for variant in enum["variants"]:
                out.append(f"    {variant['name']} = {variant['value']}")
        out.append("")

    names = doc["custom_type_names"]
    if names:
        out.append(f"Custom Types ({len(names)}):")
        for entry in names:
            out.append(f"  {entry['name']} ({entry['descriptor']})")
        out.append("")

    return out


def print_literal_info(literal_path: Path) -> int:
    """Print a summary of a raw descriptor literal file.

    Returns:
        0 on success, 2 on error.
    """
    from bindgen_descriptor.internals.decoder import DecodeError, decode_document

    if not literal_path.exists():
        print(f"Error: file not found: {literal_path}", file=sys.stderr)
        return 2

    try:
        doc = decode_document(literal_path.read_bytes())
        lines = _summary(doc)
    except DecodeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except (KeyError, TypeError, AttributeError) as e:
        # Parsed, but the elements are not shaped like encoder output
        err = DecodeError("CE4201", reason=f"unexpected document shape ({type(e).__name__}: {e})")
        print(f"Error: {err}", file=sys.stderr)
        return 2

    print("\n".join(lines))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    ap = argparse.ArgumentParser(prog="bindgen-descriptor",
                                 description="Encode interface descriptions as embeddable literals")

    ap.add_argument("source", nargs='?', help="Path to program description (.toml)")
    ap.add_argument("--version", action="store_true", help="Show version and exit")
    ap.add_argument("-o", "--out", metavar="OUT",
                    help="Output path: .ll (LLVM IR), .bc (bitcode) or raw bytes "
                         "(default: source filename with .ll)")
    ap.add_argument("--dump-json", action="store_true",
                    help="Print the encoded document as indented JSON")
    ap.add_argument("--dump-ll", action="store_true",
                    help="Dump generated LLVM IR to terminal")
    ap.add_argument("--triple", metavar="TRIPLE",
                    help="Target triple recorded in the generated module")
    ap.add_argument("--inspect", metavar="FILE",
                    help="Display the contents of a raw descriptor literal file")
    ap.add_argument(
        "--traceback",
        action="store_true",
        help="Print full traceback on internal errors (for debugging)",
    )
    args = ap.parse_args(argv)

    print_banner(stream=sys.stderr)

    if args.version:
        return 0

    if args.inspect:
        return print_literal_info(Path(args.inspect))

    if not args.source:
        print("error: source file required (unless using --inspect)", file=sys.stderr)
        return 2

    from bindgen_descriptor.compiler.pipeline import compile_description
    from bindgen_descriptor.internals.errors import InternalError
    from bindgen_descriptor.internals.report import Reporter

    src_path = Path(args.source).resolve()
    reporter = Reporter(filename=str(src_path))

    try:
        result = compile_description(src_path, reporter, args)
    except InternalError as exc:
        reporter.print()
        if args.traceback:
            import traceback
            traceback.print_exc()
        print(f"internal error: {exc}", file=sys.stderr)
        return 3

    reporter.print()
    return result


if __name__ == "__main__":
    raise SystemExit(main())
