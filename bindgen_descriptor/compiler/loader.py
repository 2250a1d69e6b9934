"""Program description loading.

A program description is a TOML file listing what a module exports and
imports. The loader turns it into the AST the encoder walks, assigning each
type occurrence its location from where it appears, and reports every
problem it finds before giving up.

    [[structs]]
    name = "Point"

    [[exports]]
    class = "Counter"
    method = true
    name = "add"
    arguments = [{ type = "Counter", kind = "mut_ref" }, "u32"]
    ret = "u32"

    [[imports]]
    module = "./dom.js"
    name = "set_title"
    class = "Document"
    method = true
    setter = true
    arguments = [{ type = "Document", kind = "ref" }, { type = "str", kind = "ref" }]
"""
from __future__ import annotations

import hashlib
import re
import tomllib
from pathlib import Path
from typing import Any, List, Optional

from bindgen_descriptor.backend import descriptors
from bindgen_descriptor.backend.literal import needs_escape
from bindgen_descriptor.internals import errors as er
from bindgen_descriptor.internals.report import Reporter, Span, at
from bindgen_descriptor.semantics import ast, boundary

IDENT_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

TYPE_KINDS = {k.value: k for k in ast.TypeKind}

KIND_TEXT = {
    ast.TypeKind.BY_VALUE: "by value",
    ast.TypeKind.BY_REF: "by reference",
    ast.TypeKind.BY_MUT_REF: "by mutable reference",
}
POSITION_TEXT = {
    ast.TypeLocation.IMPORT_ARGUMENT: "an import argument",
    ast.TypeLocation.IMPORT_RET: "an import return value",
    ast.TypeLocation.EXPORT_ARGUMENT: "an export argument",
    ast.TypeLocation.EXPORT_RET: "an export return value",
}
IMPORT_KINDS = ("function", "static", "type")

_U32_MAX = 0xFFFFFFFF


def default_shim(name: str, module: Optional[str], class_name: Optional[str]) -> str:
    """Shim symbol for an import that does not name one."""
    key = f"{module or ''}:{class_name or ''}:{name}".encode("utf-8")
    return f"__wbg_{name}_{hashlib.sha256(key).hexdigest()[:8]}"


class ProgramLoader:
    """Builds a Program from a parsed description, collecting diagnostics."""

    def __init__(self, reporter: Reporter):
        self.reporter = reporter
        self.classes: set[str] = set()
        self.enum_names: set[str] = set()
        self.imported_types: set[str] = set()

    # --- entry point

    def load(self, data: dict) -> Optional[ast.Program]:
        structs_raw = self._table_list(data, "structs")
        enums_raw = self._table_list(data, "enums")
        exports_raw = self._table_list(data, "exports")
        imports_raw = self._table_list(data, "imports")

        # Names have to be known before any signature is resolved.
        structs = [s for i, raw in enumerate(structs_raw)
                   if (s := self._struct(raw, at("structs", i))) is not None]
        self.classes.update(s.name for s in structs)
        for raw in exports_raw:
            cls = raw.get("class")
            if isinstance(cls, str):
                self.classes.add(cls)
        for raw in imports_raw:
            if raw.get("kind") == "type" and isinstance(raw.get("name"), str):
                self.imported_types.add(raw["name"])

        enums = [e for i, raw in enumerate(enums_raw)
                 if (e := self._enum(raw, at("enums", i))) is not None]
        self.enum_names.update(e.name for e in enums)

        exports = [e for i, raw in enumerate(exports_raw)
                   if (e := self._export(raw, at("exports", i))) is not None]
        imports = [m for i, raw in enumerate(imports_raw)
                   if (m := self._import(raw, at("imports", i))) is not None]

        if self.reporter.has_errors:
            return None
        return ast.Program(exports=exports, imports=imports, enums=enums, structs=structs)

    # --- helpers

    def _error(self, em: er.ErrorMessage, span: Span, **kwargs) -> None:
        er.emit(self.reporter, em, span, **kwargs)

    def _table_list(self, data: dict, key: str) -> List[dict]:
        value = data.get(key, [])
        if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
            self._error(er.ERR.CE4103, at(key), field=key,
                        expected="an array of tables", got=type(value).__name__)
            return []
        return value

    def _ident(self, raw: dict, key: str, span: Span, required: bool = True) -> Optional[str]:
        value = raw.get(key)
        if value is None:
            if required:
                self._error(er.ERR.CE4102, span, field=key)
            return None
        if not isinstance(value, str):
            self._error(er.ERR.CE4103, at(span.where, key), field=key,
                        expected="a string", got=type(value).__name__)
            return None
        if not IDENT_PATTERN.match(value):
            self._error(er.ERR.CE4108, at(span.where, key), name=value)
            return None
        return value

    def _text(self, raw: dict, key: str, span: Span) -> Optional[str]:
        """Optional free-form string (module paths, namespaces)."""
        value = raw.get(key)
        if value is None:
            return None
        if not isinstance(value, str) or needs_escape(value):
            self._error(er.ERR.CE4103, at(span.where, key), field=key,
                        expected="a string without quotes, backslashes or control characters",
                        got=repr(value))
            return None
        return value

    def _flag(self, raw: dict, key: str, span: Span) -> bool:
        value = raw.get(key, False)
        if not isinstance(value, bool):
            self._error(er.ERR.CE4103, at(span.where, key), field=key,
                        expected="a boolean", got=type(value).__name__)
            return False
        return value

    # --- structs and enums

    def _struct(self, raw: dict, span: Span) -> Optional[ast.Struct]:
        name = self._ident(raw, "name", span)
        return ast.Struct(name) if name is not None else None

    def _enum(self, raw: dict, span: Span) -> Optional[ast.Enum]:
        name = self._ident(raw, "name", span)
        variants_raw = raw.get("variants", [])
        if not isinstance(variants_raw, list):
            self._error(er.ERR.CE4103, at(span.where, "variants"), field="variants",
                        expected="an array", got=type(variants_raw).__name__)
            return None

        variants: List[ast.Variant] = []
        seen: dict[int, str] = {}
        next_value = 0
        for i, v in enumerate(variants_raw):
            vspan = at(span.where, "variants", i)
            if isinstance(v, str):
                v = {"name": v}
            if not isinstance(v, dict):
                self._error(er.ERR.CE4103, vspan, field="variants",
                            expected="a string or table", got=type(v).__name__)
                continue
            vname = self._ident(v, "name", vspan)
            value = v.get("value", next_value)
            if isinstance(value, bool) or not isinstance(value, int):
                self._error(er.ERR.CE4103, at(vspan.where, "value"), field="value",
                            expected="an integer", got=type(value).__name__)
                continue
            if not 0 <= value <= _U32_MAX:
                self._error(er.ERR.CE4109, at(vspan.where, "value"), value=value,
                            name=vname or name or vspan.where)
                continue
            if value in seen and name is not None:
                self._error(er.ERR.CW4112, vspan, value=value, name=name)
            seen[value] = vname or ""
            next_value = value + 1
            if vname is not None:
                variants.append(ast.Variant(vname, value))

        if name is None:
            return None
        return ast.Enum(name, variants)

    # --- signatures

    def _type(self, raw: Any, loc: ast.TypeLocation, span: Span) -> Optional[ast.Type]:
        if isinstance(raw, str):
            raw = {"type": raw}
        if not isinstance(raw, dict):
            self._error(er.ERR.CE4103, span, field="type",
                        expected="a type name or table", got=type(raw).__name__)
            return None

        ty_name = raw.get("type")
        if not isinstance(ty_name, str):
            self._error(er.ERR.CE4102, span, field="type")
            return None
        kind_name = raw.get("kind", ast.TypeKind.BY_VALUE.value)
        if not isinstance(kind_name, str):
            self._error(er.ERR.CE4103, at(span.where, "kind"), field="kind",
                        expected="a string", got=type(kind_name).__name__)
            return None
        kind = TYPE_KINDS.get(kind_name)
        if kind is None:
            self._error(er.ERR.CE4105, at(span.where, "kind"), kind=kind_name,
                        expected=", ".join(TYPE_KINDS))
            return None

        ty = boundary.lookup(ty_name, classes=self.classes, enums=self.enum_names,
                             imported=self.imported_types)
        if ty is None:
            self._error(er.ERR.CE4104, span, name=ty_name)
            return None

        t = ast.Type(ty, kind, loc)
        capability = descriptors.capability_for(kind, loc)
        available = {
            descriptors.WASM_BOUNDARY: ty.descriptor,
            descriptors.TO_REF_WASM_BOUNDARY: ty.to_ref_descriptor,
            descriptors.FROM_REF_WASM_BOUNDARY: ty.from_ref_descriptor,
        }[capability]
        if available is None:
            self._error(er.ERR.CE4107, span, ty=ty_name, kind=KIND_TEXT[kind],
                        position=POSITION_TEXT[loc])
            return None
        return t

    def _function(self, raw: dict, span: Span, arg_loc: ast.TypeLocation,
                  ret_loc: ast.TypeLocation) -> Optional[ast.Function]:
        name = self._ident(raw, "name", span)
        args_raw = raw.get("arguments", [])
        if not isinstance(args_raw, list):
            self._error(er.ERR.CE4103, at(span.where, "arguments"), field="arguments",
                        expected="an array", got=type(args_raw).__name__)
            return None

        arguments = []
        ok = True
        for i, a in enumerate(args_raw):
            t = self._type(a, arg_loc, at(span.where, "arguments", i))
            if t is None:
                ok = False
            else:
                arguments.append(t)

        ret = None
        if "ret" in raw:
            ret = self._type(raw["ret"], ret_loc, at(span.where, "ret"))
            ok = ok and ret is not None

        if name is None or not ok:
            return None
        return ast.Function(name, arguments, ret)

    # --- exports and imports

    def _export(self, raw: dict, span: Span) -> Optional[ast.Export]:
        class_name = self._ident(raw, "class", span, required=False)
        method = self._flag(raw, "method", span)
        if method and class_name is None:
            self._error(er.ERR.CE4111, at(span.where, "method"), flag="method",
                        allowed="exports that name a class")
        f = self._function(raw, span, ast.TypeLocation.EXPORT_ARGUMENT,
                           ast.TypeLocation.EXPORT_RET)
        if f is None:
            return None
        return ast.Export(f, class_name=class_name, method=method)

    def _import(self, raw: dict, span: Span) -> Optional[ast.Import]:
        module = self._text(raw, "module", span)
        js_namespace = self._ident(raw, "js_namespace", span, required=False)
        kind_name = raw.get("kind", "function")

        match kind_name:
            case "function":
                kind = self._import_function(raw, span, module)
            case "static":
                kind = self._import_static(raw, span, module)
            case "type":
                name = self._ident(raw, "name", span)
                kind = ast.ImportType(name) if name is not None else None
            case _:
                self._error(er.ERR.CE4106, at(span.where, "kind"), kind=kind_name,
                            expected=", ".join(IMPORT_KINDS))
                kind = None

        if kind_name != "function":
            for flag in ("method", "constructor", "catch", "structural", "getter", "setter"):
                if flag in raw:
                    self._error(er.ERR.CE4111, at(span.where, flag), flag=flag,
                                allowed="function imports")

        if kind is None:
            return None
        return ast.Import(kind, module=module, js_namespace=js_namespace)

    def _shim(self, raw: dict, span: Span, name: Optional[str], module: Optional[str],
              class_name: Optional[str]) -> Optional[str]:
        if "shim" in raw:
            return self._ident(raw, "shim", span)
        if name is None:
            return None
        return default_shim(name, module, class_name)

    def _accessor(self, raw: dict, key: str, span: Span) -> Optional[ast.Accessor]:
        value = raw.get(key)
        if value is None or value is False:
            return None
        if value is True:
            return ast.Accessor()
        if isinstance(value, str) and IDENT_PATTERN.match(value):
            return ast.Accessor(value)
        self._error(er.ERR.CE4103, at(span.where, key), field=key,
                    expected="a boolean or property name", got=repr(value))
        return None

    def _import_function(self, raw: dict, span: Span,
                         module: Optional[str]) -> Optional[ast.ImportFunction]:
        class_name = self._ident(raw, "class", span, required=False)
        method = self._flag(raw, "method", span)
        constructor = self._flag(raw, "constructor", span)

        kind: ast.ImportFunctionKind = ast.Normal()
        if method and constructor:
            self._error(er.ERR.CE4111, at(span.where, "constructor"), flag="constructor",
                        allowed="imports that are not methods")
        elif method or constructor:
            if class_name is None:
                flag = "method" if method else "constructor"
                self._error(er.ERR.CE4111, at(span.where, flag), flag=flag,
                            allowed="imports that name a class")
            elif method:
                kind = ast.Method(class_name)
            else:
                kind = ast.JsConstructor(class_name)

        opts = ast.FunctionOpts(
            catch=self._flag(raw, "catch", span),
            structural=self._flag(raw, "structural", span),
            getter=self._accessor(raw, "getter", span),
            setter=self._accessor(raw, "setter", span),
        )

        f = self._function(raw, span, ast.TypeLocation.IMPORT_ARGUMENT,
                           ast.TypeLocation.IMPORT_RET)
        if f is None:
            return None
        if opts.setter is not None and opts.setter.name is None and not f.name.startswith("set_"):
            self._error(er.ERR.CE4110, at(span.where, "setter"), name=f.name)
            return None

        shim = self._shim(raw, span, f.name, module, class_name)
        if shim is None:
            return None
        return ast.ImportFunction(f, shim, kind=kind, opts=opts)

    def _import_static(self, raw: dict, span: Span,
                       module: Optional[str]) -> Optional[ast.ImportStatic]:
        name = self._ident(raw, "name", span)
        shim = self._shim(raw, span, name, module, None)
        if name is None or shim is None:
            return None
        return ast.ImportStatic(name, shim)


def load_program_from_string(text: str, reporter: Reporter) -> Optional[ast.Program]:
    """Load a program description from TOML text.

    Returns:
        The program, or None when diagnostics with errors were reported.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        er.emit(reporter, er.ERR.CE4101, None, reason=str(e))
        return None
    return ProgramLoader(reporter).load(data)


def load_program(path: Path, reporter: Reporter) -> Optional[ast.Program]:
    """Load a program description file, reporting problems against its name."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        er.emit(reporter, er.ERR.CE4101, None, reason=str(e))
        return None
    return load_program_from_string(text, reporter)
