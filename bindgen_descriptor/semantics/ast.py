# semantics/ast.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum as PyEnum
from typing import List, Optional, Union

from bindgen_descriptor.internals.errors import raise_internal_error
from bindgen_descriptor.semantics.boundary import BoundaryType

# === Type occurrences ===

class TypeKind(PyEnum):
    BY_VALUE = "value"
    BY_REF = "ref"
    BY_MUT_REF = "mut_ref"

class TypeLocation(PyEnum):
    IMPORT_ARGUMENT = "import_argument"
    IMPORT_RET = "import_ret"
    EXPORT_ARGUMENT = "export_argument"
    EXPORT_RET = "export_ret"

@dataclass(frozen=True)
class Type:
    ty: BoundaryType
    kind: TypeKind = TypeKind.BY_VALUE
    loc: TypeLocation = TypeLocation.EXPORT_ARGUMENT

# === Functions ===

@dataclass
class Function:
    name: str
    arguments: List[Type] = field(default_factory=list)
    ret: Optional[Type] = None          # None encodes as null

@dataclass(frozen=True)
class Accessor:
    """A getter/setter annotation; ``name`` is None when it must be inferred."""
    name: Optional[str] = None

@dataclass
class FunctionOpts:
    catch: bool = False
    structural: bool = False
    getter: Optional[Accessor] = None
    setter: Optional[Accessor] = None

# === Exports ===

@dataclass
class Export:
    function: Function
    class_name: Optional[str] = None    # None for free functions
    method: bool = False

# === Imports ===

@dataclass(frozen=True)
class Method:
    class_name: str

@dataclass(frozen=True)
class JsConstructor:
    class_name: str

@dataclass(frozen=True)
class Normal:
    pass

ImportFunctionKind = Union[Method, JsConstructor, Normal]

@dataclass
class ImportFunction:
    function: Function
    shim: str
    kind: ImportFunctionKind = field(default_factory=Normal)
    opts: FunctionOpts = field(default_factory=FunctionOpts)

    def infer_getter_property(self) -> str:
        return self.function.name

    def infer_setter_property(self) -> str:
        name = self.function.name
        if not name.startswith("set_"):
            raise_internal_error("CE0006", name=name)
        return name[len("set_"):]

    def getter_property(self) -> Optional[str]:
        """Property name read by this getter, or None for non-getters."""
        if self.opts.getter is None:
            return None
        return self.opts.getter.name or self.infer_getter_property()

    def setter_property(self) -> Optional[str]:
        if self.opts.setter is None:
            return None
        return self.opts.setter.name or self.infer_setter_property()

@dataclass
class ImportStatic:
    js_name: str                        # name the static is exposed as
    shim: str

@dataclass
class ImportType:
    name: str                           # not encoded; kept for type lookup

ImportKind = Union[ImportFunction, ImportStatic, ImportType]

@dataclass
class Import:
    kind: ImportKind
    module: Optional[str] = None
    js_namespace: Optional[str] = None

# === Enums and structs ===

@dataclass
class Variant:
    name: str
    value: int

@dataclass
class Enum:
    name: str
    variants: List[Variant] = field(default_factory=list)

@dataclass
class Struct:
    name: str

# === Program ===

@dataclass
class Program:
    exports: List[Export] = field(default_factory=list)
    imports: List[Import] = field(default_factory=list)
    enums: List[Enum] = field(default_factory=list)
    structs: List[Struct] = field(default_factory=list)

    def custom_type_names(self) -> List[str]:
        """Exported class names and struct names, deduplicated and sorted."""
        names = {e.class_name for e in self.exports if e.class_name is not None}
        names.update(s.name for s in self.structs)
        return sorted(names)
