# internals/errors.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, NoReturn, Optional

from bindgen_descriptor.internals.report import Span, Reporter


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Category(str, Enum):
    GENERAL   = "general"
    INTERNAL  = "internal"
    LOAD      = "load"
    TYPE      = "type"
    DECODE    = "decode"


@dataclass(frozen=True)
class ErrorMessage:
    code: str
    severity: Severity
    text: str
    category: Category = Category.GENERAL
    doc: str = ""


REGISTRY: Dict[str, ErrorMessage] = {}

class _ErrorCatalog:
    def __init__(self, backing: Dict[str, ErrorMessage]) -> None:
        self._registry = backing

    def __getattr__(self, name: str) -> ErrorMessage:
        try:
            return self._registry[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __getitem__(self, code: str) -> ErrorMessage:
        return self._registry[code]


ERR = _ErrorCatalog(REGISTRY)


class InternalError(AssertionError):
    """A broken invariant in the program description handed to the encoder.

    These are never recovered from: they mean an upstream stage produced an
    AST it should have rejected.
    """

    def __init__(self, code: str, text: str):
        self.code = code
        self.text = text
        super().__init__(f"{code}: {text}")


def emit(r: Reporter, em: ErrorMessage, span: Optional[Span], **kwargs) -> None:
    text = _fmt(em.code, **kwargs)
    if em.severity == Severity.ERROR:
        r.error(em.code, text, span)
    else:
        r.warn(em.code, text, span)

def raise_internal_error(code: str, **kwargs) -> NoReturn:
    """Raise an InternalError for a violated encoder invariant.

    Args:
        code: Error code (e.g., "CE0001")
        **kwargs: Format parameters for the error message

    Raises:
        InternalError: Always raises with formatted error message
    """
    raise InternalError(code, _fmt(code, **kwargs))


#
# --- Helpers
#

def _add(msg: ErrorMessage) -> None:
    if msg.code in REGISTRY:
        raise ValueError(f"duplicate error code {REGISTRY[msg.code]} in {msg}")
    REGISTRY[msg.code] = msg

def _get(code: str) -> ErrorMessage:
    try:
        return REGISTRY[code]
    except KeyError:
        raise KeyError(f"unknown error code: {code}")

def _fmt(code: str, **kwargs) -> str:
    msg = _get(code)
    try:
        return msg.text.format(**kwargs)
    except KeyError as key_error:
        missing = key_error.args[0]
        raise KeyError(f"missing text key '{missing}' for {code} "
                       f"(needed by: {msg.text!r})") from None

#
# --- Registry population
#

# Internal errors (encoder invariants) - CE0xxx range
_add(ErrorMessage("CE0001", Severity.ERROR,
    "no descriptor rule for {kind} type at {loc}",
    Category.INTERNAL, "A type occurrence has a kind/location pair none of the descriptor rules accept."))

_add(ErrorMessage("CE0002", Severity.ERROR,
    "type '{ty}' has no {capability} descriptor",
    Category.INTERNAL, "The type cannot cross the boundary in the position it was placed in."))

_add(ErrorMessage("CE0003", Severity.ERROR,
    "string {value!r} needs escaping and cannot be emitted",
    Category.INTERNAL, "Emitted strings are identifiers and fixed keys; quotes, backslashes and control characters are not allowed."))

_add(ErrorMessage("CE0004", Severity.ERROR,
    "value {value} does not fit in an unsigned 32-bit integer",
    Category.INTERNAL, "Integers in the literal are u32."))

_add(ErrorMessage("CE0005", Severity.ERROR,
    "descriptor {value} is outside [0, {limit})",
    Category.INTERNAL, "Descriptors are emitted as exactly four ASCII digits."))

_add(ErrorMessage("CE0006", Severity.ERROR,
    "setter '{name}' must start with 'set_' to infer its property name",
    Category.INTERNAL, "Setters without an explicit property name derive it from a set_ prefix."))

_add(ErrorMessage("CE0007", Severity.ERROR,
    "byte value {value} is outside [0, 255]",
    Category.INTERNAL, "The literal is a sequence of u8 values."))

_add(ErrorMessage("CE0008", Severity.ERROR,
    "unknown {what} node '{node}'",
    Category.INTERNAL, "Found a node the encoder has no rule for."))

# Program description errors - CE41xx range
_add(ErrorMessage("CE4101", Severity.ERROR,
    "cannot read program description: {reason}",
    Category.LOAD, "The file is missing or is not valid TOML."))

_add(ErrorMessage("CE4102", Severity.ERROR,
    "missing required field '{field}'",
    Category.LOAD, "A required key is absent from a table."))

_add(ErrorMessage("CE4103", Severity.ERROR,
    "field '{field}' must be {expected}, got {got}",
    Category.LOAD, "A key holds a value of the wrong TOML type."))

_add(ErrorMessage("CE4104", Severity.ERROR,
    "unknown type '{name}'",
    Category.TYPE, "Types must be built-ins, exported classes, imported types or enums."))

_add(ErrorMessage("CE4105", Severity.ERROR,
    "unknown type kind '{kind}' (expected one of: {expected})",
    Category.TYPE, "Type kinds are value, ref and mut_ref."))

_add(ErrorMessage("CE4106", Severity.ERROR,
    "unknown import kind '{kind}' (expected one of: {expected})",
    Category.LOAD, "Imports are functions, statics or types."))

_add(ErrorMessage("CE4107", Severity.ERROR,
    "'{ty}' cannot be passed {kind} as {position}",
    Category.TYPE, "The type lacks the boundary capability this position needs."))

_add(ErrorMessage("CE4108", Severity.ERROR,
    "'{name}' is not a valid identifier",
    Category.LOAD, "Names end up in generated code and in the literal; use letters, digits and underscores."))

_add(ErrorMessage("CE4109", Severity.ERROR,
    "enum value {value} for '{name}' is outside the u32 range",
    Category.LOAD, "Enum discriminants are unsigned 32-bit integers."))

_add(ErrorMessage("CE4110", Severity.ERROR,
    "setter '{name}' needs an explicit property name or a 'set_' prefix",
    Category.LOAD, "Property names are inferred from setters named set_<property>."))

_add(ErrorMessage("CE4111", Severity.ERROR,
    "'{flag}' is only valid on {allowed}",
    Category.LOAD, "An import option was used on the wrong kind of import."))

_add(ErrorMessage("CW4112", Severity.WARNING,
    "duplicate enum variant value {value} in '{name}'",
    Category.LOAD, "Two variants share a discriminant; bindings will not be able to tell them apart."))

# Literal decoding errors - CE42xx range
_add(ErrorMessage("CE4201", Severity.ERROR,
    "malformed descriptor literal: {reason}",
    Category.DECODE, "The bytes do not follow the descriptor document grammar."))

_add(ErrorMessage("CE4202", Severity.ERROR,
    "unsupported schema version '{version}' (supported: {supported})",
    Category.DECODE, "The literal was produced by an incompatible encoder."))
