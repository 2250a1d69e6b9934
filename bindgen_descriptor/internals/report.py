from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Any

from lark import UnexpectedInput

class C:
    """ANSI color/style escape codes."""
    RESET = "\x1b[0m"
    BOLD  = "\x1b[1m"
    DIM   = "\x1b[2m"
    RED   = "\x1b[31m"
    YELLOW = "\x1b[33m"
    CYAN  = "\x1b[36m"
    GRAY  = "\x1b[90m"

@dataclass
class Span:
    """Location of a diagnostic.

    Program descriptions carry no line information once TOML is loaded, so a
    span is either a dotted key path into the description (``where``) or a
    line/column pair into a decoded literal.
    """
    where: Optional[str] = None
    line: Optional[int] = None
    col: Optional[int] = None

    def __str__(self) -> str:
        if self.where is not None:
            return self.where
        if self.line is not None:
            return f"{self.line}:{self.col or 1}"
        return ""

@dataclass
class Diagnostic:
    kind: str
    code: str
    message: str
    span: Optional[Span] = None
    filename: Optional[str] = None

def span_of(t: Any) -> Optional[Span]:
    if isinstance(t, UnexpectedInput):
        line = getattr(t, "line", None)
        if isinstance(line, int) and line > 0:
            return Span(line=line, col=getattr(t, "column", None))
    return None

def at(*parts: Any) -> Span:
    """Build a key-path span, e.g. ``at("exports", 0, "function")``."""
    out: List[str] = []
    for p in parts:
        if isinstance(p, int):
            out.append(f"[{p}]")
        elif out:
            out.append(f".{p}")
        else:
            out.append(str(p))
    return Span(where="".join(out))


class Reporter:
    def __init__(self, filename: str = "<input>") -> None:
        self.filename = filename
        self.items: List[Diagnostic] = []

    def error(self, code: str, msg: str, span: Optional[Span]):
        self.items.append(Diagnostic("error", code, msg, span, filename=self.filename))

    def warn(self, code: str, msg: str, span: Optional[Span]):
        self.items.append(Diagnostic("warning", code, msg, span, filename=self.filename))

    @property
    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.items)

    @property
    def has_warnings(self) -> bool:
        return any(d.kind == "warning" for d in self.items)

    def format(self, use_color: bool = True) -> str:
        """Render all diagnostics, one per line.

        use_color → ANSI colorize location/kind/code
        """
        out: List[str] = []

        for d in self.items:
            filename = d.filename or self.filename
            loc = f"{filename}:{d.span}" if d.span and str(d.span) else filename

            # Ensure message ends with period
            message = d.message if d.message.endswith('.') else f"{d.message}."

            if use_color:
                kind = f"{C.BOLD}{C.RED}error{C.RESET}" if d.kind == "error" else f"{C.BOLD}{C.YELLOW}warning{C.RESET}"
                out.append(f"{C.CYAN}{loc}{C.RESET}: {kind} [{C.DIM}{d.code}{C.RESET}]: {message}")
            else:
                out.append(f"{loc}: {d.kind} [{d.code}]: {message}")

        return "\n".join(out)

    def print(self, stream=None, use_color: Optional[bool] = None) -> None:
        """Print diagnostics to `stream` (default: sys.stderr).

        Color is auto-enabled for TTY unless NO_COLOR or TERM=dumb.
        """
        import os, sys
        stream = stream or sys.stderr

        if use_color is None:
            is_tty = getattr(stream, "isatty", lambda: False)()
            no_color = os.getenv("NO_COLOR") is not None
            dumb = os.getenv("TERM") == "dumb"
            use_color = bool(is_tty and not no_color and not dumb)

        text = self.format(use_color=use_color)
        if text:
            print(text, file=stream)
