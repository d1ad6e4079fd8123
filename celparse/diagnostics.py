"""
Diagnostic records for lexer/parser failures.

Errors are raised as exceptions inside the core; tooling (the CLI, editors)
converts them into `Diagnostic` values so they can be printed or serialized
uniformly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .ast import Located


@dataclass(frozen=True)
class Span:
    """Source span (1-based line/column, 0-based offset); all fields optional."""

    line: Optional[int] = None
    column: Optional[int] = None
    offset: Optional[int] = None
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    @classmethod
    def from_loc(cls, loc: Optional[Located]) -> "Span":
        if loc is None:
            return cls()
        return cls(line=loc.line, column=loc.column, offset=loc.offset)


@dataclass
class Diagnostic:
    message: str
    code: str | None = None
    # "lexer" or "parser".
    phase: str | None = None
    severity: str = "error"
    span: Span = field(default_factory=Span)
    notes: list[str] = field(default_factory=list)


def diag_to_json(diag: Diagnostic, source: str | None = None) -> dict:
    """Render a Diagnostic to a JSON-friendly dict."""
    return {
        "phase": diag.phase,
        "code": diag.code,
        "message": diag.message,
        "severity": diag.severity,
        "source": source,
        "line": diag.span.line,
        "column": diag.span.column,
        "offset": diag.span.offset,
        "notes": list(diag.notes),
    }


def format_diagnostic(diag: Diagnostic, source_name: str = "<expr>") -> str:
    line = diag.span.line if diag.span.line is not None else "?"
    column = diag.span.column if diag.span.column is not None else "?"
    return f"{source_name}:{line}:{column}: {diag.severity}: {diag.message}"


__all__ = ["Span", "Diagnostic", "diag_to_json", "format_diagnostic"]
