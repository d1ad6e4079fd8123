from __future__ import annotations

from typing import Iterable, Optional

from .ast import Located
from .diagnostics import Diagnostic, Span


class ExprSyntaxError(ValueError):
    """
    Base class for every error `tokenize`/`parse` raise on malformed input.

    This is a `ValueError` subclass so callers that only care about "bad
    input" can catch one builtin type; `loc` always points at the offending
    character or token.
    """

    phase = "parser"

    def __init__(self, message: str, *, loc: Located, code: str) -> None:
        super().__init__(f"{message} at line {loc.line}, column {loc.column}")
        self.message = message
        self.loc = loc
        self.code = code

    @property
    def position(self) -> int:
        return self.loc.offset

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            message=self.message,
            code=self.code,
            phase=self.phase,
            severity="error",
            span=Span.from_loc(self.loc),
        )


class LexError(ExprSyntaxError):
    """Unterminated string, unrecognized character or out-of-range integer."""

    phase = "lexer"

    def __init__(self, reason: str, *, loc: Located, code: str = "E-LEX-BAD-CHAR") -> None:
        super().__init__(reason, loc=loc, code=code)
        self.reason = reason


class ParseError(ExprSyntaxError):
    """
    A syntax violation: the parser expected one of `expected` but saw `found`.

    Semantic restrictions the grammar itself cannot express (non-variable
    binder, non-literal `contains` argument, index ranges) are reported with
    the same shape, e.g. expected `("variable identifier",)`.
    """

    def __init__(
        self,
        message: str,
        *,
        loc: Located,
        expected: Iterable[str] = (),
        found: Optional[str] = None,
        code: str = "E-PARSE-UNEXPECTED",
    ) -> None:
        super().__init__(message, loc=loc, code=code)
        self.expected = tuple(expected)
        self.found = found

    def to_diagnostic(self) -> Diagnostic:
        diag = super().to_diagnostic()
        if self.expected:
            diag.notes.append("expected " + " or ".join(self.expected))
        return diag


__all__ = ["ExprSyntaxError", "LexError", "ParseError"]
