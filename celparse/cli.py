#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys

from .diagnostics import diag_to_json, format_diagnostic
from .errors import ExprSyntaxError
from .lexer import Dialect, tokenize
from .parser import parse
from .printer import format_expr


def _render(text: str, dialect: Dialect, fmt: str) -> str:
    if fmt == "tokens":
        return "\n".join(
            f"{tok.type} {tok.value} @{tok.line}:{tok.column}" for tok in tokenize(text, dialect)
        )
    expr = parse(text, dialect)
    if fmt == "source":
        return format_expr(expr)
    return repr(expr)


def main(argv: list[str] | None = None) -> int:
    """
    Parse one expression given on the command line and print its tree.

    With --json, prints `{"exit_code", "output"}` on success or
    `{"exit_code", "diagnostics"}` on failure; otherwise errors go to stderr
    as `<expr>:line:column: error: message`.
    """
    parser = argparse.ArgumentParser(description="Parse a CEL-like expression and print its AST")
    parser.add_argument("expression", help="Expression source text")
    parser.add_argument(
        "--dialect",
        choices=[d.value for d in Dialect],
        default=Dialect.FULL.value,
        help="Grammar variant (default: full)",
    )
    parser.add_argument(
        "--format",
        choices=["debug", "source", "tokens"],
        default="debug",
        help="debug: AST repr; source: re-rendered expression; tokens: token stream",
    )
    parser.add_argument("--json", action="store_true", help="Emit a JSON payload instead of plain text")
    args = parser.parse_args(argv)

    try:
        output = _render(args.expression, Dialect(args.dialect), args.format)
    except ExprSyntaxError as err:
        diag = err.to_diagnostic()
        if args.json:
            print(json.dumps({"exit_code": 1, "diagnostics": [diag_to_json(diag, args.expression)]}))
        else:
            print(format_diagnostic(diag), file=sys.stderr)
            for note in diag.notes:
                print(f"  note: {note}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({"exit_code": 0, "output": output}))
    else:
        print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
