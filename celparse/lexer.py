from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, Optional

from lark import Lark, Token
from lark.exceptions import UnexpectedCharacters

from .ast import I128_MAX, I128_MIN, Located
from .errors import LexError, ParseError

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

# Identifiers the lexer turns into keyword tokens instead of NAME.
KEYWORDS = frozenset({"in", "all", "any", "contains", "count", "filter"})
FUNCTION_KEYWORDS = frozenset({"all", "any", "contains", "count", "filter"})

# Maximum nesting of `(` and `[`; deeper input is rejected before the tree
# builder recurses.
MAX_NESTING_DEPTH = 64

_OPENERS = {"LPAR", "LSQB"}
_CLOSERS = {"RPAR", "RSQB"}
_I128_DIGITS = len(str(I128_MAX))

# A `-` directly after one of these is never folded into an integer literal.
_OPERANDS = {
    "NAME",
    "INT",
    "STRING",
    "TRUE",
    "FALSE",
    "ALL",
    "ANY",
    "CONTAINS",
    "COUNT",
    "FILTER",
    "RPAR",
    "RSQB",
}

_PATTERN_TERMINALS = {
    "NAME": "identifier",
    "INT": "integer literal",
    "STRING": "string literal",
    "$END": "end of input",
}


class Dialect(Enum):
    """
    Grammar variants served by the same parser.

    `LIST_INDEX` disables every production except list literals, integer
    literals and `[i]` indexing by restricting the token stream.
    """

    FULL = "full"
    LIST_INDEX = "list-index"

    @property
    def terminals(self) -> Optional[FrozenSet[str]]:
        if self is Dialect.LIST_INDEX:
            return frozenset({"INT", "LSQB", "RSQB", "COMMA"})
        return None


class TokenAdjuster:
    """
    Post-lexer pass between lark's basic lexer and the LALR parser.

    - folds `-` into an adjacent integer literal when the minus cannot be a
      binary operator (it does not follow an operand),
    - range-checks integer literals against the signed 128-bit range,
    - bounds bracket nesting,
    - rejects tokens outside the dialect's terminal set.

    All per-stream state lives in `process` locals, so one instance can serve
    concurrent parses.
    """

    always_accept = ()

    def __init__(
        self,
        allowed: Optional[FrozenSet[str]] = None,
        max_depth: int = MAX_NESTING_DEPTH,
    ) -> None:
        self.allowed = allowed
        self.max_depth = max_depth

    def process(self, stream: Iterable[Token]) -> Iterator[Token]:
        depth = 0
        prev: Optional[Token] = None
        held: Optional[Token] = None
        for token in stream:
            if held is not None:
                if token.type == "INT" and token.start_pos == held.end_pos:
                    token = _fold_sign(held, token)
                else:
                    yield self._admit(held)
                held = None
            if token.type == "MINUS" and (prev is None or prev.type not in _OPERANDS):
                held = token
                prev = token
                continue
            if token.type in _OPENERS:
                depth += 1
                if depth > self.max_depth:
                    raise ParseError(
                        f"expression nested deeper than {self.max_depth} levels",
                        loc=token_loc(token),
                        found=describe_token(token),
                        code="E-PARSE-TOO-DEEP",
                    )
            elif token.type in _CLOSERS and depth:
                depth -= 1
            elif token.type == "INT":
                _check_int_range(token)
            prev = token
            yield self._admit(token)
        if held is not None:
            yield self._admit(held)

    def _admit(self, token: Token) -> Token:
        if self.allowed is not None and token.type not in self.allowed:
            raise ParseError(
                f"{describe_token(token)} is not allowed in this dialect",
                loc=token_loc(token),
                expected=sorted(describe_terminal(name) for name in self.allowed),
                found=describe_token(token),
                code="E-PARSE-DIALECT",
            )
        return token


def _fold_sign(minus: Token, digits: Token) -> Token:
    return Token(
        "INT",
        "-" + digits.value,
        start_pos=minus.start_pos,
        line=minus.line,
        column=minus.column,
        end_line=digits.end_line,
        end_column=digits.end_column,
        end_pos=digits.end_pos,
    )


def int_value(token: Token) -> int:
    """Value of an INT token; leading zeros are dropped before conversion."""
    digits = token.value.lstrip("-").lstrip("0") or "0"
    value = int(digits)
    return -value if token.value.startswith("-") else value


def _check_int_range(token: Token) -> None:
    # int() refuses very long digit strings, so bound the length first.
    digits = token.value.lstrip("-").lstrip("0")
    if len(digits) > _I128_DIGITS or not I128_MIN <= int_value(token) <= I128_MAX:
        raise LexError(
            "integer literal does not fit in a signed 128-bit integer",
            loc=token_loc(token),
            code="E-LEX-INT-OVERFLOW",
        )


@lru_cache(maxsize=None)
def frontend(dialect: Dialect = Dialect.FULL) -> Lark:
    """Compiled lark parser for `dialect`; built once and shared read-only."""
    return Lark(
        _GRAMMAR_SRC,
        parser="lalr",
        lexer="basic",
        start="start",
        propagate_positions=True,
        maybe_placeholders=False,
        postlex=TokenAdjuster(dialect.terminals),
    )


def tokenize(text: str, dialect: Dialect = Dialect.FULL) -> Iterator[Token]:
    """
    Lazily tokenize `text`.

    Every call re-lexes from the start, so the same text always yields the
    same sequence. Errors surface while iterating, at the offending token.
    """
    try:
        yield from frontend(dialect).lex(text)
    except UnexpectedCharacters as err:
        raise lex_error_from(err) from None


def lex_error_from(err: UnexpectedCharacters) -> LexError:
    loc = Located(line=err.line, column=err.column, offset=err.pos_in_stream)
    if err.char in ("'", '"'):
        return LexError("unterminated string literal", loc=loc, code="E-LEX-UNTERMINATED-STRING")
    return LexError(f"unrecognized character {err.char!r}", loc=loc, code="E-LEX-BAD-CHAR")


def token_loc(token: Token) -> Located:
    return Located(line=token.line, column=token.column, offset=token.start_pos)


def describe_terminal(name: str) -> str:
    if name in _PATTERN_TERMINALS:
        return _PATTERN_TERMINALS[name]
    try:
        term = frontend(Dialect.FULL).get_terminal(name)
    except KeyError:
        return name
    return repr(term.pattern.value)


def describe_token(token: Token) -> str:
    if token.type == "$END":
        return "end of input"
    if token.type in _PATTERN_TERMINALS:
        return f"{_PATTERN_TERMINALS[token.type]} {token.value!r}"
    return repr(token.value)


__all__ = [
    "Dialect",
    "KEYWORDS",
    "FUNCTION_KEYWORDS",
    "MAX_NESTING_DEPTH",
    "TokenAdjuster",
    "frontend",
    "tokenize",
    "describe_terminal",
    "describe_token",
    "int_value",
]
