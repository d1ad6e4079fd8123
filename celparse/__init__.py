"""
celparse: parser for a small CEL-like expression language.

Modules:
  lexer:   token stream (lark basic lexer + signed-literal/depth/dialect pass)
  parser:  LALR parse and parse-tree -> AST builder
  ast:     frozen dataclass node definitions
  printer: AST -> source text
"""

from .ast import (
    Access,
    AccessOp,
    AllOp,
    AnyOp,
    BoolLit,
    Comparison,
    ComparisonOp,
    ContainsOp,
    CountOp,
    Expr,
    Field,
    FilterOp,
    Function,
    FunctionOp,
    Ident,
    IdentExpr,
    Index,
    IntLit,
    Keyword,
    ListExpr,
    Literal,
    LiteralExpr,
    Located,
    Logical,
    LogicalOp,
    Slice,
    StrLit,
    Unary,
    UnaryOp,
    Variable,
)
from .errors import ExprSyntaxError, LexError, ParseError
from .lexer import KEYWORDS, MAX_NESTING_DEPTH, Dialect, tokenize
from .parser import parse
from .printer import format_expr

__version__ = "0.1.0"

__all__ = [
    "parse",
    "tokenize",
    "format_expr",
    "Dialect",
    "KEYWORDS",
    "MAX_NESTING_DEPTH",
    "ExprSyntaxError",
    "LexError",
    "ParseError",
    "Expr",
    "Logical",
    "Function",
    "Comparison",
    "Unary",
    "Access",
    "ListExpr",
    "LiteralExpr",
    "IdentExpr",
    "LogicalOp",
    "ComparisonOp",
    "UnaryOp",
    "FunctionOp",
    "AllOp",
    "AnyOp",
    "FilterOp",
    "ContainsOp",
    "CountOp",
    "AccessOp",
    "Field",
    "Index",
    "Slice",
    "Literal",
    "IntLit",
    "BoolLit",
    "StrLit",
    "Ident",
    "Variable",
    "Keyword",
    "Located",
]
