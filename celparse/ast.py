from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

U32_MAX = 2**32 - 1
I128_MIN = -(2**127)
I128_MAX = 2**127 - 1


@dataclass(frozen=True)
class Located:
    line: int
    column: int
    offset: int = 0


class Ident:
    name: str


@dataclass(frozen=True)
class Variable(Ident):
    """User-bound identifier."""

    name: str


@dataclass(frozen=True)
class Keyword(Ident):
    """Identifier drawn from the reserved-word set."""

    name: str


class Literal:
    value: object


@dataclass(frozen=True)
class IntLit(Literal):
    value: int

    def __post_init__(self) -> None:
        if not I128_MIN <= self.value <= I128_MAX:
            raise ValueError(f"integer literal out of 128-bit range: {self.value}")


@dataclass(frozen=True)
class BoolLit(Literal):
    value: bool


@dataclass(frozen=True)
class StrLit(Literal):
    value: str


class LogicalOp(Enum):
    AND = "&&"
    OR = "||"

    def __str__(self) -> str:
        return self.value


class ComparisonOp(Enum):
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    EQUALS = "=="
    NOT_EQUALS = "!="
    IN = "in"

    def __str__(self) -> str:
        return self.value


class UnaryOp(Enum):
    NOT = "!"
    NEGATIVE = "-"

    def __str__(self) -> str:
        return self.value


class AccessOp:
    pass


@dataclass(frozen=True)
class Field(AccessOp):
    ident: Ident


@dataclass(frozen=True)
class Index(AccessOp):
    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index <= U32_MAX:
            raise ValueError(f"index out of u32 range: {self.index}")


@dataclass(frozen=True)
class Slice(AccessOp):
    start: int
    end: int

    def __post_init__(self) -> None:
        if not (0 <= self.start <= U32_MAX and 0 <= self.end <= U32_MAX):
            raise ValueError(f"slice bounds out of u32 range: {self.start}..{self.end}")
        if self.start > self.end:
            raise ValueError(f"slice start {self.start} is after end {self.end}")


class Expr:
    loc: Optional[Located]

    def __str__(self) -> str:
        from .printer import format_expr

        return format_expr(self)


class FunctionOp:
    receiver: Expr


@dataclass(frozen=True)
class AllOp(FunctionOp):
    """`receiver.all(var, predicate)`; `var` is visible only inside `predicate`."""

    receiver: Expr
    var: Variable
    predicate: Expr


@dataclass(frozen=True)
class AnyOp(FunctionOp):
    receiver: Expr
    var: Variable
    predicate: Expr


@dataclass(frozen=True)
class FilterOp(FunctionOp):
    receiver: Expr
    var: Variable
    predicate: Expr


@dataclass(frozen=True)
class ContainsOp(FunctionOp):
    receiver: Expr
    value: Literal


@dataclass(frozen=True)
class CountOp(FunctionOp):
    receiver: Expr


# Expression nodes carry `loc` outside equality and repr so trees compare
# structurally.
@dataclass(frozen=True)
class Logical(Expr):
    left: Expr
    op: LogicalOp
    right: Expr
    loc: Optional[Located] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Function(Expr):
    op: FunctionOp
    loc: Optional[Located] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Comparison(Expr):
    left: Expr
    op: ComparisonOp
    right: Expr
    loc: Optional[Located] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Unary(Expr):
    op: UnaryOp
    operand: Expr
    loc: Optional[Located] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Access(Expr):
    value: Expr
    op: AccessOp
    loc: Optional[Located] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ListExpr(Expr):
    items: Tuple[Expr, ...] = ()
    loc: Optional[Located] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class LiteralExpr(Expr):
    literal: Literal
    loc: Optional[Located] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class IdentExpr(Expr):
    ident: Ident
    loc: Optional[Located] = field(default=None, compare=False, repr=False)
