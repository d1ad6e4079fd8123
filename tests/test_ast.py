from __future__ import annotations

import dataclasses

import pytest

from celparse import (
    BoolLit,
    ComparisonOp,
    IdentExpr,
    Index,
    IntLit,
    Keyword,
    ListExpr,
    LiteralExpr,
    Located,
    LogicalOp,
    Slice,
    UnaryOp,
    Variable,
    parse,
)


def test_equality_is_structural_and_ignores_location() -> None:
    assert IdentExpr(Variable("x"), loc=Located(1, 1, 0)) == IdentExpr(Variable("x"), loc=Located(3, 4, 9))
    assert IdentExpr(Variable("x")) != IdentExpr(Keyword("x"))
    assert LiteralExpr(IntLit(1)) != LiteralExpr(BoolLit(True))


def test_nodes_are_immutable() -> None:
    expr = parse("[1, 2]")
    assert isinstance(expr, ListExpr)
    assert isinstance(expr.items, tuple)
    with pytest.raises(dataclasses.FrozenInstanceError):
        expr.items = ()  # type: ignore[misc]


def test_nodes_are_hashable() -> None:
    assert len({parse("a && b"), parse("a  &&  b"), parse("a || b")}) == 2


def test_repr_omits_location() -> None:
    assert repr(parse("x")) == "IdentExpr(ident=Variable(name='x'))"


def test_index_and_slice_enforce_u32_bounds() -> None:
    Index(0)
    Index(2**32 - 1)
    with pytest.raises(ValueError):
        Index(-1)
    with pytest.raises(ValueError):
        Index(2**32)
    Slice(2, 2)
    with pytest.raises(ValueError):
        Slice(3, 1)
    with pytest.raises(ValueError):
        Slice(0, 2**32)


def test_int_literal_enforces_128_bit_range() -> None:
    IntLit(-(2**127))
    with pytest.raises(ValueError):
        IntLit(2**127)


def test_operator_enums_render_their_symbols() -> None:
    assert [str(op) for op in LogicalOp] == ["&&", "||"]
    assert [str(op) for op in UnaryOp] == ["!", "-"]
    assert str(ComparisonOp.IN) == "in"
    assert str(ComparisonOp.LESS_THAN_OR_EQUAL) == "<="
