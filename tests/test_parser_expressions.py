from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from celparse import (
    Access,
    BoolLit,
    Comparison,
    ComparisonOp,
    Field,
    IdentExpr,
    Index,
    IntLit,
    Keyword,
    ListExpr,
    LiteralExpr,
    Located,
    Logical,
    LogicalOp,
    Slice,
    StrLit,
    Unary,
    UnaryOp,
    Variable,
    parse,
)


def var(name: str) -> IdentExpr:
    return IdentExpr(Variable(name))


def num(value: int) -> LiteralExpr:
    return LiteralExpr(IntLit(value))


def test_comparison_binds_tighter_than_and() -> None:
    assert parse("1 < 2 && 3 > 4") == Logical(
        Comparison(num(1), ComparisonOp.LESS_THAN, num(2)),
        LogicalOp.AND,
        Comparison(num(3), ComparisonOp.GREATER_THAN, num(4)),
    )


def test_and_binds_tighter_than_or() -> None:
    assert parse("a && b || c") == Logical(
        Logical(var("a"), LogicalOp.AND, var("b")), LogicalOp.OR, var("c")
    )
    assert parse("a || b && c") == Logical(
        var("a"), LogicalOp.OR, Logical(var("b"), LogicalOp.AND, var("c"))
    )


def test_logical_operators_are_left_associative() -> None:
    assert parse("a && b && c") == Logical(
        Logical(var("a"), LogicalOp.AND, var("b")), LogicalOp.AND, var("c")
    )
    assert parse("a || b || c") == Logical(
        Logical(var("a"), LogicalOp.OR, var("b")), LogicalOp.OR, var("c")
    )


def test_parentheses_override_precedence() -> None:
    assert parse("(a || b) && c") == Logical(
        Logical(var("a"), LogicalOp.OR, var("b")), LogicalOp.AND, var("c")
    )
    assert parse("((x))") == var("x")


def test_every_comparison_operator() -> None:
    ops = {
        "<": ComparisonOp.LESS_THAN,
        "<=": ComparisonOp.LESS_THAN_OR_EQUAL,
        ">": ComparisonOp.GREATER_THAN,
        ">=": ComparisonOp.GREATER_THAN_OR_EQUAL,
        "==": ComparisonOp.EQUALS,
        "!=": ComparisonOp.NOT_EQUALS,
        "in": ComparisonOp.IN,
    }
    for text, op in ops.items():
        assert parse(f"a {text} b") == Comparison(var("a"), op, var("b"))


def test_in_takes_a_list_on_the_right() -> None:
    assert parse("x in [1, 2]") == Comparison(
        var("x"), ComparisonOp.IN, ListExpr((num(1), num(2)))
    )


def test_parenthesized_comparison_can_be_compared() -> None:
    assert parse("(a < b) == c") == Comparison(
        Comparison(var("a"), ComparisonOp.LESS_THAN, var("b")), ComparisonOp.EQUALS, var("c")
    )


def test_unary_operators_stack() -> None:
    assert parse("!!x") == Unary(UnaryOp.NOT, Unary(UnaryOp.NOT, var("x")))
    assert parse("--x") == Unary(UnaryOp.NEGATIVE, Unary(UnaryOp.NEGATIVE, var("x")))
    assert parse("!-x") == Unary(UnaryOp.NOT, Unary(UnaryOp.NEGATIVE, var("x")))


def test_unary_binds_tighter_than_comparison() -> None:
    assert parse("!a == b") == Comparison(
        Unary(UnaryOp.NOT, var("a")), ComparisonOp.EQUALS, var("b")
    )


def test_unary_applies_to_whole_postfix_chain() -> None:
    assert parse("-x.a") == Unary(UnaryOp.NEGATIVE, Access(var("x"), Field(Variable("a"))))


def test_negative_literal_versus_negation() -> None:
    assert parse("-1") == num(-1)
    assert parse("- 1") == Unary(UnaryOp.NEGATIVE, num(1))
    assert parse("--1") == Unary(UnaryOp.NEGATIVE, num(-1))
    assert parse("x > -1") == Comparison(var("x"), ComparisonOp.GREATER_THAN, num(-1))


def test_scalar_literals() -> None:
    assert parse("true") == LiteralExpr(BoolLit(True))
    assert parse("false") == LiteralExpr(BoolLit(False))
    assert parse("'a b'") == LiteralExpr(StrLit("a b"))
    assert parse('"it\'s"') == LiteralExpr(StrLit("it's"))
    assert parse("''") == LiteralExpr(StrLit(""))
    assert parse("007") == num(7)


def test_integer_literal_extremes() -> None:
    assert parse(str(2**127 - 1)) == num(2**127 - 1)
    assert parse(str(-(2**127))) == num(-(2**127))


def test_access_chain_is_left_associative() -> None:
    assert parse("x.a.b[0]") == Access(
        Access(Access(var("x"), Field(Variable("a"))), Field(Variable("b"))), Index(0)
    )


def test_list_literal_with_index() -> None:
    assert parse("[1, 2, 3][1]") == Access(ListExpr((num(1), num(2), num(3))), Index(1))


def test_empty_and_nested_lists() -> None:
    assert parse("[]") == ListExpr(())
    assert parse("[[1], []]") == ListExpr((ListExpr((num(1),)), ListExpr(())))


def test_slice_access() -> None:
    assert parse("x[1..3]") == Access(var("x"), Slice(1, 3))
    assert parse("x[2..2]") == Access(var("x"), Slice(2, 2))
    assert parse(f"x[0..{2**32 - 1}]") == Access(var("x"), Slice(0, 2**32 - 1))


def test_keyword_as_field_and_primary() -> None:
    assert parse("x.count") == Access(var("x"), Field(Keyword("count")))
    assert parse("filter") == IdentExpr(Keyword("filter"))
    assert parse("all.any") == Access(IdentExpr(Keyword("all")), Field(Keyword("any")))


def test_whitespace_and_newlines_are_ignored() -> None:
    assert parse("\n  a\t&&\r\n b ") == parse("a && b")


def test_locations_are_recorded_but_not_compared() -> None:
    expr = parse("a && b")
    assert expr.loc == Located(line=1, column=3, offset=2)
    assert expr.left.loc == Located(line=1, column=1, offset=0)
    assert expr.right.loc == Located(line=1, column=6, offset=5)
    assert expr == Logical(var("a"), LogicalOp.AND, var("b"), loc=Located(9, 9, 9))


def test_long_postfix_chain_does_not_recurse() -> None:
    expr = parse("x" + ".a" * 2000)
    depth = 0
    while isinstance(expr, Access):
        depth += 1
        expr = expr.value
    assert depth == 2000
    assert expr == var("x")


def test_long_logical_chain() -> None:
    expr = parse(" || ".join(["a"] * 1000))
    depth = 0
    while isinstance(expr, Logical):
        depth += 1
        assert expr.right == var("a")
        expr = expr.left
    assert depth == 999


def test_parse_is_safe_across_threads() -> None:
    sources = [
        "x.filter(y, y > 1).count() >= 2",
        "a && b || !c",
        "[1, 2, 3][0..2]",
        "v in ['a', 'b'] && w.contains(-4)",
    ] * 25
    expected = [parse(src) for src in sources]
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(parse, sources))
    assert results == expected
