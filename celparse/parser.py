from __future__ import annotations

from typing import Callable, Dict, List, Optional

from lark import Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken

from .ast import (
    U32_MAX,
    Access,
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
from .errors import ParseError
from .lexer import (
    FUNCTION_KEYWORDS,
    Dialect,
    describe_terminal,
    describe_token,
    frontend,
    int_value,
    lex_error_from,
    token_loc,
)

_COMPARISON_OPS = {
    "LT": ComparisonOp.LESS_THAN,
    "LE": ComparisonOp.LESS_THAN_OR_EQUAL,
    "GT": ComparisonOp.GREATER_THAN,
    "GE": ComparisonOp.GREATER_THAN_OR_EQUAL,
    "EQ": ComparisonOp.EQUALS,
    "NE": ComparisonOp.NOT_EQUALS,
    "IN": ComparisonOp.IN,
}

_UNARY_OPS = {
    "BANG": UnaryOp.NOT,
    "MINUS": UnaryOp.NEGATIVE,
}

_LITERAL_RULES = {"int_lit", "str_lit", "true_lit", "false_lit"}


def parse(text: str, dialect: Dialect = Dialect.FULL) -> Expr:
    """
    Parse `text` into an expression tree.

    Raises `LexError` or `ParseError` on the first problem found; no partial
    tree is ever returned.
    """
    try:
        tree = frontend(dialect).parse(text)
    except UnexpectedCharacters as err:
        raise lex_error_from(err) from None
    except UnexpectedToken as err:
        raise _unexpected_token(text, err, dialect) from None
    except UnexpectedEOF as err:
        raise ParseError(
            "unexpected end of input",
            loc=_end_loc(text),
            expected=_describe_expected(err.expected, dialect),
            found="end of input",
        ) from None
    return _build_expr(tree.children[0])


def _unexpected_token(text: str, err: UnexpectedToken, dialect: Dialect) -> ParseError:
    token = err.token
    found = describe_token(token)
    loc = _end_loc(text) if token.type == "$END" else token_loc(token)
    return ParseError(
        f"unexpected {found}",
        loc=loc,
        expected=_describe_expected(err.expected, dialect),
        found=found,
    )


def _describe_expected(expected, dialect: Dialect) -> List[str]:
    names = {getattr(name, "name", name) for name in expected or ()}
    allowed = dialect.terminals
    if allowed is not None:
        names = {name for name in names if name in allowed or name == "$END"}
    return sorted(describe_terminal(name) for name in names)


def _end_loc(text: str) -> Located:
    line = text.count("\n") + 1
    column = len(text) - text.rfind("\n")
    return Located(line=line, column=column, offset=len(text))


def _build_expr(node) -> Expr:
    if not isinstance(node, Tree):
        raise TypeError(f"Unexpected node type: {type(node)}")
    builder = _BUILDERS.get(_name(node))
    if builder is None:
        raise ValueError(f"Unsupported expression node: {_name(node)}")
    return builder(node)


def _build_logic_or(tree: Tree) -> Expr:
    return _fold_chain(tree, LogicalOp.OR)


def _build_logic_and(tree: Tree) -> Expr:
    return _fold_chain(tree, LogicalOp.AND)


def _fold_chain(tree: Tree, op: LogicalOp) -> Expr:
    child_nodes = [child for child in tree.children if isinstance(child, Tree)]
    result = _build_expr(child_nodes[0])
    for tail in child_nodes[1:]:
        op_token, operand = tail.children
        right = _build_expr(operand)
        result = Logical(result, op, right, loc=token_loc(op_token))
    return result


def _build_comparison(tree: Tree) -> Expr:
    left_node, tail = tree.children
    op_token, right_node = tail.children
    left = _build_expr(left_node)
    right = _build_expr(right_node)
    return Comparison(left, _COMPARISON_OPS[op_token.type], right, loc=token_loc(op_token))


def _build_prefixed(tree: Tree) -> Expr:
    *op_tokens, operand = tree.children
    expr = _build_expr(operand)
    # Prefix operators are right-associative: the innermost is the last one.
    for op_token in reversed(op_tokens):
        expr = Unary(_UNARY_OPS[op_token.type], expr, loc=token_loc(op_token))
    return expr


def _build_postfix(tree: Tree) -> Expr:
    expr = _build_expr(tree.children[0])
    for suffix in tree.children[1:]:
        kind = _name(suffix)
        if kind == "field_suffix":
            member = _member_token(suffix.children[0])
            expr = Access(expr, Field(_ident(member)), loc=token_loc(member))
        elif kind == "call_suffix":
            expr = _build_call(expr, suffix)
        elif kind == "index_suffix":
            (index_token,) = suffix.children
            expr = Access(expr, Index(_u32(index_token)), loc=_loc(suffix))
        elif kind == "slice_suffix":
            start_token, end_token = suffix.children
            start, end = _u32(start_token), _u32(end_token)
            if start > end:
                raise ParseError(
                    f"slice start {start} is greater than its end {end}",
                    loc=token_loc(start_token),
                    expected=(f"an end bound of at least {start}",),
                    found=str(end),
                    code="E-PARSE-SLICE-ORDER",
                )
            expr = Access(expr, Slice(start, end), loc=_loc(suffix))
        else:
            raise ValueError(f"Unexpected postfix child: {kind}")
    return expr


def _build_call(receiver: Expr, suffix: Tree) -> Expr:
    member = _member_token(suffix.children[0])
    args = _call_args(suffix)
    loc = token_loc(member)
    name = member.value
    if member.type == "NAME":
        raise ParseError(
            f"unknown function {name!r}",
            loc=loc,
            expected=sorted(repr(fn) for fn in FUNCTION_KEYWORDS),
            found=repr(name),
            code="E-PARSE-UNKNOWN-FUNCTION",
        )
    op: FunctionOp
    if name == "count":
        _expect_arity(name, args, 0, loc)
        op = CountOp(receiver)
    elif name == "contains":
        _expect_arity(name, args, 1, loc)
        op = ContainsOp(receiver, _literal_arg(args[0], loc))
    else:
        _expect_arity(name, args, 2, loc)
        var = _binder_arg(name, args[0], loc)
        predicate = _build_expr(args[1])
        op = _QUANTIFIERS[name](receiver, var, predicate)
    return Function(op, loc=loc)


def _call_args(suffix: Tree) -> List[Tree]:
    for child in suffix.children[1:]:
        if isinstance(child, Tree) and _name(child) == "call_args":
            return [arg for arg in child.children if isinstance(arg, Tree)]
    return []


def _expect_arity(name: str, args: List[Tree], arity: int, loc: Located) -> None:
    if len(args) == arity:
        return
    plural = "argument" if arity == 1 else "arguments"
    raise ParseError(
        f"{name}() takes {arity} {plural}, got {len(args)}",
        loc=(_loc(args[arity]) if len(args) > arity else None) or loc,
        expected=(f"{arity} {plural}",),
        found=f"{len(args)}",
        code="E-PARSE-ARITY",
    )


def _binder_arg(name: str, node: Tree, fallback: Located) -> Variable:
    if _name(node) == "var":
        return Variable(node.children[0].value)
    raise ParseError(
        f"first argument of {name}() must be a variable identifier",
        loc=_loc(node) or fallback,
        expected=("variable identifier",),
        found=_describe_node(node),
        code="E-PARSE-BINDER",
    )


def _literal_arg(node: Tree, fallback: Located) -> Literal:
    if _name(node) in _LITERAL_RULES:
        return _literal(node)
    raise ParseError(
        "argument of contains() must be a literal",
        loc=_loc(node) or fallback,
        expected=("literal",),
        found=_describe_node(node),
        code="E-PARSE-CONTAINS-ARG",
    )


def _literal(node: Tree) -> Literal:
    kind = _name(node)
    token = node.children[0]
    if kind == "int_lit":
        return IntLit(int_value(token))
    if kind == "str_lit":
        # Strings carry no escapes: the value is everything between the quotes.
        return StrLit(token.value[1:-1])
    if kind == "true_lit":
        return BoolLit(True)
    if kind == "false_lit":
        return BoolLit(False)
    raise ValueError(f"Unsupported literal node: {kind}")


def _build_literal(tree: Tree) -> Expr:
    return LiteralExpr(_literal(tree), loc=_loc(tree))


def _build_list(tree: Tree) -> Expr:
    items = tuple(_build_expr(child) for child in tree.children if isinstance(child, Tree))
    return ListExpr(items, loc=_loc(tree))


def _build_paren(tree: Tree) -> Expr:
    inner = next(child for child in tree.children if isinstance(child, Tree))
    return _build_expr(inner)


def _build_var(tree: Tree) -> Expr:
    return IdentExpr(Variable(tree.children[0].value), loc=_loc(tree))


def _build_keyword_ident(tree: Tree) -> Expr:
    return IdentExpr(Keyword(tree.children[0].value), loc=_loc(tree))


def _member_token(node: Tree) -> Token:
    return node.children[0]


def _ident(token: Token) -> Ident:
    if token.type == "NAME":
        return Variable(token.value)
    return Keyword(token.value)


def _u32(token: Token) -> int:
    value = int_value(token)
    if not 0 <= value <= U32_MAX:
        raise ParseError(
            f"index {value} is out of range for an unsigned 32-bit integer",
            loc=token_loc(token),
            expected=(f"integer in 0..{U32_MAX}",),
            found=str(value),
            code="E-PARSE-INDEX-RANGE",
        )
    return value


def _describe_node(node: Tree) -> str:
    kind = _name(node)
    if kind == "var":
        return f"identifier {node.children[0].value!r}"
    if kind == "keyword_ident":
        return f"keyword {node.children[0].value!r}"
    if kind == "paren_expr":
        return "parenthesized expression"
    if kind in _LITERAL_RULES:
        return "literal"
    return "expression"


def _loc(tree: Tree) -> Optional[Located]:
    meta = tree.meta
    if getattr(meta, "empty", True):
        return None
    return Located(line=meta.line, column=meta.column, offset=meta.start_pos)


def _name(node: Tree | Token) -> str:
    if isinstance(node, Tree):
        data = node.data
        if isinstance(data, Token):
            return data.value
        return data
    if isinstance(node, Token):
        return node.type
    return str(node)


_QUANTIFIERS: Dict[str, Callable[[Expr, Variable, Expr], FunctionOp]] = {
    "all": AllOp,
    "any": AnyOp,
    "filter": FilterOp,
}

_BUILDERS: Dict[str, Callable[[Tree], Expr]] = {
    "logic_or": _build_logic_or,
    "logic_and": _build_logic_and,
    "comparison": _build_comparison,
    "prefixed": _build_prefixed,
    "postfix": _build_postfix,
    "paren_expr": _build_paren,
    "list_literal": _build_list,
    "int_lit": _build_literal,
    "str_lit": _build_literal,
    "true_lit": _build_literal,
    "false_lit": _build_literal,
    "var": _build_var,
    "keyword_ident": _build_keyword_ident,
}


__all__ = ["parse"]
