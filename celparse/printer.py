from __future__ import annotations

from . import ast

# Binding strength, loosest first; mirrors the rule order in grammar.lark.
_OR, _AND, _COMPARISON, _UNARY, _POSTFIX, _PRIMARY = range(1, 7)

_LOGICAL_PREC = {
    ast.LogicalOp.OR: _OR,
    ast.LogicalOp.AND: _AND,
}


def format_expr(expr: ast.Expr) -> str:
    """Render `expr` as source text that parses back to an equal tree."""
    if isinstance(expr, ast.Logical):
        prec = _LOGICAL_PREC[expr.op]
        left = _operand(expr.left, prec)
        right = _operand(expr.right, prec + 1)
        return f"{left} {expr.op} {right}"
    if isinstance(expr, ast.Comparison):
        # Comparisons never chain, so both sides bind tighter.
        left = _operand(expr.left, _UNARY)
        right = _operand(expr.right, _UNARY)
        return f"{left} {expr.op} {right}"
    if isinstance(expr, ast.Unary):
        if isinstance(expr.operand, ast.Unary):
            operand = format_expr(expr.operand)
        else:
            operand = _operand(expr.operand, _POSTFIX)
        if expr.op is ast.UnaryOp.NEGATIVE and (operand[:1].isdigit() or operand.startswith("-")):
            # `-1` would lex as a single negative literal.
            return f"{expr.op} {operand}"
        return f"{expr.op}{operand}"
    if isinstance(expr, ast.Access):
        return _operand(expr.value, _POSTFIX) + format_access(expr.op)
    if isinstance(expr, ast.Function):
        return format_function(expr.op)
    if isinstance(expr, ast.ListExpr):
        return "[" + ", ".join(format_expr(item) for item in expr.items) + "]"
    if isinstance(expr, ast.LiteralExpr):
        return format_literal(expr.literal)
    if isinstance(expr, ast.IdentExpr):
        return expr.ident.name
    raise TypeError(f"cannot format {type(expr).__name__}")


def format_function(op: ast.FunctionOp) -> str:
    receiver = _operand(op.receiver, _POSTFIX)
    if isinstance(op, ast.AllOp):
        return f"{receiver}.all({op.var.name}, {format_expr(op.predicate)})"
    if isinstance(op, ast.AnyOp):
        return f"{receiver}.any({op.var.name}, {format_expr(op.predicate)})"
    if isinstance(op, ast.FilterOp):
        return f"{receiver}.filter({op.var.name}, {format_expr(op.predicate)})"
    if isinstance(op, ast.ContainsOp):
        return f"{receiver}.contains({format_literal(op.value)})"
    if isinstance(op, ast.CountOp):
        return f"{receiver}.count()"
    raise TypeError(f"cannot format {type(op).__name__}")


def format_access(op: ast.AccessOp) -> str:
    if isinstance(op, ast.Field):
        return f".{op.ident.name}"
    if isinstance(op, ast.Index):
        return f"[{op.index}]"
    if isinstance(op, ast.Slice):
        return f"[{op.start}..{op.end}]"
    raise TypeError(f"cannot format {type(op).__name__}")


def format_literal(literal: ast.Literal) -> str:
    if isinstance(literal, ast.BoolLit):
        return "true" if literal.value else "false"
    if isinstance(literal, ast.IntLit):
        return str(literal.value)
    if isinstance(literal, ast.StrLit):
        if "'" not in literal.value:
            return f"'{literal.value}'"
        if '"' not in literal.value:
            return f'"{literal.value}"'
        raise ValueError("string literal contains both quote characters and has no source form")
    raise TypeError(f"cannot format {type(literal).__name__}")


def _operand(expr: ast.Expr, min_prec: int) -> str:
    text = format_expr(expr)
    if _precedence(expr) < min_prec:
        return f"({text})"
    return text


def _precedence(expr: ast.Expr) -> int:
    if isinstance(expr, ast.Logical):
        return _LOGICAL_PREC[expr.op]
    if isinstance(expr, ast.Comparison):
        return _COMPARISON
    if isinstance(expr, ast.Unary):
        return _UNARY
    if isinstance(expr, (ast.Access, ast.Function)):
        return _POSTFIX
    return _PRIMARY


__all__ = ["format_expr", "format_function", "format_access", "format_literal"]
