"""
Terse constructors for hand-built HCL syntax trees.

Parsing lives outside the runtime, so tests build programs directly from
AST nodes. Pass `line=` to give a node a span for error-location checks.
"""

from typing import Optional

from hcl import ast
from hcl.tokens import TokenType, UNKNOWN_SPAN, span_at


def _span(line: Optional[int]):
    return span_at(line) if line is not None else UNKNOWN_SPAN


# --- Expressions ---

def lit(value, line=None):
    return ast.Literal(value, span=_span(line))


def num(value, line=None):
    return ast.Literal(float(value), span=_span(line))


def var(name, line=None):
    return ast.Identifier(name, span=_span(line))


def group(expression):
    return ast.Grouping(expression)


def unary(operator: TokenType, operand, line=None):
    return ast.UnaryOp(operator, operand, span=_span(line))


def binary(left, operator: TokenType, right, line=None):
    return ast.BinaryOp(left, operator, right, span=_span(line))


def logical(left, operator: TokenType, right):
    return ast.LogicalOp(left, operator, right)


def assign(name, value, line=None):
    return ast.Assignment(name, value, span=_span(line))


def call(callee, *arguments, line=None):
    return ast.FunctionCall(callee, list(arguments), span=_span(line))


def get(obj, name, line=None):
    return ast.MemberAccess(obj, name, span=_span(line))


def set_(obj, name, value, line=None):
    return ast.MemberAssignment(obj, name, value, span=_span(line))


def self_(line=None):
    return ast.SelfExpr(span=_span(line))


def super_(method, line=None):
    return ast.SuperAccess(method, span=_span(line))


# --- Statements ---

def expr(expression):
    return ast.ExpressionStatement(expression)


def print_(expression):
    return ast.PrintStatement(expression)


def let(name, initializer=None):
    return ast.LetStatement(name, initializer)


def block(*statements):
    return ast.Block(list(statements))


def if_(condition, then_branch, else_branch=None):
    return ast.IfStatement(condition, then_branch, else_branch)


def loop(*body):
    return ast.LoopStatement(block(*body))


def brk(line=None):
    return ast.BreakStatement(span=_span(line))


def ret(value=None, line=None):
    return ast.ReturnStatement(value, span=_span(line))


def fn(name, params, *body):
    return ast.FunctionDef(name, list(params), list(body))


def cls(name, *methods, superclass=None, class_methods=(), line=None):
    return ast.ClassDef(
        name,
        var(superclass, line=line) if superclass is not None else None,
        list(methods),
        list(class_methods),
        span=_span(line),
    )


def import_(name, std=False, line=None):
    return ast.ImportStatement(lit(name, line=line), std, span=_span(line))
