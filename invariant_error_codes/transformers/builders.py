"""libcst node builders for the rewritten invariant shape.

The rewrite engine produces one of two statement shapes for each
``invariant(condition, message, *args)`` call::

    if not condition:
        invariant(False, message, *args)

    if not condition:
        if __DEV__:
            invariant(False, message, *args)
        else:
            _prod_invariant("42", *args)

The helpers here build those nodes and the hoisted helper import. They
never look at the registry or at traversal state.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import cast

import libcst as cst

# Expressions that bind looser than ``not`` or cannot follow it unparenthesized.
_NEEDS_PARENS = (cst.BooleanOperation, cst.IfExp, cst.Lambda, cst.NamedExpr, cst.Yield)


def render(node: cst.CSTNode) -> str:
    """Return the source text of ``node``."""
    return cst.Module(body=[]).code_for_node(node)


def dotted_name(node: cst.CSTNode | None) -> str | None:
    """Return ``a.b.c`` for a Name/Attribute chain, otherwise ``None``."""
    parts: list[str] = []
    part = node
    while isinstance(part, cst.Attribute):
        parts.insert(0, part.attr.value)
        part = part.value
    if not isinstance(part, cst.Name):
        return None
    parts.insert(0, part.value)
    return ".".join(parts)


def dotted_expression(name: str) -> cst.BaseExpression:
    """Build a Name/Attribute chain for a dotted name such as ``settings.DEBUG``."""
    head, *rest = name.split(".")
    expr: cst.BaseExpression = cst.Name(head)
    for attr in rest:
        expr = cst.Attribute(value=expr, attr=cst.Name(attr))
    return expr


def negate(condition: cst.BaseExpression) -> cst.UnaryOperation:
    """Build ``not condition``, parenthesizing the operand when required.

    Conditions that span several lines are only legal inside brackets, so
    they are parenthesized as well.
    """
    if not condition.lpar and (isinstance(condition, _NEEDS_PARENS) or "\n" in render(condition)):
        condition = condition.with_changes(lpar=[cst.LeftParen()], rpar=[cst.RightParen()])
    return cst.UnaryOperation(operator=cst.Not(), expression=condition)


def string_literal(value: str) -> cst.SimpleString:
    return cst.SimpleString(repr(value))


def code_literal(code: str) -> cst.SimpleString:
    return cst.SimpleString(f'"{code}"')


def build_dev_call(call: cst.Call, message: str) -> cst.Call:
    """Build ``invariant(False, message, *rest)`` from the original ``call``.

    A message that was already a single string literal keeps its original
    spelling; folded messages are re-emitted as one literal.
    """
    condition_arg, message_arg, *rest = call.args
    message_node = message_arg.value
    if not isinstance(message_node, cst.SimpleString):
        message_node = string_literal(message)
    return call.with_changes(
        args=[
            condition_arg.with_changes(value=cst.Name("False")),
            message_arg.with_changes(value=message_node),
            *rest,
        ]
    )


def build_prod_call(call: cst.Call, binding: str, code: str) -> cst.Call:
    """Build ``binding("code", *rest)`` from the original ``call``.

    The format arguments are deep-cloned so the development and production
    branches never share node instances.
    """
    _, message_arg, *rest = call.args
    code_arg = cst.Arg(value=code_literal(code))
    if rest:
        code_arg = code_arg.with_changes(comma=message_arg.comma)
    return call.with_changes(func=cst.Name(binding), args=[code_arg, *(arg.deep_clone() for arg in rest)])


def expression_statement(call: cst.BaseExpression) -> cst.SimpleStatementLine:
    return cst.SimpleStatementLine(body=[cst.Expr(value=call)])


def build_dev_switch(
    dev_statement: cst.SimpleStatementLine, prod_call: cst.Call, dev_flag: str = "__DEV__"
) -> cst.If:
    """Build ``if dev_flag: <dev_statement> else: <prod_call>``."""
    return cst.If(
        test=dotted_expression(dev_flag),
        body=cst.IndentedBlock(body=[dev_statement]),
        orelse=cst.Else(body=cst.IndentedBlock(body=[expression_statement(prod_call)])),
    )


def build_replacement(
    condition: cst.BaseExpression,
    dev_call: cst.Call,
    prod_call: cst.Call | None = None,
    dev_flag: str = "__DEV__",
) -> cst.If:
    """Build the ``if not condition:`` statement replacing an invariant call.

    Without ``prod_call`` the body is just the development call (registry
    miss). Otherwise the body switches on ``dev_flag``.
    """
    body: cst.BaseStatement
    if prod_call is None:
        body = expression_statement(dev_call)
    else:
        body = build_dev_switch(expression_statement(dev_call), prod_call, dev_flag)
    return cst.If(test=negate(condition), body=cst.IndentedBlock(body=[body]))


def place_statement(
    node: cst.BaseStatement,
    leading_lines: Sequence[cst.EmptyLine] = (),
    trailing: cst.TrailingWhitespace | None = None,
) -> cst.BaseStatement:
    """Attach the comments/blank lines and trailing comment of a replaced line."""
    changes: dict[str, object] = {}
    if leading_lines:
        changes["leading_lines"] = list(leading_lines)
    if trailing is not None:
        if isinstance(node, cst.SimpleStatementLine):
            changes["trailing_whitespace"] = trailing
        elif isinstance(node, cst.If) and isinstance(node.body, cst.IndentedBlock):
            changes["body"] = node.body.with_changes(header=trailing)
    return node.with_changes(**changes) if changes else node


def build_helper_import(module: str, name: str, alias: str) -> cst.SimpleStatementLine:
    """Build ``from module import name as alias`` (or without ``as`` when equal)."""
    asname = None if alias == name else cst.AsName(name=cst.Name(alias))
    module_name = cast(cst.Attribute | cst.Name, dotted_expression(module))
    return cst.SimpleStatementLine(
        body=[cst.ImportFrom(module=module_name, names=[cst.ImportAlias(name=cst.Name(name), asname=asname)])]
    )


def is_docstring(statement: cst.BaseStatement) -> bool:
    return (
        isinstance(statement, cst.SimpleStatementLine)
        and len(statement.body) == 1
        and isinstance(statement.body[0], cst.Expr)
        and isinstance(statement.body[0].value, cst.SimpleString | cst.ConcatenatedString)
    )


def _is_future_import(statement: cst.BaseStatement) -> bool:
    return (
        isinstance(statement, cst.SimpleStatementLine)
        and bool(statement.body)
        and all(
            isinstance(small, cst.ImportFrom) and not small.relative and dotted_name(small.module) == "__future__"
            for small in statement.body
        )
    )


def hoist_index(body: Sequence[cst.BaseStatement]) -> int:
    """Return the first module-body index where a new import may be inserted.

    The module docstring and ``from __future__`` imports must stay first.
    """
    index = 0
    if body and is_docstring(body[0]):
        index = 1
    while index < len(body) and _is_future_import(body[index]):
        index += 1
    return index
