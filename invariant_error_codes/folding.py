"""Static folding of message expressions into string literals.

Invariant messages must be known at rewrite time. This module reduces
the small family of expressions that are constant strings by
construction:

- string literals, including raw strings and parenthesized literals
- implicit concatenation (``"a" "b"``)
- ``+`` chains whose operands all fold

Anything else (names, calls, f-strings, ``%`` formatting, bytes) is
rejected with :class:`MessageNotStaticallyFoldable`.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

import libcst as cst

from .exceptions import MessageNotStaticallyFoldable


def fold_to_string(node: cst.BaseExpression) -> str:
    """Fold ``node`` to the string value it always evaluates to.

    Args:
        node: Expression to fold.

    Returns:
        The constant string value.

    Raises:
        MessageNotStaticallyFoldable: If ``node`` is not a constant string.
    """
    if isinstance(node, cst.SimpleString | cst.ConcatenatedString):
        value = node.evaluated_value
        if isinstance(value, str):
            return value
        raise MessageNotStaticallyFoldable(
            "Invariant message must be a str literal, not bytes or an f-string", node_type=type(node).__name__
        )

    if isinstance(node, cst.BinaryOperation) and isinstance(node.operator, cst.Add):
        return fold_to_string(node.left) + fold_to_string(node.right)

    raise MessageNotStaticallyFoldable(
        f"Invariant message must be a string literal, got {type(node).__name__}", node_type=type(node).__name__
    )

