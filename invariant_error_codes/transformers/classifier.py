"""Recognize invariant calls and imports of the invariant module.

Classification is purely syntactic: an invariant call is any call whose
target is a bare name equal to the configured helper name. No scope or
binding resolution is attempted, since the helper name is reserved by
convention in codebases that use this tool.

Nodes produced by the rewrite engine are recorded in a per-traversal
``processed`` set and are never classified again.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

from enum import Enum

import libcst as cst

from ..context import RewriteConfig
from ..exceptions import MessageNotStaticallyFoldable
from ..folding import fold_to_string
from .builders import dotted_name


class CallKind(Enum):
    """Classification of a visited node."""

    IRRELEVANT = "irrelevant"
    ASSERTION_IMPORT = "assertion_import"
    ASSERTION_CALL = "assertion_call"


def _literal_value(node: cst.BaseExpression) -> str | None:
    if isinstance(node, cst.SimpleString):
        value = node.evaluated_value
        if isinstance(value, str):
            return value
    return None


class CallClassifier:
    """Classify calls and import statements for the rewrite engine.

    Args:
        invariant_name: Plain name of the development assertion helper.
        invariant_module: Dotted module name of the development helper.
        processed: Set of nodes already produced or handled in this
            traversal. Shared with the engine.
    """

    def __init__(
        self, invariant_name: str, invariant_module: str, processed: set[cst.CSTNode] | None = None
    ) -> None:
        self.invariant_name = invariant_name
        self.invariant_module = invariant_module
        self.processed: set[cst.CSTNode] = processed if processed is not None else set()

    @classmethod
    def from_config(cls, config: RewriteConfig, processed: set[cst.CSTNode] | None = None) -> CallClassifier:
        return cls(config.invariant_name, config.invariant_module, processed)

    def mark(self, node: cst.CSTNode) -> None:
        """Record ``node`` and all of its descendants as processed."""
        pending = [node]
        while pending:
            current = pending.pop()
            self.processed.add(current)
            pending.extend(current.children)

    def is_processed(self, node: cst.CSTNode) -> bool:
        return node in self.processed

    def classify(self, node: cst.CSTNode) -> CallKind:
        if node in self.processed:
            return CallKind.IRRELEVANT

        if isinstance(node, cst.Import):
            if any(dotted_name(alias.name) == self.invariant_module for alias in node.names):
                return CallKind.ASSERTION_IMPORT
            return CallKind.IRRELEVANT

        if isinstance(node, cst.ImportFrom):
            if not node.relative and dotted_name(node.module) == self.invariant_module:
                return CallKind.ASSERTION_IMPORT
            return CallKind.IRRELEVANT

        if not isinstance(node, cst.Call):
            return CallKind.IRRELEVANT

        if self._is_module_import_call(node):
            return CallKind.ASSERTION_IMPORT

        if isinstance(node.func, cst.Name) and node.func.value == self.invariant_name:
            return CallKind.ASSERTION_CALL

        return CallKind.IRRELEVANT

    def _is_module_import_call(self, node: cst.Call) -> bool:
        # __import__('name') or importlib.import_module('name')
        func = node.func
        is_import = (isinstance(func, cst.Name) and func.value == "__import__") or (
            isinstance(func, cst.Attribute) and func.attr.value == "import_module"
        )
        if not is_import or not node.args or node.args[0].keyword is not None:
            return False
        return _literal_value(node.args[0].value) == self.invariant_module

    def is_rewritten_shape(self, node: cst.If, dev_flag: str) -> bool:
        """Return True when ``node`` has a shape this tool produces.

        Matches ``if not C: invariant(False, "...")`` and the dev/prod switch
        ``if not C: if FLAG: invariant(False, "...") else: HELPER("N", ...)``.
        The message must fold to a constant string.
        """
        inner = _negated_guard_body(node)
        if inner is None:
            return False
        if self._is_dev_statement(inner):
            return True

        if not isinstance(inner, cst.If) or dotted_name(inner.test) != dev_flag:
            return False
        if not isinstance(inner.orelse, cst.Else):
            return False
        dev = _single_statement(inner.body)
        prod = _single_statement(inner.orelse.body)
        return dev is not None and prod is not None and self._is_dev_statement(dev) and _is_prod_statement(prod)

    def fallback_statement(self, node: cst.If) -> cst.SimpleStatementLine | None:
        """Return the ``invariant(False, "...")`` line of ``if not C: invariant(False, "...")``."""
        inner = _negated_guard_body(node)
        if isinstance(inner, cst.SimpleStatementLine) and self._is_dev_statement(inner):
            return inner
        return None

    def _is_dev_statement(self, statement: cst.BaseStatement) -> bool:
        call = _statement_call(statement)
        if (
            call is None
            or not isinstance(call.func, cst.Name)
            or call.func.value != self.invariant_name
            or len(call.args) < 2
        ):
            return False
        condition, message = call.args[:2]
        if not (isinstance(condition.value, cst.Name) and condition.value.value == "False"):
            return False
        if message.keyword is not None or message.star:
            return False
        try:
            fold_to_string(message.value)
        except MessageNotStaticallyFoldable:
            return False
        return True


def _negated_guard_body(node: cst.If) -> cst.BaseStatement | None:
    test = node.test
    if node.orelse is not None or not (isinstance(test, cst.UnaryOperation) and isinstance(test.operator, cst.Not)):
        return None
    return _single_statement(node.body)


def _single_statement(suite: cst.BaseSuite) -> cst.BaseStatement | None:
    if isinstance(suite, cst.IndentedBlock) and len(suite.body) == 1:
        return suite.body[0]
    return None


def _statement_call(statement: cst.BaseStatement) -> cst.Call | None:
    if (
        isinstance(statement, cst.SimpleStatementLine)
        and len(statement.body) == 1
        and isinstance(statement.body[0], cst.Expr)
        and isinstance(statement.body[0].value, cst.Call)
    ):
        return statement.body[0].value
    return None


def _is_prod_statement(statement: cst.BaseStatement) -> bool:
    call = _statement_call(statement)
    if call is None or not isinstance(call.func, cst.Name) or not call.args:
        return False
    code = _literal_value(call.args[0].value)
    return code is not None and code.isdigit()
