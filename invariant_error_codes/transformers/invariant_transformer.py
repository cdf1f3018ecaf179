"""Rewrite ``invariant`` calls into dev/prod error-code branches using libcst.

Turns this code::

    invariant(condition, "Expected %s, got %s.", expected, actual)

into this::

    from invariant_error_codes.runtime import prod_invariant as _prod_invariant

    if not condition:
        if __DEV__:
            invariant(False, "Expected %s, got %s.", expected, actual)
        else:
            _prod_invariant("42", expected, actual)

where ``42`` is the code assigned to the message in the registry. The
condition is checked before any call is made, the verbose message only
survives in the ``__DEV__`` branch, and a later dead-code elimination
stage strips whichever branch the build does not need. Messages that
are not in the registry yet keep the verbose call only::

    if not condition:
        invariant(False, "Expected %s, got %s.", expected, actual)

The transform runs as a single post-order pass. Every node it produces
is recorded as processed, and statements it produced on an earlier run
are recognized and skipped, so running it twice gives the same output
as running it once. A verbose-only statement whose message has since been
assigned a code is upgraded to the dev/prod switch.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import cast

import libcst as cst
from libcst.metadata import MetadataWrapper, PositionProvider

from ..context import RewriteConfig
from ..exceptions import (
    MessageNotStaticallyFoldable,
    ParseError,
    TransformationError,
    UnsupportedCallSite,
)
from ..folding import fold_to_string
from ..registry import RegistrySnapshot
from .binding import HelperBindingManager, UnitState
from .builders import (
    build_dev_call,
    build_dev_switch,
    build_prod_call,
    build_replacement,
    place_statement,
)
from .classifier import CallClassifier, CallKind

_logger = logging.getLogger(__name__)


@dataclass
class RewriteStats:
    """Counts collected while rewriting one unit."""

    call_sites: int = 0
    hits: int = 0
    misses: list[str] = field(default_factory=list)
    hoisted_binding: str | None = None


class InvariantRewriteTransformer(cst.CSTTransformer):
    """CST transformer that rewrites invariant calls for one compilation unit.

    Args:
        config: Rewrite options. Defaults to :class:`RewriteConfig`.
        registry: Registry snapshot used for every lookup in this unit.
        source_name: File name used in diagnostics.
    """

    METADATA_DEPENDENCIES = (PositionProvider,)

    def __init__(
        self,
        config: RewriteConfig | None = None,
        registry: RegistrySnapshot | None = None,
        source_name: str = "<string>",
    ) -> None:
        super().__init__()
        self.config = config or RewriteConfig()
        self.registry = registry if registry is not None else RegistrySnapshot()
        self.source_name = source_name
        self.stats = RewriteStats()
        self._bindings = HelperBindingManager(self.config.prod_module, self.config.prod_name)
        self._state = UnitState()
        self._classifier = CallClassifier.from_config(self.config, self._state.processed)
        # Calls that form a whole expression statement, keyed by original node.
        self._statement_calls: set[cst.Call] = set()
        self._replacements: dict[cst.Call, cst.If] = {}
        # Hand-written fallback statements whose message now has a code.
        self._upgrades: dict[cst.If, str] = {}

    def visit_Module(self, node: cst.Module) -> None:
        self._state = self._bindings.new_unit(node)
        self._classifier = CallClassifier.from_config(self.config, self._state.processed)

    def leave_Module(self, original_node: cst.Module, updated_node: cst.Module) -> cst.Module:
        if self._state.declaration is not None:
            self.stats.hoisted_binding = self._state.binding
        return self._bindings.hoist(updated_node, self._state)

    def visit_If(self, node: cst.If) -> bool:
        if not self._classifier.is_rewritten_shape(node, self.config.dev_flag):
            return True
        self._classifier.mark(node)
        fallback = self._classifier.fallback_statement(node)
        if fallback is not None:
            message = fold_to_string(_statement_call(fallback).args[1].value)
            code = self.registry.lookup(message)
            if code is not None:
                self._upgrades[node] = code
        return False

    def leave_If(self, original_node: cst.If, updated_node: cst.If) -> cst.BaseStatement:
        code = self._upgrades.get(original_node)
        if code is None:
            return updated_node
        return self._upgrade_fallback(original_node, updated_node, code)

    def visit_SimpleStatementLine(self, node: cst.SimpleStatementLine) -> None:
        self._record_statement_calls(node.body)

    def visit_SimpleStatementSuite(self, node: cst.SimpleStatementSuite) -> None:
        self._record_statement_calls(node.body)

    def leave_Import(self, original_node: cst.Import, updated_node: cst.Import) -> cst.Import:
        self._handle_import(original_node)
        return updated_node

    def leave_ImportFrom(self, original_node: cst.ImportFrom, updated_node: cst.ImportFrom) -> cst.ImportFrom:
        self._handle_import(original_node)
        return updated_node

    def leave_Call(self, original_node: cst.Call, updated_node: cst.Call) -> cst.BaseExpression:
        kind = self._classifier.classify(original_node)
        if kind is CallKind.ASSERTION_IMPORT:
            self._handle_import(original_node)
        elif kind is CallKind.ASSERTION_CALL:
            if original_node not in self._statement_calls:
                line, column = self._position(original_node)
                raise UnsupportedCallSite(
                    f"{self.config.invariant_name}() must be used as a statement ({self.source_name}:{line})",
                    node_type=type(original_node).__name__,
                    line=line,
                    column=column,
                )
            self._replacements[original_node] = self._rewrite_call(original_node, updated_node)
        return updated_node

    def leave_SimpleStatementLine(
        self, original_node: cst.SimpleStatementLine, updated_node: cst.SimpleStatementLine
    ) -> cst.BaseStatement | cst.FlattenSentinel[cst.BaseStatement]:
        statements = self._expand(original_node.body, updated_node.body)
        if statements is None:
            return updated_node

        statements[0] = place_statement(statements[0], leading_lines=updated_node.leading_lines)
        statements[-1] = place_statement(statements[-1], trailing=updated_node.trailing_whitespace)
        if len(statements) == 1:
            return statements[0]
        return cst.FlattenSentinel(statements)

    def leave_SimpleStatementSuite(
        self, original_node: cst.SimpleStatementSuite, updated_node: cst.SimpleStatementSuite
    ) -> cst.BaseSuite:
        statements = self._expand(original_node.body, updated_node.body)
        if statements is None:
            return updated_node
        # ``if x: invariant(...)`` becomes an indented block
        return cst.IndentedBlock(body=statements, header=updated_node.trailing_whitespace)

    def transform_code(self, code: str) -> str:
        """Rewrite a module's source text.

        Raises:
            ParseError: If ``code`` is not valid Python.
            TransformationError: If a call site cannot be rewritten. The
                unit is abandoned; nothing is partially rewritten.
        """
        try:
            module = cst.parse_module(code)
        except cst.ParserSyntaxError as e:
            raise ParseError(e.message, self.source_name, e.raw_line, e.raw_column) from e

        transformed_code = self.transform_module(module).code

        try:
            cst.parse_module(transformed_code)
        except cst.ParserSyntaxError as validation_error:
            raise TransformationError(
                f"Rewritten code for {self.source_name} does not parse: {validation_error.message}",
                pattern_type="validation",
            ) from validation_error
        return transformed_code

    def transform_module(self, module: cst.Module) -> cst.Module:
        """Rewrite ``module`` and return the new tree; ``module`` itself is left as-is."""
        wrapper = MetadataWrapper(module)
        return wrapper.visit(self)

    def _handle_import(self, node: cst.CSTNode) -> None:
        if self._classifier.classify(node) is not CallKind.ASSERTION_IMPORT:
            return
        self._classifier.mark(node)
        self._ensure_binding()

    def _ensure_binding(self) -> str:
        binding = self._bindings.ensure_binding(self._state)
        declaration = self._state.declaration
        if declaration is not None and not self._classifier.is_processed(declaration):
            self._classifier.mark(declaration)
        return binding

    def _record_statement_calls(self, body: Sequence[cst.BaseSmallStatement]) -> None:
        for small in body:
            if isinstance(small, cst.Expr) and isinstance(small.value, cst.Call):
                self._statement_calls.add(small.value)

    def _rewrite_call(self, original_node: cst.Call, updated_node: cst.Call) -> cst.If:
        line, column = self._position(original_node)
        where = f"{self.source_name}:{line}"
        args = updated_node.args
        name = self.config.invariant_name

        if not args or args[0].keyword is not None or args[0].star:
            raise UnsupportedCallSite(
                f"{name}() requires a positional condition ({where})",
                node_type=type(original_node).__name__,
                line=line,
                column=column,
            )
        if len(args) < 2 or args[1].keyword is not None or args[1].star:
            raise MessageNotStaticallyFoldable(
                f"{name}() requires a positional message ({where})", line=line, column=column
            )

        try:
            message = fold_to_string(args[1].value)
        except MessageNotStaticallyFoldable as e:
            raise MessageNotStaticallyFoldable(
                f"{e.message} ({where})", node_type=e.details.get("node_type"), line=line, column=column
            ) from e

        self.stats.call_sites += 1
        dev_call = build_dev_call(updated_node, message)
        self._classifier.mark(dev_call)

        code = self.registry.lookup(message)
        if code is None:
            # Not assigned yet: ship the verbose message until the registry catches up.
            self.stats.misses.append(message)
            _logger.info("No error code for message at %s: %r", where, message)
            replacement = build_replacement(args[0].value, dev_call)
        else:
            self.stats.hits += 1
            prod_call = build_prod_call(updated_node, self._ensure_binding(), code)
            self._classifier.mark(prod_call)
            _logger.debug("Rewrote invariant at %s to code %s", where, code)
            replacement = build_replacement(args[0].value, dev_call, prod_call, self.config.dev_flag)

        self._classifier.mark(replacement)
        return replacement

    def _upgrade_fallback(self, original_node: cst.If, updated_node: cst.If, code: str) -> cst.If:
        """Turn ``if not C: invariant(False, "...")`` into the dev/prod switch for ``code``."""
        line, _ = self._position(original_node)
        fallback = cast(cst.SimpleStatementLine, cast(cst.IndentedBlock, updated_node.body).body[0])
        self.stats.call_sites += 1
        self.stats.hits += 1
        prod_call = build_prod_call(_statement_call(fallback), self._ensure_binding(), code)
        switch = build_dev_switch(fallback.with_changes(leading_lines=()), prod_call, self.config.dev_flag)
        switch = place_statement(switch, leading_lines=fallback.leading_lines)
        _logger.debug("Rewrote invariant at %s:%s to code %s", self.source_name, line, code)

        upgraded = updated_node.with_changes(body=updated_node.body.with_changes(body=[switch]))
        self._classifier.mark(upgraded)
        return upgraded

    def _expand(
        self,
        original_body: Sequence[cst.BaseSmallStatement],
        updated_body: Sequence[cst.BaseSmallStatement],
    ) -> list[cst.BaseStatement] | None:
        """Split a line of small statements around rewritten invariant calls.

        Returns ``None`` when the line holds no rewritten call.
        """
        if not any(self._replacement_for(small) is not None for small in original_body):
            return None

        statements: list[cst.BaseStatement] = []
        group: list[cst.BaseSmallStatement] = []

        def flush() -> None:
            if group:
                group[-1] = group[-1].with_changes(semicolon=cst.MaybeSentinel.DEFAULT)
                statements.append(cst.SimpleStatementLine(body=list(group)))
                group.clear()

        for original, updated in zip(original_body, updated_body):
            replacement = self._replacement_for(original)
            if replacement is None:
                group.append(updated)
                continue
            flush()
            statements.append(replacement)
        flush()
        return statements

    def _replacement_for(self, small: cst.BaseSmallStatement) -> cst.If | None:
        if isinstance(small, cst.Expr) and isinstance(small.value, cst.Call):
            return self._replacements.get(small.value)
        return None

    def _position(self, node: cst.CSTNode) -> tuple[int | None, int | None]:
        try:
            pos = self.get_metadata(PositionProvider, node)
        except KeyError:
            return None, None
        return pos.start.line, pos.start.column


def _statement_call(statement: cst.SimpleStatementLine) -> cst.Call:
    return cast(cst.Call, cast(cst.Expr, statement.body[0]).value)


def rewrite_module(
    module: cst.Module,
    config: RewriteConfig | None = None,
    registry: RegistrySnapshot | None = None,
    source_name: str = "<string>",
) -> cst.Module:
    """Rewrite every invariant call in ``module``.

    When ``registry`` is omitted a fresh snapshot is read from
    ``config.codes_file``.
    """
    config = config or RewriteConfig()
    if registry is None:
        registry = RegistrySnapshot.read(config.codes_file)
    return InvariantRewriteTransformer(config, registry, source_name).transform_module(module)


def rewrite_code(
    code: str,
    config: RewriteConfig | None = None,
    registry: RegistrySnapshot | None = None,
    source_name: str = "<string>",
) -> str:
    """Rewrite every invariant call in the source text ``code``.

    When ``registry`` is omitted a fresh snapshot is read from
    ``config.codes_file``.
    """
    config = config or RewriteConfig()
    if registry is None:
        registry = RegistrySnapshot.read(config.codes_file)
    return InvariantRewriteTransformer(config, registry, source_name).transform_code(code)
