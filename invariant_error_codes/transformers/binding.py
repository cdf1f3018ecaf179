"""Per-unit hoisting of the production invariant helper.

A rewritten module needs one local name bound to the production helper.
:class:`HelperBindingManager` creates it lazily, the first time a unit
imports the invariant module or rewrites a call with a registry hit, and
hands back the same name on every later request. Exactly one import is
emitted per unit however many call sites use it.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

import libcst as cst

from .builders import build_helper_import, dotted_name, hoist_index, is_docstring

_logger = logging.getLogger(__name__)


def _target_names(target: cst.BaseExpression) -> list[str]:
    if isinstance(target, cst.Name):
        return [target.value]
    if isinstance(target, cst.Tuple | cst.List):
        return [name for element in target.elements for name in _target_names(element.value)]
    if isinstance(target, cst.StarredElement):
        return _target_names(target.value)
    return []


class _NameCollector(cst.CSTVisitor):
    """Collect every name in a module and count the places that bind each one."""

    def __init__(self) -> None:
        self.names: set[str] = set()
        self.bound: Counter[str] = Counter()

    def _bind(self, target: cst.BaseExpression) -> None:
        self.bound.update(_target_names(target))

    def visit_Name(self, node: cst.Name) -> None:
        self.names.add(node.value)

    def visit_Param(self, node: cst.Param) -> None:
        self._bind(node.name)

    def visit_FunctionDef(self, node: cst.FunctionDef) -> None:
        self._bind(node.name)

    def visit_ClassDef(self, node: cst.ClassDef) -> None:
        self._bind(node.name)

    def visit_AssignTarget(self, node: cst.AssignTarget) -> None:
        self._bind(node.target)

    def visit_AnnAssign(self, node: cst.AnnAssign) -> None:
        self._bind(node.target)

    def visit_AugAssign(self, node: cst.AugAssign) -> None:
        self._bind(node.target)

    def visit_NamedExpr(self, node: cst.NamedExpr) -> None:
        self._bind(node.target)

    def visit_For(self, node: cst.For) -> None:
        self._bind(node.target)

    def visit_CompFor(self, node: cst.CompFor) -> None:
        self._bind(node.target)

    def visit_AsName(self, node: cst.AsName) -> None:
        # import ... as x, with ... as x, except ... as x
        self._bind(node.name)

    def visit_ImportAlias(self, node: cst.ImportAlias) -> None:
        if node.asname is None:
            name = dotted_name(node.name)
            if name is not None:
                self.bound[name.split(".")[0]] += 1


@dataclass
class UnitState:
    """Transform state for one compilation unit.

    Created when the engine enters a module and dropped with the
    transformer; never shared between units.
    """

    used_names: set[str] = field(default_factory=set)
    processed: set[cst.CSTNode] = field(default_factory=set)
    binding: str | None = None
    declaration: cst.SimpleStatementLine | None = None
    hoisted: bool = False


class HelperBindingManager:
    """Create and hoist the local binding for the production helper.

    Args:
        prod_module: Dotted module that provides the production helper.
        prod_name: Name of the helper inside ``prod_module``.
    """

    def __init__(self, prod_module: str, prod_name: str) -> None:
        self.prod_module = prod_module
        self.prod_name = prod_name

    def new_unit(self, module: cst.Module) -> UnitState:
        """Create the state for ``module``.

        A ``from <prod_module> import <prod_name>`` in the module's leading
        import block (for example from an earlier run) becomes the unit's
        binding, unless the name it binds is bound anywhere else in the
        module. Imports after the first other statement are never reused.
        """
        collector = _NameCollector()
        module.visit(collector)
        state = UnitState(used_names=collector.names)
        existing = self._existing_binding(module, collector.bound)
        if existing is not None:
            _logger.debug("Reusing existing binding %s for %s.%s", existing, self.prod_module, self.prod_name)
            state.binding = existing
        return state

    def ensure_binding(self, state: UnitState) -> str:
        """Return the helper binding for the unit, creating it on first use."""
        if state.binding is not None:
            return state.binding

        alias = self._unique_name(state.used_names)
        state.used_names.add(alias)
        state.binding = alias
        state.declaration = build_helper_import(self.prod_module, self.prod_name, alias)
        _logger.debug("Created binding %s for %s.%s", alias, self.prod_module, self.prod_name)
        return alias

    def hoist(self, module: cst.Module, state: UnitState) -> cst.Module:
        """Insert the pending helper import into ``module`` once.

        The import goes after the docstring and ``from __future__`` imports,
        ahead of every statement that can use the binding.
        """
        if state.declaration is None or state.hoisted:
            return module

        body = list(module.body)
        index = hoist_index(body)
        declaration = state.declaration
        if index > 0:
            declaration = declaration.with_changes(leading_lines=[cst.EmptyLine()])
        body.insert(index, declaration)
        state.hoisted = True
        return module.with_changes(body=body)

    def _unique_name(self, used: set[str]) -> str:
        base = f"_{self.prod_name}"
        if base not in used:
            return base
        suffix = 2
        while f"{base}{suffix}" in used:
            suffix += 1
        return f"{base}{suffix}"

    def _existing_binding(self, module: cst.Module, bound: Counter[str]) -> str | None:
        for index, statement in enumerate(module.body):
            if index == 0 and is_docstring(statement):
                continue
            if not isinstance(statement, cst.SimpleStatementLine) or not all(
                isinstance(small, cst.Import | cst.ImportFrom) for small in statement.body
            ):
                return None
            for small in statement.body:
                name = self._imported_helper(small)
                if name is not None and bound[name] == 1:
                    return name
        return None

    def _imported_helper(self, small: cst.BaseSmallStatement) -> str | None:
        if not isinstance(small, cst.ImportFrom) or small.relative or isinstance(small.names, cst.ImportStar):
            return None
        if dotted_name(small.module) != self.prod_module:
            return None
        for alias in small.names:
            if isinstance(alias.name, cst.Name) and alias.name.value == self.prod_name:
                if alias.asname is not None and isinstance(alias.asname.name, cst.Name):
                    return alias.asname.name.value
                return self.prod_name
        return None
