"""Tests for the production helper binding and hoist."""

import libcst as cst

from invariant_error_codes.transformers.binding import HelperBindingManager

MODULE = "invariant_error_codes.runtime"


def _manager() -> HelperBindingManager:
    return HelperBindingManager(MODULE, "prod_invariant")


def test_binding_is_created_once():
    manager = _manager()
    state = manager.new_unit(cst.parse_module("x = 1\n"))

    first = manager.ensure_binding(state)
    second = manager.ensure_binding(state)

    assert first == second == "_prod_invariant"
    assert state.declaration is not None
    assert cst.Module(body=[state.declaration]).code == f"from {MODULE} import prod_invariant as _prod_invariant\n"


def test_binding_name_skips_used_names():
    manager = _manager()
    state = manager.new_unit(cst.parse_module("_prod_invariant = 1\n\ndef _prod_invariant2(): pass\n"))

    assert manager.ensure_binding(state) == "_prod_invariant3"


def test_existing_import_is_reused():
    manager = _manager()
    state = manager.new_unit(cst.parse_module(f"from {MODULE} import prod_invariant as _pi\n"))

    assert manager.ensure_binding(state) == "_pi"
    assert state.declaration is None


def test_existing_unaliased_import_is_reused():
    manager = _manager()
    state = manager.new_unit(cst.parse_module(f"from {MODULE} import invariant, prod_invariant\n"))

    assert state.binding == "prod_invariant"


def test_nested_or_unrelated_imports_are_not_reused():
    manager = _manager()
    module = cst.parse_module(
        f"def f():\n    from {MODULE} import prod_invariant\n\n"
        "from other import prod_invariant as p\n"
        f"from {MODULE} import *\n"
    )

    state = manager.new_unit(module)

    assert state.binding is None


def test_import_after_docstring_and_other_imports_is_reused():
    manager = _manager()
    module = cst.parse_module(f'"""Doc."""\nimport os\nfrom {MODULE} import prod_invariant as _pi\n')

    assert manager.new_unit(module).binding == "_pi"


def test_import_after_other_statements_is_not_reused():
    manager = _manager()
    module = cst.parse_module(f'invariant(x, "m")\nfrom {MODULE} import prod_invariant\n')

    state = manager.new_unit(module)

    assert state.binding is None
    assert manager.ensure_binding(state) == "_prod_invariant"


def test_rebound_import_is_not_reused():
    manager = _manager()
    module = cst.parse_module(
        f"from {MODULE} import prod_invariant\n\n\ndef check(prod_invariant):\n    return prod_invariant\n"
    )

    state = manager.new_unit(module)

    assert state.binding is None
    assert manager.ensure_binding(state) == "_prod_invariant"


def test_hoist_inserts_declaration_once():
    manager = _manager()
    module = cst.parse_module("import os\n")
    state = manager.new_unit(module)
    manager.ensure_binding(state)

    hoisted = manager.hoist(module, state)
    again = manager.hoist(hoisted, state)

    assert hoisted.code == f"from {MODULE} import prod_invariant as _prod_invariant\nimport os\n"
    assert again is hoisted


def test_hoist_without_binding_is_a_no_op():
    manager = _manager()
    module = cst.parse_module("import os\n")

    assert manager.hoist(module, manager.new_unit(module)) is module


def test_hoist_after_docstring_and_future_import():
    manager = _manager()
    module = cst.parse_module('"""Doc."""\nfrom __future__ import annotations\nimport os\n')
    state = manager.new_unit(module)
    manager.ensure_binding(state)

    hoisted = manager.hoist(module, state)

    assert hoisted.code == (
        '"""Doc."""\n'
        "from __future__ import annotations\n"
        "\n"
        f"from {MODULE} import prod_invariant as _prod_invariant\n"
        "import os\n"
    )


def test_private_helper_name_gets_prefixed():
    manager = HelperBindingManager("pkg.errors", "_raise")
    state = manager.new_unit(cst.parse_module("pass\n"))

    assert manager.ensure_binding(state) == "__raise"
    assert state.declaration is not None
