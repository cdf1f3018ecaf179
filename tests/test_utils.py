"""Test utilities for validating rewritten source.

Helpers here compare code by structure so tests are not sensitive to
whitespace or quoting differences, and build registry files on disk.
"""

import ast
import json
from pathlib import Path


def normalize_code(code: str) -> str:
    """Return a formatting-independent representation of ``code``."""
    return ast.dump(ast.parse(code))


def assert_code_structure_equals(actual: str, expected: str) -> None:
    """Assert that two snippets parse to the same AST."""
    assert normalize_code(actual) == normalize_code(expected), f"--- actual ---\n{actual}\n--- expected ---\n{expected}"


def extract_imports(code: str) -> list[str]:
    """Return the top-level import statements of ``code`` in order."""
    tree = ast.parse(code)
    return [ast.unparse(stmt) for stmt in tree.body if isinstance(stmt, ast.Import | ast.ImportFrom)]


def assert_has_imports(code: str, expected_imports: list[str]) -> None:
    imports = extract_imports(code)
    for expected in expected_imports:
        assert expected in imports, f"missing import {expected!r} in {imports}"


def write_codes(directory: Path, codes: dict[str, str], name: str = "codes.json") -> Path:
    """Write a registry file under ``directory`` and return its path."""
    path = directory / name
    path.write_text(json.dumps(codes, indent=2), encoding="utf-8")
    return path
