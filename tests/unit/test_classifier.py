"""Tests for classification of invariant calls and imports."""

import libcst as cst
import pytest

from invariant_error_codes.context import RewriteConfig
from invariant_error_codes.transformers.classifier import CallClassifier, CallKind


@pytest.fixture
def classifier() -> CallClassifier:
    return CallClassifier.from_config(RewriteConfig())


def _statement(code: str) -> cst.BaseSmallStatement:
    line = cst.parse_statement(code)
    assert isinstance(line, cst.SimpleStatementLine)
    return line.body[0]


def _if(code: str) -> cst.If:
    statement = cst.parse_statement(code)
    assert isinstance(statement, cst.If)
    return statement


@pytest.mark.parametrize(
    "code, expected",
    [
        ("import invariant_error_codes.runtime", CallKind.ASSERTION_IMPORT),
        ("import os, invariant_error_codes.runtime as rt", CallKind.ASSERTION_IMPORT),
        ("from invariant_error_codes.runtime import invariant", CallKind.ASSERTION_IMPORT),
        ("from invariant_error_codes.runtime import *", CallKind.ASSERTION_IMPORT),
        ("import invariant_error_codes", CallKind.IRRELEVANT),
        ("from invariant_error_codes import runtime", CallKind.IRRELEVANT),
        ("from . import runtime", CallKind.IRRELEVANT),
        ("from .invariant_error_codes.runtime import invariant", CallKind.IRRELEVANT),
    ],
)
def test_import_statements(classifier, code, expected):
    assert classifier.classify(_statement(code)) is expected


@pytest.mark.parametrize(
    "code, expected",
    [
        ('invariant(x, "m")', CallKind.ASSERTION_CALL),
        ("invariant()", CallKind.ASSERTION_CALL),
        ('obj.invariant(x, "m")', CallKind.IRRELEVANT),
        ('check(x, "m")', CallKind.IRRELEVANT),
        ('__import__("invariant_error_codes.runtime")', CallKind.ASSERTION_IMPORT),
        ('importlib.import_module("invariant_error_codes.runtime")', CallKind.ASSERTION_IMPORT),
        ('import_module("invariant_error_codes.runtime")', CallKind.IRRELEVANT),
        ('importlib.import_module("os")', CallKind.IRRELEVANT),
        ("importlib.import_module(name)", CallKind.IRRELEVANT),
        ('__import__(name="invariant_error_codes.runtime")', CallKind.IRRELEVANT),
    ],
)
def test_calls(classifier, code, expected):
    assert classifier.classify(cst.parse_expression(code)) is expected


def test_other_nodes_are_irrelevant(classifier):
    assert classifier.classify(cst.parse_expression("invariant")) is CallKind.IRRELEVANT
    assert classifier.classify(_statement("x = 1")) is CallKind.IRRELEVANT


def test_processed_nodes_are_irrelevant(classifier):
    call = cst.parse_expression('invariant(x, "m")')

    classifier.mark(call)

    assert classifier.is_processed(call)
    assert classifier.is_processed(call.args[0])
    assert classifier.classify(call) is CallKind.IRRELEVANT


def test_processed_set_is_shared():
    processed: set[cst.CSTNode] = set()
    classifier = CallClassifier("ensure", "pkg.errors", processed)
    call = cst.parse_expression('ensure(x, "m")')

    assert classifier.classify(call) is CallKind.ASSERTION_CALL
    classifier.mark(call)
    assert call in processed


def test_custom_names():
    classifier = CallClassifier("ensure", "pkg.errors")

    assert classifier.classify(cst.parse_expression('ensure(x, "m")')) is CallKind.ASSERTION_CALL
    assert classifier.classify(cst.parse_expression('invariant(x, "m")')) is CallKind.IRRELEVANT
    assert classifier.classify(_statement("from pkg.errors import ensure")) is CallKind.ASSERTION_IMPORT


class TestRewrittenShape:
    def test_miss_shape(self, classifier):
        node = _if('if not x:\n    invariant(False, "m", x)\n')

        assert classifier.is_rewritten_shape(node, "__DEV__")

    def test_fallback_statement(self, classifier):
        miss = _if('if not x:\n    invariant(False, "m" "n", x)  # keep\n')
        hit = _if('if not x:\n    if __DEV__:\n        invariant(False, "m")\n    else:\n        _p("12")\n')

        statement = classifier.fallback_statement(miss)

        assert statement is not None
        assert cst.Module(body=[statement]).code == 'invariant(False, "m" "n", x)  # keep\n'
        assert classifier.fallback_statement(hit) is None

    def test_hit_shape(self, classifier):
        node = _if(
            'if not (a or b):\n    if __DEV__:\n        invariant(False, "m")\n    else:\n        _p("12")\n'
        )

        assert classifier.is_rewritten_shape(node, "__DEV__")

    def test_hit_shape_with_dotted_flag(self, classifier):
        node = _if('if not x:\n    if settings.DEBUG:\n        invariant(False, "m")\n    else:\n        _p("3", x)\n')

        assert classifier.is_rewritten_shape(node, "settings.DEBUG")
        assert not classifier.is_rewritten_shape(node, "__DEV__")

    @pytest.mark.parametrize(
        "code",
        [
            'if x:\n    invariant(False, "m")\n',
            'if not x:\n    invariant(x, "m")\n',
            'if not x:\n    invariant(False)\n',
            'if not x:\n    invariant(False, msg)\n',
            'if not x:\n    invariant(False, message="m")\n',
            'if not x:\n    if __DEV__:\n        invariant(False, msg)\n    else:\n        _p("1")\n',
            'if not x:\n    invariant(False, "m")\nelse:\n    pass\n',
            'if not x:\n    invariant(False, "m")\n    y = 1\n',
            'if not x: invariant(False, "m")\n',
            'if not x:\n    if __DEV__:\n        invariant(False, "m")\n',
            'if not x:\n    if __DEV__:\n        invariant(False, "m")\n    else:\n        _p("abc")\n',
            'if not x:\n    if __DEV__:\n        invariant(False, "m")\n    else:\n        _p(code)\n',
            'if not x:\n    if __DEV__:\n        invariant(False, "m")\n    elif y:\n        _p("1")\n',
        ],
    )
    def test_other_shapes_are_not_rewritten(self, classifier, code):
        assert not classifier.is_rewritten_shape(_if(code), "__DEV__")
