"""Tests for static folding of invariant messages."""

import libcst as cst
import pytest

from invariant_error_codes.exceptions import MessageNotStaticallyFoldable
from invariant_error_codes.folding import fold_to_string


def _fold(expression: str) -> str:
    return fold_to_string(cst.parse_expression(expression))


@pytest.mark.parametrize(
    "expression, expected",
    [
        ('"plain"', "plain"),
        ("'single'", "single"),
        ('r"raw \\d"', "raw \\d"),
        ('"""triple"""', "triple"),
        ('"escaped \\n"', "escaped \n"),
        ('("paren")', "paren"),
        ('"a" "b" "c"', "abc"),
        ('"a" + "b"', "ab"),
        ('"a" + ("b" "c") + "d"', "abcd"),
        ('"Expected %s, " + "got %s."', "Expected %s, got %s."),
    ],
)
def test_foldable_messages(expression, expected):
    assert _fold(expression) == expected


@pytest.mark.parametrize(
    "expression, node_type",
    [
        ("message", "Name"),
        ("make_message()", "Call"),
        ('f"value {x}"', "FormattedString"),
        ('"a %s" % x', "BinaryOperation"),
        ('"a" * 3', "BinaryOperation"),
        ("42", "Integer"),
        ('"a" + name', "Name"),
    ],
)
def test_non_foldable_messages(expression, node_type):
    with pytest.raises(MessageNotStaticallyFoldable) as excinfo:
        _fold(expression)

    assert excinfo.value.details["node_type"] == node_type
    assert excinfo.value.details["pattern_type"] == "message"


def test_bytes_are_rejected():
    with pytest.raises(MessageNotStaticallyFoldable) as excinfo:
        _fold('b"bytes"')

    assert "bytes" in excinfo.value.message


def test_concatenation_with_f_string_is_rejected():
    with pytest.raises(MessageNotStaticallyFoldable):
        _fold('"a" f"{b}"')
