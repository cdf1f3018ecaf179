"""Tests for the Result system."""

import pytest

from invariant_error_codes.result import Result, ResultStatus


def test_result_success():
    """Test successful result creation and access."""
    result = Result.success("out.py", metadata={"hits": 2})

    assert result.is_success()
    assert not result.is_error()
    assert not result.is_warning()
    assert result.data == "out.py"
    assert result.error is None
    assert result.warnings == []
    assert result.metadata == {"hits": 2}


def test_result_error():
    """Test error result creation and access."""
    error = ValueError("Test error")
    result = Result.failure(error)

    assert result.is_error()
    assert not result.is_success()
    assert result.data is None
    assert result.error is error
    assert result.warnings == []
    assert result.metadata == {}


def test_result_warning_counts_as_success():
    """A unit rewritten with registry misses is still a success."""
    result = Result.warning("out.py", ["No error code for message 'x'"])

    assert result.is_warning()
    assert result.is_success()
    assert result.unwrap() == "out.py"
    assert result.warnings == ["No error code for message 'x'"]


def test_unwrap_error_raises_stored_exception():
    error = KeyError("missing")
    result: Result[str] = Result.failure(error)

    with pytest.raises(KeyError):
        result.unwrap()


def test_unwrap_without_data_raises():
    result = Result(status=ResultStatus.SUCCESS)

    with pytest.raises(RuntimeError):
        result.unwrap()


def test_invalid_combinations_are_rejected():
    with pytest.raises(ValueError):
        Result(status=ResultStatus.SUCCESS, error=ValueError("x"))
    with pytest.raises(ValueError):
        Result(status=ResultStatus.ERROR, data="x")


def test_to_dict_and_str():
    """Test serialization helpers."""
    error_result: Result[str] = Result.failure(ValueError("boom"))
    assert error_result.to_dict() == {
        "status": "error",
        "data": None,
        "error": "boom",
        "warnings": [],
        "metadata": {},
    }
    assert str(error_result) == "Result(error, error=boom)"
    assert str(Result.success(1)) == "Result(success, data=1)"
    assert "warnings=['w']" in str(Result.warning(1, ["w"]))
