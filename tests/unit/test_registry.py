"""Tests for error-code registry loading and lookup."""

import logging

import pytest

from invariant_error_codes.exceptions import RegistryUnreadable
from invariant_error_codes.registry import RegistrySnapshot, invert_codes, load_codes
from tests.test_utils import write_codes


def test_load_codes_reads_mapping(tmp_path):
    path = write_codes(tmp_path, {"0": "First %s.", "1": "Second."})

    assert load_codes(path) == {"0": "First %s.", "1": "Second."}


def test_load_codes_accepts_string_path(tmp_path):
    path = write_codes(tmp_path, {"3": "Three."})

    assert load_codes(str(path)) == {"3": "Three."}


def test_missing_file_is_unreadable(tmp_path):
    with pytest.raises(RegistryUnreadable) as excinfo:
        load_codes(tmp_path / "nope.json")

    assert excinfo.value.details["source"].endswith("nope.json")


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2, 3]",
        '"just a string"',
        '{"abc": "Not numeric."}',
        '{"-1": "Negative."}',
        '{"1": 5}',
        '{"1": null}',
    ],
)
def test_malformed_registry_is_unreadable(tmp_path, content):
    path = tmp_path / "codes.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(RegistryUnreadable):
        load_codes(path)


def test_empty_object_is_a_valid_registry(tmp_path):
    path = tmp_path / "codes.json"
    path.write_text("{}", encoding="utf-8")

    snapshot = RegistrySnapshot.read(path)

    assert len(snapshot) == 0
    assert snapshot.lookup("anything") is None


def test_invert_codes_last_writer_wins(caplog):
    """Duplicate templates resolve to the code that appears last."""
    with caplog.at_level(logging.DEBUG, logger="invariant_error_codes.registry"):
        by_message = invert_codes({"1": "Same.", "2": "Other.", "3": "Same."})

    assert by_message == {"Same.": "3", "Other.": "2"}
    assert "duplicates code 1" in caplog.text


def test_snapshot_lookup_and_message_for():
    snapshot = RegistrySnapshot.from_codes({"10": "Ten %s.", "11": "Eleven."})

    assert snapshot.lookup("Ten %s.") == "10"
    assert snapshot.lookup("ten %s.") is None
    assert snapshot.message_for("11") == "Eleven."
    assert snapshot.message_for("12") is None
    assert len(snapshot) == 2


def test_snapshot_is_independent_of_later_file_changes(tmp_path):
    path = write_codes(tmp_path, {"0": "Zero."})
    snapshot = RegistrySnapshot.read(path)

    write_codes(tmp_path, {"0": "Zero.", "1": "One."})

    assert snapshot.lookup("One.") is None
    assert RegistrySnapshot.read(path).lookup("One.") == "1"


def test_snapshot_is_frozen():
    snapshot = RegistrySnapshot.from_codes({"0": "Zero."})

    with pytest.raises(AttributeError):
        snapshot.codes = {}  # type: ignore[misc]
