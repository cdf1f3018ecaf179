"""Error-code registry snapshots.

The registry is a JSON object that maps short numeric codes (encoded as
strings of digits) to message templates using positional ``%s``
placeholders, for example::

    {
      "0": "Expected a component class, got %s.",
      "1": "Cannot update during an existing state transition."
    }

The rewriter only ever reads the registry. A snapshot is loaded at the
start of each compilation unit and frozen for that unit, so a file that
is appended between runs is always picked up by the next unit.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import RegistryUnreadable

_logger = logging.getLogger(__name__)


def load_codes(source: str | Path) -> dict[str, str]:
    """Read a registry snapshot from ``source``.

    Args:
        source: Path to the JSON registry file.

    Returns:
        Mapping of code to message template, in file order.

    Raises:
        RegistryUnreadable: If the file is missing, unreadable, not a JSON
            object, or contains a non-digit code or a non-string template.
    """
    path = Path(source)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RegistryUnreadable(f"Cannot read error-code registry {path}: {e}", str(path)) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RegistryUnreadable(f"Error-code registry {path} is not valid JSON: {e}", str(path)) from e

    if not isinstance(data, dict):
        raise RegistryUnreadable(
            f"Error-code registry {path} must be a JSON object, got {type(data).__name__}", str(path)
        )

    for code, template in data.items():
        if not code.isdigit() or not code.isascii():
            raise RegistryUnreadable(f"Error-code registry {path} has a non-numeric code {code!r}", str(path))
        if not isinstance(template, str):
            raise RegistryUnreadable(f"Error-code registry {path} has a non-string message for code {code}", str(path))

    _logger.debug("Loaded %d error codes from %s", len(data), path)
    return data


def invert_codes(codes: Mapping[str, str]) -> dict[str, str]:
    """Build the message template -> code index for ``codes``.

    When two codes share a template the one iterated last wins. The
    collision is only logged; callers are expected to keep templates
    unique in the registry.
    """
    by_message: dict[str, str] = {}
    for code, template in codes.items():
        previous = by_message.get(template)
        if previous is not None:
            _logger.debug("Template for code %s duplicates code %s; using %s", code, previous, code)
        by_message[template] = code
    return by_message


@dataclass(frozen=True)
class RegistrySnapshot:
    """Frozen view of the registry for one compilation unit."""

    codes: dict[str, str] = field(default_factory=dict)
    by_message: dict[str, str] = field(default_factory=dict)

    @classmethod
    def read(cls, source: str | Path) -> RegistrySnapshot:
        """Load ``source`` and build its reverse index."""
        codes = load_codes(source)
        return cls(codes=codes, by_message=invert_codes(codes))

    @classmethod
    def from_codes(cls, codes: Mapping[str, str]) -> RegistrySnapshot:
        return cls(codes=dict(codes), by_message=invert_codes(codes))

    def lookup(self, message: str) -> str | None:
        """Return the code assigned to ``message`` or ``None`` on a miss."""
        return self.by_message.get(message)

    def message_for(self, code: str) -> str | None:
        return self.codes.get(code)

    def __len__(self) -> int:
        return len(self.codes)
