"""Runtime helpers called by rewritten code.

``invariant`` is the development helper that source code calls
directly. ``prod_invariant`` is the helper that production branches
call with a registry code instead of the message text; it raises an
error whose message points at the error decoder, where the full text
can be rebuilt from the code and its arguments.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

from .registry import RegistrySnapshot

ERROR_DECODER_URL = "https://invariant-error-codes.readthedocs.io/en/latest/error-decoder.html"

_PLACEHOLDER = "%s"


class InvariantViolation(Exception):
    """Raised when an invariant does not hold.

    Attributes:
        code: Registry code for minified errors, ``None`` in development.
        format_args: The positional arguments passed with the message.
    """

    def __init__(self, message: str, code: str | None = None, format_args: Sequence[Any] = ()):
        super().__init__(message)
        self.code = code
        self.format_args = tuple(format_args)


def format_message(template: str, args: Sequence[Any]) -> str:
    """Substitute ``args`` into the ``%s`` placeholders of ``template`` in order.

    Placeholders without a matching argument are left as ``%s``; extra
    arguments are ignored.
    """
    pieces = template.split(_PLACEHOLDER)
    out = [pieces[0]]
    for index, piece in enumerate(pieces[1:]):
        out.append(str(args[index]) if index < len(args) else _PLACEHOLDER)
        out.append(piece)
    return "".join(out)


def invariant(condition: Any, message: str, *args: Any) -> None:
    """Raise :class:`InvariantViolation` with the formatted message unless ``condition`` holds."""
    if condition:
        return
    raise InvariantViolation(format_message(message, args), format_args=args)


def error_url(code: str, args: Sequence[Any] = ()) -> str:
    query = f"invariant={quote(str(code))}"
    for arg in args:
        query += "&args[]=" + quote(str(arg), safe="")
    return f"{ERROR_DECODER_URL}?{query}"


def prod_invariant(code: str, *args: Any) -> None:
    """Raise the minified form of an invariant failure for ``code``."""
    message = (
        f"Minified invariant #{code}; visit {error_url(code, args)} for the full message "
        "or use the non-minified dev environment for full errors and additional helpful warnings."
    )
    raise InvariantViolation(message, code=str(code), format_args=args)


def decode_error(code: str, args: Sequence[Any], registry: RegistrySnapshot) -> str | None:
    """Rebuild the full message for a minified error, or ``None`` for an unknown code."""
    template = registry.message_for(str(code))
    if template is None:
        return None
    return format_message(template, args)
