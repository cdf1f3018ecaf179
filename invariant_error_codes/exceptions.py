"""Custom exception classes for the invariant error-code rewriter.

This module defines a small hierarchy of exceptions raised while
rewriting ``invariant`` calls. Each exception carries an optional
``details`` mapping that contains structured context (for example the
registry path or the source location of the offending call) to help
callers diagnose failures programmatically.

Every error in this module is fatal for the compilation unit being
rewritten: the caller receives the exception and no partially rewritten
output is produced for that unit.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from typing import Any


class RewriteError(Exception):
    """Base exception for rewrite-related errors.

    Args:
        message: Human-readable error message.
        details: Optional mapping with structured diagnostic data.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RegistryUnreadable(RewriteError):
    """Raised when the error-code registry snapshot cannot be read or parsed.

    Args:
        message: Description of the failure.
        source: Path (or other description) of the registry snapshot.
    """

    def __init__(self, message: str, source: str | None = None):
        details: dict[str, Any] = {}
        if source:
            details["source"] = source
        super().__init__(message, details)
        self.source = source


class ParseError(RewriteError):
    """Raised when parsing of source code fails.

    Args:
        message: Error message describing the parse failure.
        source_file: Path to the file being parsed.
        line: Optional line number where the error occurred.
        column: Optional column offset where the error occurred.
    """

    def __init__(self, message: str, source_file: str, line: int | None = None, column: int | None = None):
        details: dict[str, Any] = {"source_file": source_file}
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column
        super().__init__(message, details)


class TransformationError(RewriteError):
    """Raised when a call site cannot be rewritten.

    Args:
        message: Human-readable description of the failure.
        pattern_type: Optional identifier for the rewrite that failed.
        node_type: Optional CST node type that caused the error.
        line: Optional line number of the offending node.
        column: Optional column offset of the offending node.
    """

    def __init__(
        self,
        message: str,
        pattern_type: str | None = None,
        node_type: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ):
        details: dict[str, Any] = {}
        if pattern_type:
            details["pattern_type"] = pattern_type
        if node_type:
            details["node_type"] = node_type
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column
        super().__init__(message, details)


class MessageNotStaticallyFoldable(TransformationError):
    """Raised when an invariant message cannot be reduced to a string literal.

    The message text is needed both for the registry lookup and for the
    development branch, so a call site with a computed message cannot be
    skipped and aborts the unit instead.
    """

    def __init__(
        self, message: str, node_type: str | None = None, line: int | None = None, column: int | None = None
    ):
        super().__init__(message, pattern_type="message", node_type=node_type, line=line, column=column)


class UnsupportedCallSite(TransformationError):
    """Raised when an invariant call appears where an ``if`` statement cannot go.

    Invariant calls are rewritten into statements, so they must be used as
    expression statements and take their condition as the first positional
    argument.
    """

    def __init__(
        self, message: str, node_type: str | None = None, line: int | None = None, column: int | None = None
    ):
        super().__init__(message, pattern_type="call_site", node_type=node_type, line=line, column=column)


class ValidationError(RewriteError):
    """Raised when input validation fails.

    Args:
        message: Description of the validation failure.
        validation_type: Identifier for the kind of validation performed.
        field: Optional field name that failed validation.
    """

    def __init__(self, message: str, validation_type: str, field: str | None = None):
        details: dict[str, Any] = {"validation_type": validation_type}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ConfigurationError(RewriteError):
    """Raised when an application configuration is invalid.

    Args:
        message: Human readable description of the configuration problem.
        config_key: Optional configuration key that caused the error.
    """

    def __init__(self, message: str, config_key: str | None = None):
        details: dict[str, Any] = {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)
