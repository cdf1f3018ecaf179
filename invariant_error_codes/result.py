"""Result type for per-file rewrite outcomes.

This module provides an immutable ``Result[T]`` that the programmatic
API and the CLI use to report what happened to each compilation unit
without raising across file boundaries. The engine itself raises; the
orchestrator converts those exceptions into failure results.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ResultStatus(Enum):
    """Enumerates possible statuses for a ``Result``."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Immutable result value with structured errors and warnings.

    ``metadata`` carries per-unit facts such as the number of rewritten
    call sites, registry misses, or the generated code in dry-run mode.
    """

    status: ResultStatus
    data: T | None = None
    error: Exception | None = None
    warnings: list[str] | None = None
    metadata: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.status == ResultStatus.SUCCESS and self.error is not None:
            raise ValueError("Success results cannot have errors")
        if self.status == ResultStatus.ERROR and self.data is not None:
            raise ValueError("Error results cannot have data")
        if self.warnings is None:
            object.__setattr__(self, "warnings", [])
        if self.metadata is None:
            object.__setattr__(self, "metadata", {})

    @classmethod
    def success(cls, data: T, metadata: dict[str, Any] | None = None) -> "Result[T]":
        """Create a successful result.

        Args:
            data: Successful value.
            metadata: Optional metadata mapping.

        Returns:
            ``Result`` with ``status==SUCCESS``.
        """
        return cls(status=ResultStatus.SUCCESS, data=data, error=None, metadata=metadata or {})

    @classmethod
    def failure(cls, error: Exception, metadata: dict[str, Any] | None = None) -> "Result[T]":
        """Create an error result.

        Args:
            error: Exception instance describing the failure.
            metadata: Optional metadata mapping.

        Returns:
            ``Result`` with ``status==ERROR``.
        """
        return cls(status=ResultStatus.ERROR, error=error, metadata=metadata or {})

    @classmethod
    def warning(cls, data: T, warnings: list[str], metadata: dict[str, Any] | None = None) -> "Result[T]":
        """Create a result that succeeded with warnings.

        Used when a unit was rewritten but some messages are not yet in the
        registry and shipped verbose.
        """
        return cls(status=ResultStatus.WARNING, data=data, warnings=warnings, metadata=metadata or {})

    def is_success(self) -> bool:
        """Return True for success and warning results."""
        return self.status in (ResultStatus.SUCCESS, ResultStatus.WARNING)

    def is_error(self) -> bool:
        """Check if result is an error."""
        return self.status == ResultStatus.ERROR

    def is_warning(self) -> bool:
        """Check if result has warnings."""
        return self.status == ResultStatus.WARNING

    def unwrap(self) -> T:
        """Return data if successful or raise the stored exception.

        Raises:
            Exception: The stored error when the result is a failure.
            RuntimeError: If a successful result carries no data.
        """
        if self.is_error():
            raise self.error or RuntimeError("Result contains error")
        if self.data is None:
            raise RuntimeError("Result contains no data")
        return self.data

    def to_dict(self) -> dict[str, Any]:
        """Convert the result to a serializable dictionary."""
        return {
            "status": self.status.value,
            "data": self.data,
            "error": str(self.error) if self.error else None,
            "warnings": self.warnings,
            "metadata": self.metadata,
        }

    def __str__(self) -> str:
        if self.is_error():
            return f"Result(error, error={self.error})"
        if self.is_warning():
            return f"Result(warning, data={self.data}, warnings={self.warnings})"
        return f"Result(success, data={self.data})"
