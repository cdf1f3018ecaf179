"""Programmatic API for invariant_error_codes.

This module exposes the entry points used by the CLI and tests:
``rewrite`` for files and directories, and ``rewrite_source`` for
in-memory source text.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

from collections.abc import Iterable

from .context import RewriteConfig
from .exceptions import ConfigurationError
from .orchestrator import RewriteOrchestrator
from .registry import RegistrySnapshot
from .result import Result
from .transformers.invariant_transformer import rewrite_code


def rewrite(source_files: Iterable[str] | str, config: RewriteConfig | None = None) -> Result[list[str]]:
    """Rewrite one or more files or directories.

    Args:
        source_files: Iterable of file or directory paths (or a single path string).
        config: Optional ``RewriteConfig`` to control rewrite behavior.

    Returns:
        ``Result`` containing the list of written (or, in dry-run mode,
        would-be written) target paths.
    """
    if isinstance(source_files, str):
        files = [source_files]
    else:
        files = list(source_files)

    if config is None:
        config = RewriteConfig()
    try:
        config.validate()
    except ConfigurationError as e:
        return Result.failure(e)

    return RewriteOrchestrator().rewrite_paths(files, config)


def rewrite_source(
    code: str, config: RewriteConfig | None = None, registry: RegistrySnapshot | None = None
) -> str:
    """Rewrite source text and return the new text.

    Raises:
        RegistryUnreadable: If ``registry`` is omitted and the configured
            registry file cannot be read.
        TransformationError: If a call site cannot be rewritten.
    """
    return rewrite_code(code, config, registry)
