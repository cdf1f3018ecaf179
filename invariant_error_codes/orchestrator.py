"""Per-file orchestration of the invariant rewrite.

The orchestrator is the glue between the filesystem and the rewrite
engine: it validates paths, reads a fresh registry snapshot for each
file, runs the engine, optionally formats the output, and writes it.
Errors from the engine abort only the file being processed and are
returned as failure results.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .context import RewriteConfig
from .exceptions import RewriteError
from .helpers.path_utils import ensure_parent_dir, find_source_files, target_for, validate_source_path
from .registry import RegistrySnapshot
from .result import Result
from .transformers.invariant_transformer import InvariantRewriteTransformer


class RewriteOrchestrator:
    """Rewrite files one compilation unit at a time."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def rewrite_file(
        self, source_file: str | Path, config: RewriteConfig | None = None, source_root: Path | None = None
    ) -> Result[str]:
        """Rewrite a single file.

        Args:
            source_file: Path to the Python source file.
            config: Optional ``RewriteConfig`` to control behavior.
            source_root: Directory the file was discovered under; used to
                mirror the layout below ``config.target_root``.

        Returns:
            ``Result`` containing the target path. Metadata holds
            ``call_sites``, ``hits``, ``misses``, ``changed`` and, in
            dry-run mode, ``generated_code``.
        """
        if config is None:
            config = RewriteConfig()

        try:
            source_path = validate_source_path(source_file)
            target_path = target_for(source_path, source_root, config.target_root)
        except RewriteError as e:
            return Result.failure(e)

        try:
            source_code = source_path.read_text(encoding=config.encoding)
        except (OSError, UnicodeDecodeError) as e:
            self._logger.error("Cannot read %s: %s", source_path, e)
            return Result.failure(e)

        try:
            registry = RegistrySnapshot.read(config.codes_file)
            transformer = InvariantRewriteTransformer(config, registry, str(source_path))
            new_code = transformer.transform_code(source_code)
        except RewriteError as e:
            self._logger.error("Rewrite failed for %s: %s", source_path, e)
            return Result.failure(e)

        warnings: list[str] = []
        if config.format_output and new_code != source_code:
            try:
                new_code = self._apply_black(new_code, config)
            except Exception as e:
                warnings.append(f"Code formatting failed: {e}")

        stats = transformer.stats
        changed = new_code != source_code
        metadata: dict[str, Any] = {
            "source_file": str(source_path),
            "call_sites": stats.call_sites,
            "hits": stats.hits,
            "misses": list(stats.misses),
            "changed": changed,
        }
        for message in stats.misses:
            warnings.append(f"No error code for message {message!r}")

        if config.dry_run:
            metadata["generated_code"] = new_code
        elif changed or target_path != source_path:
            try:
                ensure_parent_dir(target_path)
                target_path.write_text(new_code, encoding=config.encoding)
            except (OSError, RewriteError) as e:
                self._logger.error("Cannot write %s: %s", target_path, e)
                return Result.failure(e)

        self._logger.info(
            "Rewrote %s: %d call sites, %d with codes, %d without",
            source_path,
            stats.call_sites,
            stats.hits,
            len(stats.misses),
        )
        if warnings:
            return Result.warning(str(target_path), warnings, metadata=metadata)
        return Result.success(str(target_path), metadata=metadata)

    def rewrite_paths(self, paths: Iterable[str], config: RewriteConfig | None = None) -> Result[list[str]]:
        """Rewrite files and every matching file below directories in ``paths``.

        Returns:
            ``Result`` with the list of target paths. ``metadata`` maps
            ``generated_code`` (dry-run) and ``failed_files``. The result is
            a failure when any file failed; with ``fail_fast`` processing
            stops at the first failure.
        """
        if config is None:
            config = RewriteConfig()

        sources = find_source_files(paths, config.file_patterns, config.recurse_directories)
        if not sources:
            self._logger.warning("No source files found")

        written: list[str] = []
        generated: dict[str, str] = {}
        origins: dict[str, str] = {}
        warnings: list[str] = []
        failed: dict[str, str] = {}
        first_error: Exception | None = None

        for source, root in sources:
            result = self.rewrite_file(source, config, root)
            if result.is_error():
                failed[str(source)] = str(result.error)
                first_error = first_error or result.error
                if config.fail_fast:
                    break
                continue

            target = result.unwrap()
            written.append(target)
            origins[target] = str(source)
            warnings.extend(result.warnings or [])
            metadata = result.metadata or {}
            if "generated_code" in metadata:
                generated[target] = metadata["generated_code"]

        metadata = {"generated_code": generated, "sources": origins, "failed_files": failed}
        if first_error is not None:
            self._logger.error("Rewrite failed for %d of %d files", len(failed), len(sources))
            return Result.failure(first_error, metadata=metadata)
        if warnings:
            return Result.warning(written, warnings, metadata=metadata)
        return Result.success(written, metadata=metadata)

    def _apply_black(self, code: str, config: RewriteConfig) -> str:
        import black

        return black.format_str(code, mode=black.Mode(line_length=config.line_length))
