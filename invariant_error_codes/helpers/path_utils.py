"""Path validation and source discovery helpers.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

import platform
from collections.abc import Iterable
from pathlib import Path

from ..exceptions import ValidationError

_INVALID_CHARS = '<>:"|?*'


class PathValidationError(ValidationError):
    """Raised when path validation fails."""

    def __init__(self, message: str, path: str, validation_type: str = "path"):
        self.path = path
        self.validation_type = validation_type
        super().__init__(message, validation_type, field=path)


def validate_source_path(source_path: str | Path) -> Path:
    """Validate and normalize a source file path.

    Args:
        source_path: Path to validate (string or Path object)

    Returns:
        Normalized Path object

    Raises:
        PathValidationError: If the path is empty, malformed, or not a file.
    """
    path = Path(source_path)
    path_str = str(source_path)

    if not path_str.strip():
        raise PathValidationError("Source path cannot be empty", path_str, "empty_path")

    if any(char in path.name for char in _INVALID_CHARS):
        raise PathValidationError(f"Path contains invalid characters: {_INVALID_CHARS}", path_str, "invalid_chars")

    if not path.is_file():
        raise PathValidationError(f"Source file does not exist: {path_str}", path_str, "missing_file")

    return path


def validate_target_path(target_path: str | Path) -> Path:
    """Validate a target file path without touching the filesystem.

    Raises:
        PathValidationError: If the path is empty or malformed.
    """
    path = Path(target_path)

    if not str(target_path).strip():
        raise PathValidationError("Target path cannot be empty", str(target_path), "empty_path")

    if any(char in path.name for char in _INVALID_CHARS):
        raise PathValidationError(f"Path contains invalid characters: {_INVALID_CHARS}", str(path), "invalid_chars")

    return path


def ensure_parent_dir(target_path: str | Path) -> None:
    """Side-effect: ensure the parent directory of ``target_path`` exists."""
    path = Path(target_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PathValidationError(f"Cannot create parent directory: {e}", str(path.parent), "parent_creation") from e


def target_for(source: Path, source_root: Path | None, target_root: str | None) -> Path:
    """Return where the rewritten ``source`` is written.

    Without ``target_root`` files are rewritten in place. Otherwise the
    path relative to ``source_root`` is preserved under ``target_root``.
    """
    if not target_root:
        return source
    relative = Path(source.name)
    if source_root is not None:
        try:
            relative = source.resolve().relative_to(source_root.resolve())
        except ValueError:
            relative = Path(source.name)
    return validate_target_path(Path(target_root) / relative)


def find_source_files(
    paths: Iterable[str], file_patterns: list[str], recurse: bool = True
) -> list[tuple[Path, Path | None]]:
    """Expand files and directories into ``(file, root)`` pairs.

    Explicit files are returned as given with no root. Directories are
    searched for ``file_patterns`` (recursively when ``recurse``) and
    each match carries the directory as its root. Duplicates are dropped
    in first-seen order.
    """
    found: list[tuple[Path, Path | None]] = []
    seen: set[Path] = set()

    def add(file_path: Path, root: Path | None) -> None:
        key = file_path.resolve()
        if key not in seen:
            seen.add(key)
            found.append((file_path, root))

    for entry in paths:
        path = Path(entry)
        if path.is_dir():
            for pattern in file_patterns:
                matches = path.rglob(pattern) if recurse else path.glob(pattern)
                for match in sorted(matches):
                    if match.is_file():
                        add(match, path)
        else:
            add(path, None)
    return found


def normalize_path_for_display(path: str | Path, force_posix: bool = False) -> str:
    """Normalize a path for consistent display across platforms."""
    path_obj = Path(path)

    if force_posix or platform.system() != "Windows":
        return path_obj.as_posix()
    return str(path_obj)
