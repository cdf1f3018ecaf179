"""Rewrite configuration helpers.

This module defines the immutable :class:`RewriteConfig` dataclass that
carries every option controlling which calls are recognized, which
helper the production branch calls, where the registry lives and how
files are read and written. Configuration can be built from keyword
arguments, from a dictionary, or loaded from a YAML file.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

import dataclasses
import keyword
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigurationError
from .result import Result

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _is_identifier(value: str) -> bool:
    return value.isidentifier() and not keyword.iskeyword(value)


def _is_dotted_name(value: str) -> bool:
    return bool(value) and all(_is_identifier(part) for part in value.split("."))


@dataclass(frozen=True)
class RewriteConfig:
    """Rewrite behavior configuration.

    The defaults match the helpers shipped in
    :mod:`invariant_error_codes.runtime`, so a project that imports
    ``invariant`` from there works without any further options.
    """

    # Registry
    codes_file: str = "codes.json"
    """Path to the JSON registry mapping codes to message templates"""

    # Recognized call and import
    invariant_name: str = "invariant"
    """Plain name of the development assertion helper at call sites"""
    invariant_module: str = "invariant_error_codes.runtime"
    """Dotted module whose import triggers hoisting of the production helper"""

    # Production helper
    prod_module: str = "invariant_error_codes.runtime"
    prod_name: str = "prod_invariant"
    dev_flag: str = "__DEV__"
    """Expression guarding the verbose branch; resolved by a later build stage"""

    # File handling
    target_root: str | None = None
    file_patterns: list[str] = field(default_factory=lambda: ["*.py"])
    recurse_directories: bool = True
    encoding: str = "utf-8"

    # Behavior settings
    dry_run: bool = False
    fail_fast: bool = False

    # Output formatting control
    format_output: bool = False
    """Whether to run black over rewritten units"""
    line_length: int = 120

    # Logging and reporting settings
    log_level: str = "INFO"

    def with_override(self, **kwargs: Any) -> "RewriteConfig":
        """Return a new ``RewriteConfig`` with the given overrides applied."""
        return dataclasses.replace(self, **kwargs)

    def validate(self) -> None:
        """Validate the configuration.

        Raises:
            ConfigurationError: If an option has an unusable value.
        """
        if not _is_identifier(self.invariant_name):
            raise ConfigurationError(f"Not a valid identifier: {self.invariant_name!r}", "invariant_name")
        if not _is_identifier(self.prod_name):
            raise ConfigurationError(f"Not a valid identifier: {self.prod_name!r}", "prod_name")
        for key in ("invariant_module", "prod_module", "dev_flag"):
            value = getattr(self, key)
            if not _is_dotted_name(value):
                raise ConfigurationError(f"Not a valid dotted name: {value!r}", key)
        if not self.codes_file:
            raise ConfigurationError("A registry file is required", "codes_file")
        if not self.file_patterns:
            raise ConfigurationError("At least one file pattern is required", "file_patterns")
        if self.log_level.upper() not in _VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level {self.log_level!r}; expected one of {', '.join(_VALID_LOG_LEVELS)}", "log_level"
            )
        if not 40 <= self.line_length <= 500:
            raise ConfigurationError(f"line_length must be between 40 and 500, got {self.line_length}", "line_length")

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "RewriteConfig":
        """Create and validate a config from a dictionary.

        Unknown keys are ignored.

        Raises:
            ConfigurationError: If the resulting configuration is invalid.
        """
        filtered = {k: v for k, v in config_dict.items() if k in cls.__dataclass_fields__}
        config = cls(**filtered)
        config.validate()
        return config

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


def load_config_from_file(config_file: str) -> Result[RewriteConfig]:
    """Load a :class:`RewriteConfig` from a YAML file.

    Args:
        config_file: Path to a YAML mapping of option names to values.

    Returns:
        ``Result`` containing the validated configuration, or a failure
        result describing why it could not be loaded.
    """
    import yaml  # type: ignore[import-untyped]

    path = Path(config_file)
    try:
        with open(path, encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logging.getLogger(__name__).error("Failed to read configuration file %s: %s", path, e)
        return Result.failure(ConfigurationError(f"Cannot read configuration file {path}: {e}"))

    if not isinstance(config_data, dict):
        return Result.failure(ConfigurationError(f"Configuration file {path} must contain a mapping"))

    try:
        return Result.success(RewriteConfig.from_dict(config_data))
    except ConfigurationError as e:
        return Result.failure(e)
    except TypeError as e:
        return Result.failure(ConfigurationError(f"Invalid configuration in {path}: {e}"))
