"""Helper functions for the CLI.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

import logging
from typing import Any

from .context import RewriteConfig, load_config_from_file
from .exceptions import ConfigurationError


def setup_logging(debug_mode: bool = False) -> None:
    """Set up logging configuration for the application."""
    log_level = logging.DEBUG if debug_mode else logging.INFO
    setup_logging_with_level(logging.getLevelName(log_level))


def setup_logging_with_level(log_level: str) -> None:
    """Set up logging with a specific level."""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def create_config(config_file: str | None = None, **overrides: Any) -> RewriteConfig:
    """Build a validated ``RewriteConfig`` from an optional YAML file and CLI values.

    ``None`` values in ``overrides`` mean "not given on the command line"
    and leave the file or default value in place.

    Raises:
        ConfigurationError: If the file cannot be loaded or the result is invalid.
    """
    base = RewriteConfig()
    if config_file:
        loaded = load_config_from_file(config_file)
        if loaded.is_error():
            error = loaded.error
            if isinstance(error, ConfigurationError):
                raise error
            raise ConfigurationError(str(error))
        base = loaded.unwrap()

    given = {key: value for key, value in overrides.items() if value is not None}
    config = base.with_override(**given)
    config.validate()
    return config
