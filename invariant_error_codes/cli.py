"""Command-line interface for the invariant error-code rewriter.

This module defines the public CLI commands of the
``invariant-error-codes`` application. It uses ``typer`` to expose the
program entrypoint while delegating the work to the programmatic API in
:mod:`invariant_error_codes.main` so the same logic can be used from
Python code or the CLI.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

import difflib
import logging
from pathlib import Path

import typer

from . import main as main_module
from .cli_helpers import create_config, setup_logging, setup_logging_with_level
from .exceptions import RewriteError
from .helpers.path_utils import normalize_path_for_display
from .registry import RegistrySnapshot
from .runtime import decode_error

# Initialize typer app
app = typer.Typer(
    name="invariant-error-codes",
    help="Replace invariant messages with registry error codes in production branches",
    add_completion=False,
)

logger = logging.getLogger(__name__)


@app.command("rewrite")
def rewrite(
    source_files: list[str] = typer.Argument(..., help="Python files or directories to rewrite"),
    codes_file: str | None = typer.Option(None, "--codes", "-c", help="JSON registry of error codes"),
    config_file: str | None = typer.Option(None, "--config", help="YAML configuration file to load settings from"),
    dev_flag: str | None = typer.Option(None, "--dev-flag", help="Expression guarding the verbose branch"),
    invariant_name: str | None = typer.Option(None, "--name", help="Name of the invariant helper at call sites"),
    invariant_module: str | None = typer.Option(None, "--module", help="Module that provides the invariant helper"),
    prod_module: str | None = typer.Option(None, "--prod-module", help="Module that provides the production helper"),
    prod_name: str | None = typer.Option(None, "--prod-name", help="Name of the production helper"),
    target_root: str | None = typer.Option(None, "--target-root", "-t", help="Write rewritten files under this root"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the rewritten code without writing files"),
    diff: bool = typer.Option(False, "--diff", help="With --dry-run, show unified diffs instead of full code"),
    format_output: bool = typer.Option(False, "--format", help="Format rewritten files with black"),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Stop on first error"),
    posix: bool = typer.Option(False, "--posix", help="Force POSIX-style path separators in output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging output"),
    log_level: str | None = typer.Option(None, "--log-level", help="Set logging level (DEBUG, INFO, WARNING, ERROR)"),
) -> None:
    """Rewrite invariant calls in the given files."""
    if debug:
        setup_logging(debug_mode=True)
    elif log_level:
        setup_logging_with_level(log_level)
    elif verbose:
        setup_logging()
    else:
        setup_logging_with_level("WARNING")

    try:
        config = create_config(
            config_file,
            codes_file=codes_file,
            dev_flag=dev_flag,
            invariant_name=invariant_name,
            invariant_module=invariant_module,
            prod_module=prod_module,
            prod_name=prod_name,
            target_root=target_root,
            dry_run=dry_run or None,
            format_output=format_output or None,
            fail_fast=fail_fast or None,
            log_level=log_level,
        )
    except RewriteError as e:
        logger.error(f"Invalid configuration: {e}")
        raise typer.Exit(code=2) from None

    result = main_module.rewrite(source_files, config)
    metadata = result.metadata or {}

    for warning in result.warnings or []:
        logger.warning(warning)

    if result.is_error():
        for failed, reason in (metadata.get("failed_files") or {}).items():
            typer.echo(f"FAILED: {normalize_path_for_display(failed, posix)}: {reason}", err=True)
        if not metadata.get("failed_files"):
            typer.echo(f"Rewrite failed: {result.error}", err=True)
        raise typer.Exit(code=1)

    if config.dry_run:
        sources = metadata.get("sources") or {}
        for target, code in (metadata.get("generated_code") or {}).items():
            display = normalize_path_for_display(target, posix)
            if diff:
                original = Path(sources.get(target, target)).read_text(encoding=config.encoding)
                diff_lines = list(
                    difflib.unified_diff(
                        original.splitlines(keepends=True),
                        code.splitlines(keepends=True),
                        fromfile=f"orig:{display}",
                        tofile=f"new:{display}",
                    )
                )
                typer.echo(f"== DIFF: {display} ==")
                typer.echo("".join(diff_lines) if diff_lines else "<no differences detected>")
            else:
                typer.echo(f"== REWRITTEN: {display} ==")
                typer.echo(code)
        return

    for target in result.data or []:
        typer.echo(normalize_path_for_display(target, posix))


@app.command("decode")
def decode(
    code: str = typer.Argument(..., help="Error code from a minified invariant"),
    args: list[str] | None = typer.Argument(None, help="Arguments reported with the error"),
    codes_file: str = typer.Option("codes.json", "--codes", "-c", help="JSON registry of error codes"),
) -> None:
    """Print the full message for a minified invariant error."""
    try:
        registry = RegistrySnapshot.read(codes_file)
    except RewriteError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None

    message = decode_error(code, args or [], registry)
    if message is None:
        typer.echo(f"Error: unknown error code {code}", err=True)
        raise typer.Exit(code=1)
    typer.echo(message)


@app.command("version")
def version() -> None:
    """Show the version of invariant-error-codes."""
    from . import __version__

    typer.echo(f"invariant-error-codes {__version__}")


def main() -> None:
    """Main entry point for the CLI application."""
    app()


if __name__ == "__main__":
    main()
