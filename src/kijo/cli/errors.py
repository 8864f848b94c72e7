"""
Unified CLI Error Handling
==========================

Consistent error reporting and exit codes for kjasm and kjrun.
"""

import logging
import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from kijo.errors import KijoError


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Assembly or execution error
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception raised inside a CLI command and exit.

    Args:
        error: The exception that was raised
        verbose: If True, print the traceback for internal errors
        error_type: Optional prefix for the message (e.g. "Assembly")

    Raises:
        SystemExit: Always, with the matching ExitCode
    """
    if isinstance(error, KijoError):
        # Assembler errors already carry "file:line: error:" formatting
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)


def setup_logging(verbose: bool) -> None:
    """DEBUG logging to stderr with -v, otherwise warnings only."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s" if verbose else "%(levelname)s: %(message)s",
    )
