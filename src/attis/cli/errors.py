"""
CLI Error Handling
==================

Provides consistent error reporting and exit codes for the attis driver.

Front-end errors are printed in the compiler's own format. Errors that
carry no source location (a failed read, memory exhaustion) are prefixed
with the input file name so every diagnostic starts with the file it
concerns:

    program.cyb:1:3: error: semicolon must follow a literal, ')' or ';'
    program.cyb: error: out of memory during compilation

In verbose mode a final line names the stage that failed.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn, Optional

import click

from attis.errors import AttisError
from attis.cybele.errors import (
    ASTInvariantError,
    AllocationError,
    CybeleError,
    CybeleEvaluationError,
    CybeleParseError,
    CybeleSyntaxError,
    SourceReadError,
)


class ExitCode(IntEnum):
    """Standard exit codes for the CLI."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Lexing, parsing or evaluation error
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


# Front-end stage reported for each error family, most specific first
ERROR_STAGES: list[tuple[type, str]] = [
    (SourceReadError, "reading"),
    (CybeleSyntaxError, "lexing"),
    (CybeleParseError, "parsing"),
    (ASTInvariantError, "tree check"),
    (CybeleEvaluationError, "evaluation"),
    (AllocationError, "compilation"),
]


def fail(message: str, code: ExitCode = ExitCode.INVALID_ARGS) -> NoReturn:
    """Print an error message to stderr and exit."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(code)


def error_stage(error: CybeleError) -> str:
    """Name the front-end stage an error comes from."""
    if isinstance(error, AllocationError):
        return error.stage
    for error_type, stage in ERROR_STAGES:
        if isinstance(error, error_type):
            return stage
    return "compilation"


def format_cybele_error(error: CybeleError, filename: Optional[str] = None) -> str:
    """
    Format a front-end error for the terminal.

    Errors with a location already start with "file:line:col:"; the rest
    get the input file name in front of their "error:" prefix.
    """
    text = str(error)
    if error.location is None and filename:
        return f"{filename}: {text}"
    return text


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    filename: Optional[str] = None,
) -> NoReturn:
    """
    Exception handler for the CLI.

    Formats the error message appropriately, optionally prints the failed
    stage or a traceback in verbose mode, and exits with the correct exit
    code.

    Args:
        error: The exception that was raised
        verbose: If True, name the failed stage for front-end errors and
            print the full traceback for internal errors
        filename: Input file, used for errors without a source location

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    if isinstance(error, CybeleError):
        click.echo(format_cybele_error(error, filename), err=True)
        if verbose:
            click.echo(f"Failed during {error_stage(error)}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, AttisError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
