"""
attis - Cybele Compiler Command-Line Interface
==============================================

This module implements the command-line driver for the Cybele front end.
It lexes and parses one source file, checks the resulting tree and
prints the value of the program.

Usage Examples
--------------
Evaluate a program:
    $ attis program.cyb
    Answer: 7

Dump the tokens or the tree:
    $ attis --tokens program.cyb
    $ attis --ast --no-eval program.cyb

Verbose mode (debug logging of every token and statement):
    $ attis -v program.cyb
"""

from pathlib import Path
from typing import Optional
import logging

import click

from attis import __version__
from attis.cli.errors import fail, handle_cli_exception
from attis.cybele import CybeleCompiler, CompilerOptions
from attis.cybele.ast import ASTPrinter
from attis.cybele.evaluator import format_answer

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument(
    "input_files",
    nargs=-1,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-t", "--threads",
    type=str,
    default=None,
    metavar="N",
    help="Number of worker threads (not yet supported)",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token list",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the AST (for debugging)",
)
@click.option(
    "--no-eval",
    is_flag=True,
    help="Skip evaluation of the program",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="attis")
def main(
    input_files: tuple[Path, ...],
    threads: Optional[str],
    tokens: bool,
    ast: bool,
    no_eval: bool,
    verbose: bool,
) -> None:
    """
    Compile a Cybele source file.

    INPUT_FILE is the Cybele source file to compile. The program is
    lexed, parsed into a syntax tree and evaluated; the value of its
    last statement is printed.

    \b
    Examples:
        attis program.cyb            # Prints "Answer: <value>"
        attis --tokens program.cyb   # Also print the tokens
        attis --ast --no-eval x.cyb  # Print the tree only

    \b
    Environment:
        ATTIS_CHECK_TREE   Verify tree invariants (default on)
        ATTIS_TRACE        Log every byte read (default off)
        ATTIS_EVALUATE     Evaluate the program (default on)
    """
    if threads is not None:
        fail("multi-threading (--threads) is not yet supported")
    if not input_files:
        fail("no input files given")
    if len(input_files) > 1:
        fail("multiple input files are not yet supported")

    input_file = input_files[0]
    setup_logging(verbose)

    options = CompilerOptions.from_env()
    if no_eval:
        options.evaluate = False
    logger.debug(f"Options: {options}")

    try:
        if verbose:
            click.echo(f"Compiling {input_file}...")

        compiler = CybeleCompiler(options)
        with compiler.compile_file(input_file) as result:
            if tokens:
                for token in result.tokens:
                    click.echo(str(token))

            if ast:
                click.echo(ASTPrinter().print(result.ast))

            if verbose:
                click.echo(f"Tokenized: {result.token_count} tokens")
                click.echo(f"Parsed: {len(result.ast.statements)} statements")

            if options.evaluate:
                click.echo(f"Answer: {format_answer(result.value)}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, filename=str(input_file))


if __name__ == "__main__":
    main()
