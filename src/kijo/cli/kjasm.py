"""
kjasm - Desk Computer Assembler Command-Line Interface
======================================================

Assembles a source file into 8-bit program words.

Usage Examples
--------------
Print the program words, one per line:
    $ kjasm echo.asm

Write them to a file:
    $ kjasm echo.asm -o echo.txt

Raw bytes (one byte per word):
    $ kjasm echo.asm --binary -o echo.bin

Listing with slot numbers, words and disassembly:
    $ kjasm echo.asm --listing
"""

import sys
from pathlib import Path
from typing import Optional

import click

from kijo import __version__
from kijo.assembler import Assembler
from kijo.cli.errors import ExitCode, handle_cli_exception, setup_logging


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout; input.bin with --binary)",
)
@click.option(
    "-b", "--binary",
    is_flag=True,
    help="Write raw bytes instead of bit strings",
)
@click.option(
    "-l", "--listing",
    is_flag=True,
    help="Produce a listing (slot, word, disassembly, labels)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="kjasm")
def main(
    input_file: Path,
    output: Optional[Path],
    binary: bool,
    listing: bool,
    verbose: bool,
) -> None:
    """
    Assemble desk computer source code.

    INPUT_FILE is the assembly source file to assemble.

    \b
    Examples:
        kjasm echo.asm                    # Words to stdout
        kjasm echo.asm -o echo.txt        # Words to a file
        kjasm echo.asm --binary           # Raw bytes to echo.bin
        kjasm echo.asm --listing          # Listing to stdout
    """
    setup_logging(verbose)

    if binary and listing:
        click.echo("Error: --binary and --listing are mutually exclusive", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    asm = Assembler(verbose=verbose)

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...", err=True)

        asm.assemble_file(input_file)

        if asm.has_errors():
            click.echo(asm.get_error_report(), err=True)
            sys.exit(ExitCode.BUILD_ERROR)

        for warning in asm.get_warnings():
            click.echo(f"warning: {warning}", err=True)

        if binary:
            output_file = output if output is not None else input_file.with_suffix(".bin")
            asm.write_binary(output_file)
            if verbose:
                click.echo(f"Wrote {len(asm.get_code())} bytes to {output_file}", err=True)
        elif listing:
            if output is not None:
                asm.write_listing(output)
            else:
                click.echo(asm.get_listing())
        elif output is not None:
            asm.write_words(output)
        else:
            for word in asm.get_words():
                click.echo(word)

        if verbose:
            words = asm.get_words()
            click.echo(
                f"Assembly complete: {len(words)} words, {len(asm.get_symbols())} labels",
                err=True,
            )

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
