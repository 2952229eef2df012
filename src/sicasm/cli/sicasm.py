"""
sicasm - Two-Pass Assembler Command-Line Interface
==================================================

Runs Pass 1 and Pass 2 over a source file and prints both reports.

Usage Examples
--------------
Assemble with the standard SIC opcode table:
    $ sicasm copy.asm

With an opcode table of your own:
    $ sicasm copy.asm -t opcodes.txt

Write the reports to files:
    $ sicasm copy.asm -o copy.obj -l copy.lst

Only build the symbol table and intermediate code:
    $ sicasm --pass1-only copy.asm
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click

from sicasm import __version__
from sicasm.assembler import Assembler
from sicasm.assembler.pass1 import format_pass1_report
from sicasm.cli.errors import ExitCode, handle_cli_exception

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-t", "--opcodes",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Opcode table file, one 'MNEMONIC CODE' pair per line "
         "(default: standard SIC instruction set)",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the object program to FILE instead of stdout",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the symbol table and intermediate code to FILE instead of stdout",
)
@click.option(
    "--pass1-only",
    is_flag=True,
    help="Stop after Pass 1",
)
@click.option(
    "--strip-trailing-separator",
    is_flag=True,
    help="Drop the caret and space that follow the last Text record entry",
)
@click.option(
    "-W", "--warnings",
    is_flag=True,
    help="Print Pass 1 diagnostics (ignored START, unknown opcodes, ...)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="sicasm")
def main(
    input_file: Path,
    opcodes: Optional[Path],
    output: Optional[Path],
    listing: Optional[Path],
    pass1_only: bool,
    strip_trailing_separator: bool,
    warnings: bool,
    verbose: bool,
) -> None:
    """
    Assemble a SIC-style program in two passes.

    INPUT_FILE is the assembly source, one 'LABEL OPCODE OPERAND' line
    per statement.

    \b
    Examples:
        sicasm copy.asm                 # Both reports to stdout
        sicasm copy.asm -t ops.txt      # Custom opcode table
        sicasm copy.asm -o copy.obj     # Object program to a file
        sicasm --pass1-only copy.asm    # Symbol table only
    """
    setup_logging(verbose)

    asm = Assembler(verbose=verbose, strip_trailing_separator=strip_trailing_separator)

    try:
        if opcodes is not None:
            asm.load_opcodes_file(opcodes)

        # Pass 1
        result = asm.run_pass1(input_file.read_text(), str(input_file))

        if warnings and result.diagnostics:
            click.echo(asm.get_diagnostic_report(), err=True)

        if listing:
            asm.write_listing(listing)
        else:
            click.echo(format_pass1_report(result))

        if pass1_only:
            return

        # Pass 2
        report = asm.pass2_report()
        if asm.has_errors():
            click.echo(report, err=True)
            sys.exit(ExitCode.BUILD_ERROR)

        if output:
            output.write_text(report)
            if verbose:
                click.echo(f"Wrote object program to {output}")
        else:
            click.echo(report, nl=False)

        if verbose:
            click.echo(
                f"Assembly complete: {len(result.symbols)} symbols, "
                f"{result.program_length} bytes at {result.start_address:06X}"
            )

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
