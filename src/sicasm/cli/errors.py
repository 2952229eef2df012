"""
sicasm Exit Codes
=================

Maps whatever stopped an assembly run to a message on stderr and a
process exit code.

| Exit | Meaning                                                   |
|------|-----------------------------------------------------------|
| 0    | Object program (or Pass 1 listing) produced               |
| 1    | Source or opcode table rejected, or no START directive    |
| 2    | Bad command line, or a named file cannot be read/written  |
| 3    | Bug in sicasm itself                                      |

Pass 1 warnings never change the exit code.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from sicasm.errors import SicAsmError


class ExitCode(IntEnum):
    """Process exit codes of the sicasm command."""
    SUCCESS = 0
    BUILD_ERROR = 1
    INVALID_ARGS = 2
    INTERNAL_ERROR = 3


def exit_code_for(error: Exception) -> ExitCode:
    """Return the exit code an exception maps to."""
    if isinstance(error, SicAsmError):
        return ExitCode.BUILD_ERROR
    if isinstance(error, (click.BadParameter, OSError)):
        return ExitCode.INVALID_ARGS
    return ExitCode.INTERNAL_ERROR


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception that aborted the sicasm command and exit.

    Assembler errors are printed with their source location and hint, and
    prefixed with "<error_type> error: " when error_type is given. File and
    argument problems get a plain "Error: " prefix. Anything else is an
    internal error; -v adds the traceback.

    Raises:
        SystemExit: Always
    """
    code = exit_code_for(error)

    if code is ExitCode.BUILD_ERROR:
        prefix = f"{error_type} error: " if error_type else "Error: "
    elif code is ExitCode.INVALID_ARGS:
        prefix = "Error: "
    else:
        prefix = "Internal error: "

    click.echo(f"{prefix}{error}", err=True)
    if code is ExitCode.INTERNAL_ERROR and verbose:
        traceback.print_exc()
    sys.exit(code)
