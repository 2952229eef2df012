"""
Two-Pass Assembler - Main Interface
===================================

This module provides the Assembler class, the primary interface for
assembling programs. It owns the opcode table, runs Pass 1 and Pass 2 in
order, and keeps the last Pass 1 result so Pass 2 can be requested later.

Example Usage
-------------
>>> from sicasm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> asm.load_opcodes("ADD 18")
>>> print(asm.pass1_report('''\\
... PROG START 1000
... LOOP ADD FIVE
... FIVE WORD'''))
>>> print(asm.pass2_report())
Object Program:
H ^ PROG ^ 001000
T ^ 001000 ^ 03 ^ 181003^
E ^ 001000

Command-Line Usage
------------------
    $ sicasm copy.asm -t opcodes.txt -o copy.obj -l copy.lst

Options:
    -t, --opcodes FILE             Opcode table (default: standard SIC set)
    -o, --output FILE              Write the object program report
    -l, --listing FILE             Write the Pass 1 report
    --pass1-only                   Stop after Pass 1
    --strip-trailing-separator     Drop the final caret of the Text record
    -W, --warnings                 Print diagnostics
    -v, --verbose                  Verbose output
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Iterable, Optional
import logging

from sicasm.errors import AssemblerError, Diagnostic, format_diagnostics
from sicasm.assembler.opcodes import OpcodeTable
from sicasm.assembler.pass1 import (
    IntermediateRecord,
    Pass1Result,
    format_pass1_report,
    run_pass1,
)
from sicasm.assembler.pass2 import ObjectProgram, format_pass2_report, run_pass2

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main two-pass assembler class.

    Pass 1 results are immutable values. run_pass2() always works from the
    result of the most recent successful run_pass1(), never from state that
    a later, failed Pass 1 left half-written. It also uses the opcode table
    that Pass 1 ran with, so loading a new table only affects the next
    Pass 1.

    Attributes:
        opcodes: The opcode table in use
    """

    def __init__(self, opcodes: Optional[Mapping[str, str]] = None,
                 verbose: bool = False,
                 strip_trailing_separator: bool = False):
        """
        Initialize the assembler.

        Args:
            opcodes: Opcode table; defaults to the standard SIC instruction set
            verbose: Log progress at INFO level
            strip_trailing_separator: Drop the trailing "^ " of the Text record
        """
        self.opcodes: OpcodeTable = (
            OpcodeTable(opcodes) if opcodes is not None else OpcodeTable.sic()
        )
        self._verbose = verbose
        self._strip_trailing_separator = strip_trailing_separator
        self._pass1: Optional[Pass1Result] = None

    def _log(self, message: str) -> None:
        if self._verbose:
            logger.info(message)
        else:
            logger.debug(message)

    # =========================================================================
    # Configuration
    # =========================================================================

    def load_opcodes(self, text: str) -> OpcodeTable:
        """
        Replace the opcode table with definitions parsed from text.

        Args:
            text: Lines of "mnemonic machineCode"

        Returns:
            The new opcode table
        """
        self.opcodes = OpcodeTable.parse(text)
        self._log(f"Opcode table loaded: {len(self.opcodes)} opcodes")
        return self.opcodes

    def load_opcodes_file(self, filepath: str | Path) -> OpcodeTable:
        """
        Replace the opcode table with definitions read from a file.

        Raises:
            OpcodeTableError: If the file cannot be read
        """
        self.opcodes = OpcodeTable.from_file(filepath)
        self._log(f"Opcode table loaded from {filepath}: {len(self.opcodes)} opcodes")
        return self.opcodes

    # =========================================================================
    # Passes
    # =========================================================================

    def run_pass1(self, source: str | Iterable[str], filename: str = "<input>") -> Pass1Result:
        """
        Run Pass 1 and remember the result for Pass 2.

        Raises:
            MalformedDirectiveOperandError: If a RESW/RESB count is not decimal
        """
        self._log(f"Pass 1: {filename}")
        result = run_pass1(source, self.opcodes, filename)
        self._pass1 = result

        for diagnostic in result.diagnostics:
            logger.debug(str(diagnostic))
        self._log(f"Pass 1: {len(result.symbols)} symbols, {len(result.intermediate)} records")
        return result

    def run_pass2(self) -> ObjectProgram:
        """
        Run Pass 2 on the last Pass 1 result, with the opcode table that
        Pass 1 used.

        Raises:
            AssemblerError: If Pass 1 has not been run
            UndefinedStartAddressError: If Pass 1 saw no valid START
        """
        pass1 = self._require_pass1()
        program = run_pass2(pass1)
        self._log(f"Pass 2: {len(program.entries)} entries, {program.text_length} bytes")
        return program

    def _require_pass1(self) -> Pass1Result:
        if self._pass1 is None:
            raise AssemblerError(
                "Pass 2 requires a completed Pass 1",
                hint="run Pass 1 on the source first",
            )
        return self._pass1

    # =========================================================================
    # Reports
    # =========================================================================

    def pass1_report(self, source: str | Iterable[str], filename: str = "<input>") -> str:
        """Run Pass 1 and return its textual report."""
        return format_pass1_report(self.run_pass1(source, filename))

    def pass2_report(self) -> str:
        """
        Run Pass 2 and return its textual report.

        Returns "Error: Start address not defined." instead of raising when
        the last Pass 1 saw no START directive.

        Raises:
            AssemblerError: If Pass 1 has not been run
        """
        return format_pass2_report(
            self._require_pass1(),
            strip_trailing_separator=self._strip_trailing_separator,
        )

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> ObjectProgram:
        """
        Run both passes on source text.

        Raises:
            MalformedDirectiveOperandError: If a RESW/RESB count is not decimal
            UndefinedStartAddressError: If there is no valid START directive
        """
        self.run_pass1(source, filename)
        return self.run_pass2()

    def assemble_file(self, filepath: str | Path) -> ObjectProgram:
        """
        Run both passes on a source file.

        Raises:
            FileNotFoundError: If the source file does not exist
        """
        filepath = Path(filepath)
        source = filepath.read_text()
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_symbols(self) -> dict[str, int]:
        """Return a copy of the symbol table from the last Pass 1."""
        return dict(self._require_pass1().symbols)

    def get_intermediate(self) -> tuple[IntermediateRecord, ...]:
        """Return the intermediate code from the last Pass 1."""
        return self._require_pass1().intermediate

    def get_pass1_result(self) -> Optional[Pass1Result]:
        return self._pass1

    def write_listing(self, filepath: str | Path) -> None:
        """Write the Pass 1 report of the last run."""
        Path(filepath).write_text(format_pass1_report(self._require_pass1()))
        self._log(f"Wrote listing to {filepath}")

    def write_object(self, filepath: str | Path) -> None:
        """Write the Pass 2 report of the last run."""
        Path(filepath).write_text(self.pass2_report())
        self._log(f"Wrote object program to {filepath}")

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def get_diagnostics(self) -> tuple[Diagnostic, ...]:
        if self._pass1 is None:
            return ()
        return self._pass1.diagnostics

    def has_errors(self) -> bool:
        """
        Return True if the last Pass 1 cannot feed Pass 2.

        Diagnostics alone are warnings; only a missing start address
        prevents an object program.
        """
        return self._pass1 is not None and not self._pass1.has_start_address

    def get_diagnostic_report(self) -> str:
        return format_diagnostics(self.get_diagnostics())


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, opcodes: Optional[Mapping[str, str]] = None) -> ObjectProgram:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        opcodes: Opcode table; defaults to the standard SIC instruction set

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler(opcodes).assemble_string(source)


def assemble_file(filepath: str | Path, opcodes: Optional[Mapping[str, str]] = None) -> ObjectProgram:
    """Convenience function to assemble a source file."""
    return Assembler(opcodes).assemble_file(filepath)
