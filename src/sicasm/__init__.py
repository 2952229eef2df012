"""
sicasm - Two-Pass Assembler for SIC-Style Assembly
==================================================

This package assembles a small SIC-style assembly language into a
Header/Text/End object program.

Main Components
---------------
- **assembler**: Opcode table, Pass 1, Pass 2 and the Assembler facade
- **cli**: The ``sicasm`` command-line tool

Quick Start
-----------
Assemble a program:
    >>> from sicasm import Assembler
    >>> asm = Assembler()
    >>> asm.load_opcodes("ADD 18\\nLDA 00")
    >>> print(asm.pass1_report(open("copy.asm").read()))
    >>> print(asm.pass2_report())

Or use the command-line tool:
    $ sicasm copy.asm -t opcodes.txt

Version History
---------------
1.0.0 - Initial release with both passes, opcode loader and CLI
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from sicasm.assembler import (
    Assembler,
    IntermediateRecord,
    ObjectProgram,
    OpcodeTable,
    Pass1Result,
    assemble,
    load_opcodes,
    run_pass1,
    run_pass2,
)
from sicasm.errors import (
    SicAsmError,
    AssemblerError,
    AssemblySyntaxError,
    DirectiveError,
    MalformedDirectiveOperandError,
    OpcodeTableError,
    UndefinedStartAddressError,
    Diagnostic,
    DiagnosticKind,
    SourceLocation,
)

__all__ = [
    "__version__",
    # Assembler
    "Assembler",
    "IntermediateRecord",
    "ObjectProgram",
    "OpcodeTable",
    "Pass1Result",
    "assemble",
    "load_opcodes",
    "run_pass1",
    "run_pass2",
    # Exception hierarchy
    "SicAsmError",
    "AssemblerError",
    "AssemblySyntaxError",
    "DirectiveError",
    "MalformedDirectiveOperandError",
    "OpcodeTableError",
    "UndefinedStartAddressError",
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
    "SourceLocation",
]
