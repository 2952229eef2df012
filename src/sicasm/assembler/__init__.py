"""
Two-Pass Assembler
==================

This package translates SIC-style assembly source into an object program
in two passes.

Main Components
---------------
- **Assembler**: Facade that runs both passes and produces reports
- **OpcodeTable**: Mnemonic to machine-code mapping, loaded from text
- **run_pass1**: Symbol table and intermediate code construction
- **run_pass2**: Header/Text/End object program generation

Assembly Process
----------------
1. **Pass 1**:
   - Tokenize each line into label, opcode and operand
   - Track the location counter from the START address
   - Bind labels to addresses, emit intermediate records

2. **Pass 2**:
   - Look up machine code for each intermediate record
   - Resolve operands through the symbol table
   - Emit Header, Text and End records

Example Usage
-------------
>>> from sicasm.assembler import Assembler, OpcodeTable
>>> asm = Assembler(OpcodeTable.parse("ADD 18"))
>>> program = asm.assemble_string('''\\
... PROG START 1000
... LOOP ADD FIVE
... FIVE WORD''')
>>> program.entries
('181003',)
"""

from sicasm.assembler.assembler import Assembler, assemble, assemble_file
from sicasm.assembler.lexer import SourceLine, split_fields, tokenize_line, tokenize_source
from sicasm.assembler.opcodes import (
    DIRECTIVES,
    SIC_OPCODES,
    WORD_SIZE,
    DirectiveKind,
    OpcodeTable,
    classify,
    load_opcodes,
)
from sicasm.assembler.pass1 import (
    IntermediateRecord,
    Pass1Result,
    format_pass1_report,
    is_valid_label,
    run_pass1,
)
from sicasm.assembler.pass2 import (
    ObjectProgram,
    build_object_program,
    format_pass2_report,
    resolve_operand,
    run_pass2,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Tokenizer
    "SourceLine",
    "split_fields",
    "tokenize_line",
    "tokenize_source",
    # Opcodes
    "DIRECTIVES",
    "SIC_OPCODES",
    "WORD_SIZE",
    "DirectiveKind",
    "OpcodeTable",
    "classify",
    "load_opcodes",
    # Pass 1
    "IntermediateRecord",
    "Pass1Result",
    "format_pass1_report",
    "is_valid_label",
    "run_pass1",
    # Pass 2
    "ObjectProgram",
    "build_object_program",
    "format_pass2_report",
    "resolve_operand",
    "run_pass2",
]
