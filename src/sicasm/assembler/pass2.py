"""
Pass 2 - Object Program Generation
==================================

Pass 2 turns the intermediate code of Pass 1 into an object program made
of Header, Text and End records.

Object Program Format
---------------------
```
H ^ <name> ^ <start, 6 hex digits>
T ^ <start, 6 hex digits> ^ <length, 2 hex digits> ^ <entry^entry^...entry^>
E ^ <start, 6 hex digits>
```

Each text entry is the machine code of the opcode followed by the operand
as 4 hex digits. Every entry counts as 3 bytes. The Text record is only
present when at least one entry was produced.

Operand Resolution
------------------
In priority order:

1. a label in the symbol table -> its address
2. a decimal numeral -> its value
3. anything else -> 0000

Records whose opcode has no machine code (directives, unknown mnemonics)
contribute nothing. Records without an operand field are skipped too.

Trailing Separator
------------------
The Text record has always been written with a caret after its last entry
and a space before the newline (``T ^ 001000 ^ 03 ^ 181003^ ``). That
layout is kept by default. Pass ``strip_trailing_separator=True`` to get
``T ^ 001000 ^ 03 ^ 181003``.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Iterable, Optional
import logging

from sicasm.errors import UndefinedStartAddressError
from sicasm.assembler.opcodes import WORD_SIZE
from sicasm.assembler.pass1 import (
    DECIMAL_NUMBER,
    IntermediateRecord,
    Pass1Result,
    format_address,
)

logger = logging.getLogger(__name__)


RECORD_SEPARATOR = " ^ "
ENTRY_SEPARATOR = "^"
DEFAULT_OPERAND = "0000"

ERROR_NO_START = f"Error: {UndefinedStartAddressError.MESSAGE}"


# =============================================================================
# Object Program
# =============================================================================

@dataclass(frozen=True)
class ObjectProgram:
    """
    An assembled object program.

    Attributes:
        program_name: Name from the START line
        start_address: Load/start address
        entries: Object-code entries in program order (e.g. "181003")
    """
    program_name: str
    start_address: int
    entries: tuple[str, ...] = ()

    @property
    def text_length(self) -> int:
        """Length of the text section in bytes."""
        return WORD_SIZE * len(self.entries)

    def header_record(self) -> str:
        return f"H ^ {self.program_name} ^ {self.start_address:06X}"

    def text_record(self, strip_trailing_separator: bool = False) -> Optional[str]:
        """Return the Text record, or None if no code was generated."""
        if not self.entries:
            return None
        body = "".join(f"{entry}{ENTRY_SEPARATOR}" for entry in self.entries)
        record = f"T ^ {self.start_address:06X} ^ {self.text_length:02X} ^ {body} "
        if strip_trailing_separator:
            record = record.rstrip(" ").removesuffix(ENTRY_SEPARATOR)
        return record

    def end_record(self) -> str:
        return f"E ^ {self.start_address:06X}"

    def records(self, strip_trailing_separator: bool = False) -> list[str]:
        """Return the Header, optional Text, and End records in order."""
        lines = [self.header_record()]
        text = self.text_record(strip_trailing_separator)
        if text is not None:
            lines.append(text)
        lines.append(self.end_record())
        return lines

    def format(self, strip_trailing_separator: bool = False) -> str:
        """Render the object program, one record per line."""
        return "".join(f"{line}\n" for line in self.records(strip_trailing_separator))

    def __str__(self) -> str:
        return self.format()


# =============================================================================
# Pass 2 Driver
# =============================================================================

def resolve_operand(operand: str, symbols: Mapping[str, int]) -> str:
    """
    Resolve an operand to 4 hex digits.

    Args:
        operand: Operand field of an intermediate record
        symbols: Symbol table from Pass 1

    Returns:
        The symbol address, the decimal value, or "0000"
    """
    address = symbols.get(operand)
    if address is not None:
        return format_address(address)
    if DECIMAL_NUMBER.fullmatch(operand):
        return format_address(int(operand))
    return DEFAULT_OPERAND


def build_object_program(
    intermediate: Iterable[IntermediateRecord],
    symbols: Mapping[str, int],
    opcodes: Mapping[str, str],
    start_address: Optional[int],
    program_name: str = "",
) -> ObjectProgram:
    """
    Generate the object program from explicit Pass 1 outputs.

    Raises:
        UndefinedStartAddressError: If start_address is None
    """
    if start_address is None:
        raise UndefinedStartAddressError()

    entries: list[str] = []
    for record in intermediate:
        if record.is_end or not record.opcode or not record.operand:
            continue

        machine_code = opcodes.get(record.opcode)
        if machine_code is None:
            logger.debug(f"No machine code for '{record.opcode}' at {format_address(record.address)}, skipped")
            continue

        entries.append(machine_code + resolve_operand(record.operand, symbols))

    logger.debug(f"Pass 2 complete: {len(entries)} object code entries")
    return ObjectProgram(program_name, start_address, tuple(entries))


def run_pass2(pass1: Pass1Result, opcodes: Optional[Mapping[str, str]] = None) -> ObjectProgram:
    """
    Generate the object program from a Pass 1 result.

    Args:
        pass1: Result of run_pass1()
        opcodes: Opcode table (mnemonic -> machine code); defaults to the
                 table Pass 1 sized the program with

    Raises:
        UndefinedStartAddressError: If Pass 1 saw no valid START directive
    """
    return build_object_program(
        pass1.intermediate,
        pass1.symbols,
        pass1.opcodes if opcodes is None else opcodes,
        pass1.start_address,
        pass1.program_name,
    )


def format_pass2_report(
    pass1: Pass1Result,
    opcodes: Optional[Mapping[str, str]] = None,
    strip_trailing_separator: bool = False,
) -> str:
    """
    Render the Pass 2 report.

    Returns "Object Program:" followed by the records, or exactly
    "Error: Start address not defined." when there is no start address.
    """
    try:
        program = run_pass2(pass1, opcodes)
    except UndefinedStartAddressError:
        logger.debug("Pass 2 refused: no start address")
        return ERROR_NO_START
    return "Object Program:\n" + program.format(strip_trailing_separator)
