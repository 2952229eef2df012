"""
Pass 1 - Symbol Table and Intermediate Code
===========================================

Pass 1 walks the source once, tracking the location counter. It binds
every valid label to the address of its line and rewrites each line that
occupies memory as an address-annotated intermediate record.

Location Counter Rules
----------------------
| Opcode         | Bytes reserved                 |
|----------------|--------------------------------|
| START h        | none; counter reset to hex h   |
| RESW n         | 3 * n                          |
| RESB n         | n                              |
| BYTE C'...'    | len(operand) - 3               |
| BYTE X'...'    | (len(operand) - 2) // 2        |
| WORD           | 3                              |
| instruction    | 3                              |
| anything else  | line ignored                   |

A label is bound before its line's bytes are counted, so it names the
first byte of the line. The START line itself is never label-resolved:
its label becomes the program name instead.

After the last line a terminal record tagged END marks the address where
the program stops. An END line in the source emits no record and no
diagnostic; the terminal record takes its place.

Error Handling
--------------
- A START operand that is not hexadecimal is ignored and reported as a
  MALFORMED_START_ADDRESS diagnostic.
- Unknown opcodes, invalid labels, redefined labels and malformed BYTE
  literals are reported as diagnostics; assembly continues.
- A RESW/RESB count that is not a decimal number raises
  MalformedDirectiveOperandError and aborts the pass.

Example
-------
>>> from sicasm.assembler.opcodes import load_opcodes
>>> from sicasm.assembler.pass1 import run_pass1, format_pass1_report
>>> result = run_pass1("PROG START 1000\\nLOOP ADD FIVE\\nFIVE WORD",
...                    load_opcodes("ADD 18"))
>>> dict(result.symbols)
{'LOOP': 4096, 'FIVE': 4099}
>>> print(format_pass1_report(result))
Symbol Table:
LOOP: 1000
FIVE: 1003
<BLANKLINE>
<BLANKLINE>
Intermediate Code:
1000 LOOP ADD FIVE
1003 FIVE WORD
1006 END
<BLANKLINE>
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Optional
import logging
import re

from sicasm.errors import (
    Diagnostic,
    DiagnosticCollector,
    DiagnosticKind,
    MalformedDirectiveOperandError,
)
from sicasm.assembler.lexer import SourceLine, tokenize_source
from sicasm.assembler.opcodes import WORD_SIZE, DirectiveKind, OpcodeTable, classify

logger = logging.getLogger(__name__)


LABEL_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
HEX_NUMBER = re.compile(r"[0-9A-Fa-f]+")
DECIMAL_NUMBER = re.compile(r"[0-9]+")

END_TAG = "END"


def is_valid_label(label: str) -> bool:
    """Return True if label can be entered in the symbol table."""
    return LABEL_PATTERN.fullmatch(label) is not None


def format_address(address: int) -> str:
    """Render an address as 4 upper-case hex digits."""
    return f"{address:04X}"


# =============================================================================
# Pass 1 Results
# =============================================================================

@dataclass(frozen=True)
class IntermediateRecord:
    """
    One address-annotated line of intermediate code.

    Attributes:
        address: Location counter value before the line's bytes
        label: Label field of the source line
        opcode: Opcode field of the source line
        operand: Operand field of the source line
        is_end: True only for the terminal END record
        line_number: Source line the record came from (0 for END)
    """
    address: int
    label: str = ""
    opcode: str = ""
    operand: str = ""
    is_end: bool = False
    line_number: int = 0

    @classmethod
    def end(cls, address: int) -> "IntermediateRecord":
        return cls(address, is_end=True)

    def __str__(self) -> str:
        if self.is_end:
            return f"{format_address(self.address)} {END_TAG}"
        return f"{format_address(self.address)} {self.label} {self.opcode} {self.operand}"


@dataclass(frozen=True)
class Pass1Result:
    """
    Everything Pass 2 needs from Pass 1.

    Attributes:
        symbols: Read-only label -> address mapping, in definition order
        intermediate: Intermediate records, END record last
        start_address: Address from START, or None if no valid START
        program_name: Label of the START line ("" if none)
        location_counter: Final location counter value
        diagnostics: Recoverable problems found during the pass
        opcodes: The opcode table the pass sized instructions with
    """
    symbols: Mapping[str, int]
    intermediate: tuple[IntermediateRecord, ...]
    start_address: Optional[int] = None
    program_name: str = ""
    location_counter: int = 0
    diagnostics: tuple[Diagnostic, ...] = ()
    opcodes: Mapping[str, str] = field(default_factory=OpcodeTable)

    @property
    def has_start_address(self) -> bool:
        return self.start_address is not None

    @property
    def program_length(self) -> int:
        """Bytes between the start address and the END record."""
        return self.location_counter - (self.start_address or 0)


# =============================================================================
# Pass 1 Driver
# =============================================================================

@dataclass
class _Pass1State:
    """Mutable state of a single Pass 1 run."""
    location_counter: int = 0
    start_address: Optional[int] = None
    program_name: str = ""
    symbols: dict[str, int] = field(default_factory=dict)
    records: list[IntermediateRecord] = field(default_factory=list)
    diagnostics: DiagnosticCollector = field(default_factory=DiagnosticCollector)


def run_pass1(
    source: str | Iterable[str],
    opcodes: Mapping[str, str],
    filename: str = "<input>",
) -> Pass1Result:
    """
    Build the symbol table and intermediate code for a program.

    Args:
        source: Source text or an iterable of source lines
        opcodes: Opcode table (mnemonic -> machine code)
        filename: Source filename for diagnostics

    Returns:
        An immutable Pass1Result

    Raises:
        MalformedDirectiveOperandError: If a RESW/RESB count is not decimal
    """
    state = _Pass1State()

    for line in tokenize_source(source, filename):
        _process_line(state, line, opcodes)

    state.records.append(IntermediateRecord.end(state.location_counter))

    logger.debug(
        f"Pass 1 complete: {len(state.symbols)} symbols, "
        f"{len(state.records)} records, end at {format_address(state.location_counter)}"
    )

    return Pass1Result(
        symbols=MappingProxyType(dict(state.symbols)),
        intermediate=tuple(state.records),
        start_address=state.start_address,
        program_name=state.program_name,
        location_counter=state.location_counter,
        diagnostics=tuple(state.diagnostics.diagnostics),
        opcodes=OpcodeTable(opcodes),
    )


def _process_line(state: _Pass1State, line: SourceLine, opcodes: Mapping[str, str]) -> None:
    kind = classify(line.opcode, opcodes)

    if kind is DirectiveKind.START:
        _process_start(state, line)
        return

    if line.label:
        _define_label(state, line)

    size = _line_size(state, kind, line)
    if size is None:
        if line.opcode and line.opcode != END_TAG:
            state.diagnostics.add(
                DiagnosticKind.UNKNOWN_OPCODE,
                f"unknown opcode '{line.opcode}', line ignored",
                line.location,
            )
        return

    state.records.append(IntermediateRecord(
        address=state.location_counter,
        label=line.label,
        opcode=line.opcode,
        operand=line.operand,
        line_number=line.line_number,
    ))
    state.location_counter += size


def _process_start(state: _Pass1State, line: SourceLine) -> None:
    if not HEX_NUMBER.fullmatch(line.operand):
        state.diagnostics.add(
            DiagnosticKind.MALFORMED_START_ADDRESS,
            f"START operand '{line.operand}' is not a hexadecimal address, directive ignored",
            line.location,
        )
        return

    state.start_address = int(line.operand, 16)
    state.location_counter = state.start_address
    state.program_name = line.label
    logger.debug(f"Program '{line.label}' starts at {format_address(state.start_address)}")


def _define_label(state: _Pass1State, line: SourceLine) -> None:
    label = line.label
    if not is_valid_label(label):
        state.diagnostics.add(
            DiagnosticKind.INVALID_LABEL,
            f"invalid label '{label}' not entered in symbol table",
            line.location,
        )
        return

    previous = state.symbols.get(label)
    if previous is not None:
        state.diagnostics.add(
            DiagnosticKind.REDEFINED_LABEL,
            f"label '{label}' redefined: {format_address(previous)} -> "
            f"{format_address(state.location_counter)}",
            line.location,
        )
    state.symbols[label] = state.location_counter


def _line_size(state: _Pass1State, kind: DirectiveKind, line: SourceLine) -> Optional[int]:
    """Return the bytes a line occupies, or None if it emits no record."""
    if kind is DirectiveKind.RESW:
        return WORD_SIZE * _reservation_count(line)
    elif kind is DirectiveKind.RESB:
        return _reservation_count(line)
    elif kind is DirectiveKind.BYTE:
        return _byte_literal_size(state, line)
    elif kind is DirectiveKind.WORD:
        return WORD_SIZE
    elif kind is DirectiveKind.INSTRUCTION:
        return WORD_SIZE
    return None


def _reservation_count(line: SourceLine) -> int:
    if not DECIMAL_NUMBER.fullmatch(line.operand):
        raise MalformedDirectiveOperandError(
            line.opcode,
            line.operand,
            location=line.location,
            source_line=line.text,
        )
    return int(line.operand)


def _byte_literal_size(state: _Pass1State, line: SourceLine) -> int:
    operand = line.operand
    if len(operand) >= 3 and operand.endswith("'"):
        if operand.startswith("C'"):
            return len(operand) - 3
        if operand.startswith("X'"):
            return (len(operand) - 2) // 2

    state.diagnostics.add(
        DiagnosticKind.MALFORMED_BYTE_LITERAL,
        f"BYTE operand '{operand}' is neither C'...' nor X'...', no bytes reserved",
        line.location,
    )
    return 0


# =============================================================================
# Report
# =============================================================================

def format_symbol_table(symbols: Mapping[str, int]) -> str:
    return "".join(f"{label}: {format_address(address)}\n" for label, address in symbols.items())


def format_intermediate_code(records: Iterable[IntermediateRecord]) -> str:
    return "".join(f"{record}\n" for record in records)


def format_pass1_report(result: Pass1Result) -> str:
    """
    Render the Pass 1 report.

    The layout is "Symbol Table:", one "LABEL: ADDR" line per symbol, a
    blank line, then "Intermediate Code:" and one line per record.
    """
    return (
        "Symbol Table:\n"
        + format_symbol_table(result.symbols)
        + "\n\nIntermediate Code:\n"
        + format_intermediate_code(result.intermediate)
    )
