"""
Opcode Table and Directive Classification
=========================================

This module holds the mapping from mnemonic to machine-code string that
both assembler passes query, and the classification of an opcode field
into the directive kinds Pass 1 dispatches on.

Opcode Definition Format
------------------------
An opcode table is loaded from plain text, one definition per line, two
whitespace-separated fields:

    ADD   18
    LDA   00
    RSUB  4C

Fields are split the same way as source lines, so a line that begins with
whitespace has an empty first field. Lines that do not split into exactly
two fields are dropped without error, and that includes indented lines
such as " ADD 18". Mnemonics are matched exactly and
case-sensitively; when a mnemonic appears twice the later definition wins.

Machine codes are kept as strings. They are concatenated verbatim with the
resolved operand during Pass 2, so "18" stays "18" and is never reparsed.

Directive Kinds
---------------
Every source line is classified once into one of:

    START        set the start address and program name
    RESW         reserve 3 * n bytes
    RESB         reserve n bytes
    BYTE         character (C'...') or hex (X'...') constant
    WORD         one 3-byte word
    INSTRUCTION  mnemonic present in the opcode table (3 bytes)
    UNKNOWN      anything else; the line is ignored

Directive names take precedence over opcode table entries.
"""

from collections.abc import Mapping
from enum import Enum, auto
from pathlib import Path
from typing import Iterator, Optional
import logging

from sicasm.errors import OpcodeTableError
from sicasm.assembler.lexer import split_fields

logger = logging.getLogger(__name__)


# =============================================================================
# Instruction Format
# =============================================================================

# Every instruction and WORD occupies one fixed-width 3-byte word.
WORD_SIZE = 3


# =============================================================================
# Directive Classification
# =============================================================================

class DirectiveKind(Enum):
    """How Pass 1 treats a source line, decided from its opcode field."""
    START = auto()
    RESW = auto()
    RESB = auto()
    BYTE = auto()
    WORD = auto()
    INSTRUCTION = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name


# Directive mnemonics, case-sensitive like the opcode table.
DIRECTIVES: dict[str, DirectiveKind] = {
    "START": DirectiveKind.START,
    "RESW": DirectiveKind.RESW,
    "RESB": DirectiveKind.RESB,
    "BYTE": DirectiveKind.BYTE,
    "WORD": DirectiveKind.WORD,
}


def classify(opcode: str, opcodes: Mapping[str, str]) -> DirectiveKind:
    """
    Classify an opcode field.

    Args:
        opcode: The opcode field of a source line (may be empty)
        opcodes: Opcode table used to recognize instructions

    Returns:
        The DirectiveKind for the line
    """
    kind = DIRECTIVES.get(opcode)
    if kind is not None:
        return kind
    if opcode and opcode in opcodes:
        return DirectiveKind.INSTRUCTION
    return DirectiveKind.UNKNOWN


# =============================================================================
# Opcode Table
# =============================================================================

class OpcodeTable(Mapping):
    """
    Read-only mapping of mnemonic to machine-code string.

    Example:
        >>> table = OpcodeTable.parse("ADD 18\\nLDA 00")
        >>> table["ADD"]
        '18'
        >>> "add" in table
        False
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        self._entries: dict[str, str] = dict(entries or {})

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> "OpcodeTable":
        """
        Parse opcode definition text.

        Args:
            text: Lines of "mnemonic machineCode"

        Returns:
            A new OpcodeTable
        """
        entries: dict[str, str] = {}
        for line_number, line in enumerate(text.split("\n"), start=1):
            fields, _ = split_fields(line)
            if len(fields) != 2:
                if line.strip():
                    logger.debug(f"Opcode line {line_number} dropped: expected 2 fields, got {len(fields)}")
                continue
            mnemonic, machine_code = fields
            if mnemonic in entries:
                logger.debug(f"Opcode '{mnemonic}' redefined on line {line_number}")
            entries[mnemonic] = machine_code
        logger.debug(f"Loaded {len(entries)} opcodes")
        return cls(entries)

    @classmethod
    def from_file(cls, filepath: str | Path) -> "OpcodeTable":
        """
        Load an opcode table from a text file.

        Raises:
            OpcodeTableError: If the file cannot be read
        """
        filepath = Path(filepath)
        try:
            text = filepath.read_text()
        except OSError as e:
            raise OpcodeTableError(
                f"cannot read opcode table '{filepath}': {e.strerror or e}"
            ) from e
        return cls.parse(text)

    @classmethod
    def sic(cls) -> "OpcodeTable":
        """Return the bundled standard SIC instruction set."""
        return cls.parse(SIC_OPCODES)

    # -------------------------------------------------------------------------
    # Mapping protocol
    # -------------------------------------------------------------------------

    def __getitem__(self, mnemonic: str) -> str:
        return self._entries[mnemonic]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"OpcodeTable({len(self._entries)} opcodes)"

    def is_instruction(self, mnemonic: str) -> bool:
        """Return True if the mnemonic assembles to machine code."""
        return mnemonic in self._entries

    def to_text(self) -> str:
        """Render the table back into definition text."""
        return "".join(f"{m} {code}\n" for m, code in self._entries.items())


def load_opcodes(text: str) -> OpcodeTable:
    """Convenience wrapper around OpcodeTable.parse()."""
    return OpcodeTable.parse(text)


# =============================================================================
# Standard SIC Instruction Set
# =============================================================================
# Used when the caller does not supply a table of its own.
# =============================================================================

SIC_OPCODES = """\
ADD 18
AND 40
COMP 28
DIV 24
J 3C
JEQ 30
JGT 34
JLT 38
JSUB 48
LDA 00
LDCH 50
LDL 08
LDX 04
MUL 20
OR 44
RD D8
RSUB 4C
STA 0C
STCH 54
STL 14
STSW E8
STX 10
SUB 1C
TD E0
TIX 2C
WD DC
"""
