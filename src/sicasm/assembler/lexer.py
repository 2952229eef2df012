"""
Source Line Tokenizer
=====================

Splits assembly source into label/opcode/operand fields.

Line Format
-----------
Each source line holds up to three whitespace-separated fields:

    LABEL   OPCODE  OPERAND
    PROG    START   1000
            ADD     FIVE
    FIVE    WORD

A line that begins with whitespace has an empty label. Missing trailing
fields are empty strings, and anything after the third field is ignored.
There is no comment syntax: a line whose opcode is not recognized is
simply skipped by Pass 1.

Example
-------
>>> from sicasm.assembler.lexer import tokenize_source
>>> for line in tokenize_source("PROG START 1000\\n  ADD FIVE"):
...     print(line)
SourceLine(1, 'PROG', 'START', '1000')
SourceLine(2, '', 'ADD', 'FIVE')
"""

from dataclasses import dataclass
from typing import Iterable, Iterator
import re

from sicasm.errors import AssemblySyntaxError, SourceLocation


# Runs of non-whitespace; ASCII whitespace only.
_FIELD = re.compile(r"\S+", re.ASCII)
_LEADING_SPACE = re.compile(r"\s", re.ASCII)


@dataclass(frozen=True)
class SourceLine:
    """
    One tokenized source line.

    Attributes:
        line_number: Line number in the source (1-indexed)
        text: The raw line text, without the line terminator
        label: Label field ("" if absent)
        opcode: Opcode field ("" if absent)
        operand: Operand field ("" if absent)
        filename: Name of the source file
        operand_column: Column where the operand starts (0 if absent)
    """
    line_number: int
    text: str
    label: str = ""
    opcode: str = ""
    operand: str = ""
    filename: str = "<input>"
    operand_column: int = 0

    def __repr__(self) -> str:
        return f"SourceLine({self.line_number}, {self.label!r}, {self.opcode!r}, {self.operand!r})"

    @property
    def location(self) -> SourceLocation:
        """Location of the line, pointing at the operand when there is one."""
        return SourceLocation(self.filename, self.line_number, self.operand_column)

    def is_blank(self) -> bool:
        return not (self.label or self.opcode or self.operand)


def split_fields(text: str) -> tuple[list[str], list[int]]:
    """
    Split a line into fields the way the source format defines them.

    Returns:
        (fields, columns) where columns are 1-indexed start positions.
        A leading empty field (column 0) stands for an omitted label.
    """
    fields: list[str] = []
    columns: list[int] = []
    if text and _LEADING_SPACE.match(text):
        fields.append("")
        columns.append(0)
    for match in _FIELD.finditer(text):
        fields.append(match.group())
        columns.append(match.start() + 1)
    return fields, columns


def tokenize_line(text: str, line_number: int = 1, filename: str = "<input>") -> SourceLine:
    """
    Tokenize a single source line.

    Args:
        text: The line text (a trailing line terminator is ignored)
        line_number: Line number for error reporting
        filename: Source filename for error reporting

    Raises:
        AssemblySyntaxError: If text is not a string
    """
    if not isinstance(text, str):
        raise AssemblySyntaxError(
            f"source line must be text, got {type(text).__name__}",
            location=SourceLocation(filename, line_number),
        )

    text = text.rstrip("\r\n")
    fields, columns = split_fields(text)
    fields += [""] * (3 - len(fields))
    columns += [0] * (3 - len(columns))

    return SourceLine(
        line_number=line_number,
        text=text,
        label=fields[0],
        opcode=fields[1],
        operand=fields[2],
        filename=filename,
        operand_column=columns[2],
    )


def tokenize_source(source: str | Iterable[str], filename: str = "<input>") -> Iterator[SourceLine]:
    """
    Tokenize a whole program.

    Only "\\n" ends a line; a "\\r" before it is dropped with the terminator
    and any other control character stays inside its line.

    Args:
        source: Source text, or an iterable of lines
        filename: Source filename for error reporting

    Yields:
        One SourceLine per input line, blank lines included
    """
    lines = source.split("\n") if isinstance(source, str) else source
    for line_number, text in enumerate(lines, start=1):
        yield tokenize_line(text, line_number, filename)
