"""
sicasm Error Hierarchy
======================

This module defines the exception hierarchy for the assembler, together
with the value types used to report recoverable problems.

Exception Hierarchy
-------------------
SicAsmError (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - malformed source text
    ├── DirectiveError - error in assembler directive
    │   └── MalformedDirectiveOperandError - non-numeric RESW/RESB count
    ├── OpcodeTableError - opcode table cannot be loaded
    └── UndefinedStartAddressError - Pass 2 without a START directive

Recoverable Outcomes
--------------------
Not every problem stops assembly. An invalid START operand, an unknown
mnemonic or a badly shaped BYTE literal are skipped by Pass 1 and reported
as Diagnostic values on the pass result instead of being raised.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class SicAsmError(Exception):
    """
    Base exception for all sicasm errors.

    Catch this to handle any failure raised by the package:

        try:
            asm.assemble_file("copy.asm")
        except SicAsmError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in source text.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        if self.column > 0:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(SicAsmError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            copy.asm:4:12: error: RESW operand 'TEN' is not a decimal number
                BUFFER RESW TEN
                            ^
            hint: reservation counts are plain decimal numbers
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Malformed assembly source.

    Raised when source text cannot be read as label/opcode/operand lines,
    for instance when a non-string line is handed to the tokenizer.
    """
    pass


class DirectiveError(AssemblerError):
    """
    Error in an assembler directive.

    Raised when a directive (START, RESW, RESB, BYTE, WORD) is used in a
    way that prevents the location counter from being computed.
    """
    pass


class MalformedDirectiveOperandError(DirectiveError):
    """
    RESW or RESB operand is not a decimal number.

    A bad reservation count would shift every address that follows it,
    so Pass 1 stops instead of producing a corrupt symbol table.
    """

    def __init__(
        self,
        directive: str,
        operand: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.directive = directive
        self.operand = operand

        if operand:
            message = f"{directive} operand '{operand}' is not a decimal number"
        else:
            message = f"{directive} requires a decimal operand"

        super().__init__(
            message,
            location=location,
            hint="reservation counts are plain decimal numbers, e.g. RESW 10",
            source_line=source_line,
        )


class OpcodeTableError(AssemblerError):
    """
    The opcode table could not be loaded.

    Raised when an opcode definition file cannot be read. Malformed lines
    inside a readable table are skipped, not reported.
    """
    pass


class UndefinedStartAddressError(AssemblerError):
    """
    Pass 2 was requested but no START directive was processed.

    Without a start address there is no base for the Header, Text and
    End records, so no object program is produced.
    """

    MESSAGE = "Start address not defined."

    def __init__(self):
        super().__init__(
            self.MESSAGE,
            hint="begin the program with a line such as 'PROG START 1000'",
        )


# =============================================================================
# Recoverable Diagnostics
# =============================================================================

class DiagnosticKind(Enum):
    """Named outcomes that Pass 1 recovers from by skipping work."""
    MALFORMED_START_ADDRESS = "malformed start address"
    UNKNOWN_OPCODE = "unknown opcode"
    INVALID_LABEL = "invalid label"
    REDEFINED_LABEL = "redefined label"
    MALFORMED_BYTE_LITERAL = "malformed BYTE literal"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Diagnostic:
    """
    A recoverable problem found while assembling.

    Attributes:
        kind: Which outcome occurred
        message: Human-readable description
        location: Source position of the offending line (optional)
    """
    kind: DiagnosticKind
    message: str
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: warning: {self.message}"
        return f"warning: {self.message}"


class DiagnosticCollector:
    """
    Collects diagnostics during a pass for batch reporting.

    Example:
        collector = DiagnosticCollector()
        collector.add(DiagnosticKind.UNKNOWN_OPCODE, "unknown opcode 'FOO'", loc)
        if collector.has_diagnostics():
            print(collector.report())
    """

    def __init__(self):
        self.diagnostics: list[Diagnostic] = []

    def add(
        self,
        kind: DiagnosticKind,
        message: str,
        location: Optional[SourceLocation] = None,
    ) -> Diagnostic:
        """Record a diagnostic and return it."""
        diagnostic = Diagnostic(kind, message, location)
        self.diagnostics.append(diagnostic)
        return diagnostic

    def has_diagnostics(self) -> bool:
        """Return True if anything was collected."""
        return len(self.diagnostics) > 0

    def count(self, kind: Optional[DiagnosticKind] = None) -> int:
        """Return the number of diagnostics, optionally of a single kind."""
        if kind is None:
            return len(self.diagnostics)
        return sum(1 for d in self.diagnostics if d.kind is kind)

    def report(self) -> str:
        """
        Format all diagnostics for display.

        Returns:
            One line per diagnostic followed by a summary line
        """
        return format_diagnostics(self.diagnostics)

    def clear(self) -> None:
        """Forget all collected diagnostics."""
        self.diagnostics.clear()


def format_diagnostics(diagnostics) -> str:
    """Format a sequence of diagnostics with a trailing summary line."""
    lines = [str(d) for d in diagnostics]
    word = "warning" if len(lines) == 1 else "warnings"
    lines.append(f"{len(lines)} {word}")
    return "\n".join(lines)
