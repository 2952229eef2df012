# =============================================================================
# test_errors.py - Error and Diagnostic Tests
# =============================================================================
# Tests for exception formatting and diagnostic collection.
# =============================================================================

from sicasm.errors import (
    AssemblerError,
    DiagnosticCollector,
    DiagnosticKind,
    MalformedDirectiveOperandError,
    SicAsmError,
    SourceLocation,
    UndefinedStartAddressError,
)


class TestErrorFormatting:
    """Test AssemblerError message formatting."""

    def test_plain_message(self):
        """Without a location the message has an 'error:' prefix."""
        assert str(AssemblerError("boom")) == "error: boom"

    def test_location_source_and_hint(self):
        """Location, source line, caret and hint."""
        error = AssemblerError(
            "bad thing",
            location=SourceLocation("a.asm", 3, 5),
            hint="fix it",
            source_line="X   RESW Q",
        )
        assert str(error) == (
            "a.asm:3:5: error: bad thing\n"
            "    X   RESW Q\n"
            "        ^\n"
            "hint: fix it"
        )

    def test_location_without_column(self):
        """Column 0 is omitted from the location."""
        assert str(SourceLocation("a.asm", 7)) == "a.asm:7"

    def test_hierarchy(self):
        """All assembler errors derive from SicAsmError."""
        assert issubclass(MalformedDirectiveOperandError, AssemblerError)
        assert issubclass(AssemblerError, SicAsmError)

    def test_undefined_start_message(self):
        """The undefined start message matches the report text."""
        error = UndefinedStartAddressError()
        assert error.message == "Start address not defined."
        assert "START" in error.hint


class TestDiagnosticCollector:
    """Test collecting and reporting diagnostics."""

    def test_empty(self):
        collector = DiagnosticCollector()
        assert not collector.has_diagnostics()
        assert collector.report() == "0 warnings"

    def test_count_by_kind(self):
        """Diagnostics can be counted per kind."""
        collector = DiagnosticCollector()
        collector.add(DiagnosticKind.UNKNOWN_OPCODE, "unknown opcode 'A'")
        collector.add(DiagnosticKind.UNKNOWN_OPCODE, "unknown opcode 'B'")
        collector.add(DiagnosticKind.INVALID_LABEL, "invalid label '1'")
        assert collector.count() == 3
        assert collector.count(DiagnosticKind.UNKNOWN_OPCODE) == 2
        assert collector.count(DiagnosticKind.REDEFINED_LABEL) == 0

    def test_report(self):
        """One line per diagnostic plus a summary."""
        collector = DiagnosticCollector()
        collector.add(
            DiagnosticKind.MALFORMED_START_ADDRESS,
            "START operand 'Q' is not a hexadecimal address",
            SourceLocation("p.asm", 1, 12),
        )
        assert collector.report() == (
            "p.asm:1:12: warning: START operand 'Q' is not a hexadecimal address\n"
            "1 warning"
        )

    def test_clear(self):
        collector = DiagnosticCollector()
        collector.add(DiagnosticKind.UNKNOWN_OPCODE, "x")
        collector.clear()
        assert collector.count() == 0
