# =============================================================================
# test_pass1.py - Pass 1 Tests
# =============================================================================
# Tests for symbol table construction and intermediate code generation.
#
# Test coverage includes:
#   - START handling (valid, invalid, missing)
#   - Label binding and validation
#   - Location counter arithmetic for every directive
#   - Diagnostics for recoverable problems
#   - Fatal RESW/RESB operand errors
#   - Report formatting
# =============================================================================

import pytest

from sicasm.assembler.opcodes import load_opcodes
from sicasm.assembler.pass1 import (
    IntermediateRecord,
    format_pass1_report,
    is_valid_label,
    run_pass1,
)
from sicasm.errors import (
    DiagnosticKind,
    DirectiveError,
    MalformedDirectiveOperandError,
)


OPCODES = load_opcodes("ADD 18\nLDA 00\nSTA 0C\nRSUB 4C")

EXAMPLE = """\
PROG START 1000
LOOP ADD FIVE
FIVE WORD
"""


def addresses(result) -> dict[str, int]:
    """Map each labelled record to its address."""
    return {r.label: r.address for r in result.intermediate if r.label}


def diagnostic_kinds(result) -> list[DiagnosticKind]:
    return [d.kind for d in result.diagnostics]


# =============================================================================
# START Directive Tests
# =============================================================================

class TestStart:
    """Test the START directive."""

    def test_start_sets_counter(self):
        """START 1000 puts the next line at 0x1000."""
        result = run_pass1("PROG START 1000\n  ADD 5\n  ADD 6", OPCODES)
        assert [r.address for r in result.intermediate] == [0x1000, 0x1003, 0x1006]

    def test_start_address_and_name(self):
        """START records the start address and program name."""
        result = run_pass1(EXAMPLE, OPCODES)
        assert result.start_address == 0x1000
        assert result.program_name == "PROG"
        assert result.has_start_address

    def test_start_is_hexadecimal(self):
        """The START operand is read as hex, either case."""
        assert run_pass1("P START 1a0", OPCODES).start_address == 0x1A0
        assert run_pass1("P START FF", OPCODES).start_address == 0xFF

    def test_start_label_not_in_symbol_table(self):
        """The START label is the program name, not a symbol."""
        result = run_pass1(EXAMPLE, OPCODES)
        assert "PROG" not in result.symbols

    def test_start_emits_no_record(self):
        """START contributes no intermediate record."""
        result = run_pass1("PROG START 1000", OPCODES)
        assert result.intermediate == (IntermediateRecord.end(0x1000),)

    def test_invalid_start_ignored(self):
        """A non-hex START operand is ignored with a diagnostic."""
        result = run_pass1("PROG START ZZZ\nLOOP ADD 5", OPCODES)
        assert result.start_address is None
        assert result.program_name == ""
        assert result.symbols["LOOP"] == 0
        assert "PROG" not in result.symbols
        assert diagnostic_kinds(result) == [DiagnosticKind.MALFORMED_START_ADDRESS]

    def test_start_without_operand_ignored(self):
        """START with no operand is ignored."""
        result = run_pass1("PROG START\n  ADD 5", OPCODES)
        assert result.start_address is None
        assert result.intermediate[0].address == 0
        assert "PROG" not in result.symbols

    def test_no_start(self):
        """Without START the counter begins at zero and start is unset."""
        result = run_pass1("A ADD 5\nB ADD 6", OPCODES)
        assert result.start_address is None
        assert dict(result.symbols) == {"A": 0, "B": 3}

    def test_invalid_start_keeps_counter(self):
        """A rejected START leaves the counter where it was."""
        result = run_pass1("P START 100\n  ADD 1\nQ START XYZ\nR ADD 2", OPCODES)
        assert result.start_address == 0x100
        assert result.symbols["R"] == 0x103


# =============================================================================
# Label Tests
# =============================================================================

class TestLabels:
    """Test symbol table construction."""

    @pytest.mark.parametrize("label", ["A", "loop", "X1", "BUF_2", "a_b_c", "Z9_"])
    def test_valid_labels(self, label):
        """Letters, digits and underscores after a leading letter."""
        assert is_valid_label(label)

    @pytest.mark.parametrize("label", ["", "1ABC", "_X", "A-B", "A.B", "A'", "LÖOP"])
    def test_invalid_labels(self, label):
        """Anything else is rejected."""
        assert not is_valid_label(label)

    def test_label_bound_before_bytes_counted(self):
        """A label names the first byte of its line."""
        result = run_pass1("P START 2000\nBUF RESB 10\nNEXT WORD", OPCODES)
        assert result.symbols["BUF"] == 0x2000
        assert result.symbols["NEXT"] == 0x200A

    def test_invalid_label_not_inserted(self):
        """Invalid labels are reported and skipped; the line still assembles."""
        result = run_pass1("P START 0\n1BAD ADD 5\nGOOD ADD 6", OPCODES)
        assert "1BAD" not in result.symbols
        assert result.symbols["GOOD"] == 3
        assert result.intermediate[0].label == "1BAD"
        assert DiagnosticKind.INVALID_LABEL in diagnostic_kinds(result)

    def test_redefined_label_overwrites(self):
        """A second definition silently replaces the first."""
        result = run_pass1("P START 0\nX ADD 1\nX ADD 2", OPCODES)
        assert result.symbols["X"] == 3
        assert diagnostic_kinds(result) == [DiagnosticKind.REDEFINED_LABEL]

    def test_label_on_unknown_opcode_still_bound(self):
        """Labels are bound even when the opcode is not recognized."""
        result = run_pass1("P START 0\nHERE FOO BAR\nTHERE ADD 1", OPCODES)
        assert result.symbols["HERE"] == 0
        assert result.symbols["THERE"] == 0

    def test_label_only_line(self):
        """A line holding just a label binds it at the current address."""
        result = run_pass1("P START 10\nMARK\n  ADD 1", OPCODES)
        assert result.symbols["MARK"] == 0x10
        assert len(result.intermediate) == 2

    def test_symbols_in_definition_order(self):
        """The symbol table keeps definition order."""
        result = run_pass1("P START 0\nZ WORD\nA WORD\nM WORD", OPCODES)
        assert list(result.symbols) == ["Z", "A", "M"]

    def test_symbols_read_only(self):
        """The returned symbol table cannot be modified."""
        result = run_pass1(EXAMPLE, OPCODES)
        with pytest.raises(TypeError):
            result.symbols["NEW"] = 1


# =============================================================================
# Location Counter Tests
# =============================================================================

class TestLocationCounter:
    """Test bytes reserved by each kind of line."""

    def test_reservation_sizes(self):
        """RESW 2=6, RESB 5=5, C'EOF'=3, X'1A'=1, WORD=3, instruction=3."""
        source = """\
P START 0
A RESW 2
B RESB 5
C BYTE C'EOF'
D BYTE X'1A'
E WORD
F ADD 0
"""
        result = run_pass1(source, OPCODES)
        assert addresses(result) == {"A": 0, "B": 6, "C": 11, "D": 14, "E": 15, "F": 18}
        assert result.location_counter == 21
        assert result.intermediate[-1] == IntermediateRecord.end(21)

    def test_word_ignores_operand_value(self):
        """WORD is always 3 bytes."""
        result = run_pass1("P START 0\nA WORD 999999\nB WORD", OPCODES)
        assert result.symbols["B"] == 3

    def test_long_hex_literal(self):
        """X'...' reserves one byte per two hex digits."""
        result = run_pass1("P START 0\nA BYTE X'F1E2D3'\nB WORD", OPCODES)
        assert result.symbols["B"] == 3

    def test_odd_hex_literal_rounds_up(self):
        """An odd number of hex digits rounds up to a whole byte."""
        result = run_pass1("P START 0\nA BYTE X'F1E'\nB WORD", OPCODES)
        assert result.symbols["B"] == 2

    def test_long_char_literal(self):
        """C'...' reserves one byte per character."""
        result = run_pass1("P START 0\nA BYTE C'HELLO'\nB WORD", OPCODES)
        assert result.symbols["B"] == 5

    def test_malformed_byte_literal(self):
        """Other BYTE operands emit a record but reserve nothing."""
        result = run_pass1("P START 0\nA BYTE 65\nB WORD\nC BYTE C'", OPCODES)
        assert result.symbols["B"] == 0
        assert len(result.intermediate) == 4
        assert diagnostic_kinds(result) == [
            DiagnosticKind.MALFORMED_BYTE_LITERAL,
            DiagnosticKind.MALFORMED_BYTE_LITERAL,
        ]

    def test_unknown_opcode_ignored(self):
        """Unknown opcodes emit nothing and do not advance the counter."""
        result = run_pass1("P START 0\n  FOO 1\nA ADD 1", OPCODES)
        assert result.symbols["A"] == 0
        assert len(result.intermediate) == 2
        assert diagnostic_kinds(result) == [DiagnosticKind.UNKNOWN_OPCODE]

    def test_only_newline_ends_a_line(self):
        """Form feeds and other separators stay inside their line."""
        result = run_pass1("P START 0\nA WORD\x0cB WORD\nC WORD", OPCODES)
        assert dict(result.symbols) == {"A": 0, "C": 3}

    def test_pass1_records_opcode_table(self):
        """The result keeps a copy of the table used for sizing."""
        table = {"ADD": "18"}
        result = run_pass1("P START 0\n  ADD 1", table)
        table["ADD"] = "99"
        assert result.opcodes["ADD"] == "18"

    def test_source_end_directive_ignored(self):
        """An END line in the source is not a record of its own."""
        result = run_pass1("P START 0\nA ADD 1\n  END A", OPCODES)
        assert [r.opcode for r in result.intermediate] == ["ADD", ""]
        assert result.intermediate[-1].is_end
        assert result.diagnostics == ()

    def test_blank_lines_ignored(self):
        """Blank lines produce no records or diagnostics."""
        result = run_pass1("P START 0\n\n   \nA ADD 1\n", OPCODES)
        assert len(result.intermediate) == 2
        assert result.diagnostics == ()

    def test_program_length(self):
        """Program length runs from START to the END record."""
        result = run_pass1(EXAMPLE, OPCODES)
        assert result.program_length == 6


# =============================================================================
# Fatal Error Tests
# =============================================================================

class TestMalformedReservations:
    """Test the fatal RESW/RESB operand errors."""

    def test_resw_non_numeric(self):
        """A non-numeric RESW count aborts the pass."""
        with pytest.raises(MalformedDirectiveOperandError) as exc_info:
            run_pass1("P START 0\nBUF RESW TEN", OPCODES, filename="copy.asm")
        error = exc_info.value
        assert error.directive == "RESW"
        assert error.operand == "TEN"
        assert error.location.line == 2
        assert "copy.asm:2" in str(error)

    def test_resb_non_numeric(self):
        """A non-numeric RESB count aborts the pass."""
        with pytest.raises(MalformedDirectiveOperandError):
            run_pass1("P START 0\nBUF RESB 1F", OPCODES)

    def test_missing_count(self):
        """A missing count is also fatal."""
        with pytest.raises(DirectiveError) as exc_info:
            run_pass1("P START 0\nBUF RESW", OPCODES)
        assert "requires a decimal operand" in str(exc_info.value)

    def test_negative_count(self):
        """Negative counts are rejected."""
        with pytest.raises(MalformedDirectiveOperandError):
            run_pass1("P START 0\nBUF RESB -4", OPCODES)


# =============================================================================
# Report and Determinism Tests
# =============================================================================

class TestPass1Report:
    """Test the textual Pass 1 report."""

    def test_example_report(self):
        """The report lists symbols then intermediate code."""
        result = run_pass1(EXAMPLE, load_opcodes("ADD 18"))
        assert format_pass1_report(result) == (
            "Symbol Table:\n"
            "LOOP: 1000\n"
            "FIVE: 1003\n"
            "\n\n"
            "Intermediate Code:\n"
            "1000 LOOP ADD FIVE\n"
            "1003 FIVE WORD \n"
            "1006 END\n"
        )

    def test_unlabelled_line_format(self):
        """Empty fields still get their separating space."""
        result = run_pass1("P START 1000\n  ADD FIVE", OPCODES)
        assert str(result.intermediate[0]) == "1000  ADD FIVE"

    def test_empty_program(self):
        """An empty program reports only the END record."""
        result = run_pass1("", OPCODES)
        assert format_pass1_report(result) == (
            "Symbol Table:\n\n\nIntermediate Code:\n0000 END\n"
        )

    def test_addresses_zero_padded_upper_case(self):
        """Addresses are 4 upper-case hex digits."""
        result = run_pass1("P START ab\nX ADD 1", OPCODES)
        assert "X: 00AB" in format_pass1_report(result)

    def test_idempotent(self):
        """Two runs over the same input agree."""
        first = run_pass1(EXAMPLE, OPCODES)
        second = run_pass1(EXAMPLE, OPCODES)
        assert dict(first.symbols) == dict(second.symbols)
        assert first.intermediate == second.intermediate
        assert format_pass1_report(first) == format_pass1_report(second)

    def test_iterable_of_lines(self):
        """Source may be given as a list of lines."""
        result = run_pass1(EXAMPLE.splitlines(), OPCODES)
        assert dict(result.symbols) == {"LOOP": 0x1000, "FIVE": 0x1003}
