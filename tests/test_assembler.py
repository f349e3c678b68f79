# =============================================================================
# test_assembler.py - Full Assembler Integration Tests
# =============================================================================
# End-to-end tests for the Assembler interface.
# These tests verify the full pipeline from source text to per-line output.
#
# Test coverage includes:
#   - Complete program assembly from strings, line lists and files
#   - Error reporting with file names and line numbers
#   - Output accessors used by the emulator and the CLI
# =============================================================================

import pytest

from m6800_sdk import Assembler, assemble, assemble_file
from m6800_sdk.errors import ERROR_MARKER


COUNTDOWN = """\
; Count B down from 3 to 0
        ORG $C000
START   LDAB #3
LOOP:   DECB            ; one less
        BNE LOOP
        END
"""


# =============================================================================
# Full Assembly Pipeline Tests
# =============================================================================

class TestFullPipeline:
    """Test the complete assembly pipeline."""

    def test_minimal_program(self):
        asm = Assembler()
        assert asm.assemble_string("NOP") == ["01"]

    def test_two_instructions(self):
        asm = Assembler()
        assert asm.assemble_string("LDAA #5\nADDA #3") == ["86 05", "8B 03"]

    def test_countdown_program(self):
        asm = Assembler()
        output = asm.assemble_string(COUNTDOWN)
        assert output == ["", "", "C6 03", "5A", "26 FD", ""]
        assert asm.get_symbols() == {"START": 0xC000, "LOOP": 0xC002}
        assert asm.get_origin() == 0xC000
        assert not asm.has_errors()

    def test_assemble_lines(self):
        asm = Assembler()
        assert asm.assemble_lines(["ORG $C000", "LDAA #5", "DONE"]) == ["", "86 05", ""]
        assert asm.get_symbols()["DONE"] == 0xC002

    def test_leading_blank_line(self):
        asm = Assembler()
        output = asm.assemble_string("\n    ORG $C000\nSTART LDAA #5\n    ADDA #3\n")
        assert output == ["", "", "86 05", "8B 03"]

    def test_initial_origin(self):
        asm = Assembler(origin=0x4000)
        asm.assemble_string("START NOP")
        assert asm.get_symbols()["START"] == 0x4000

    def test_reassembly_is_identical(self):
        """Assembling the same source twice yields identical output."""
        asm = Assembler()
        first = asm.assemble_string(COUNTDOWN)
        second = asm.assemble_string(COUNTDOWN)
        assert first == second
        assert Assembler().assemble_string(COUNTDOWN) == first

    def test_results_describe_last_run(self):
        asm = Assembler()
        asm.assemble_string("JMP NOWHERE")
        assert asm.has_errors()
        asm.assemble_string("NOP")
        assert not asm.has_errors()
        assert asm.get_output_lines() == ["01"]


# =============================================================================
# Output Accessor Tests
# =============================================================================

class TestOutputs:
    """Test the accessors for code, object text and listings."""

    def test_object_text_and_code(self):
        asm = Assembler()
        asm.assemble_string(COUNTDOWN)
        assert asm.get_object_text() == "\n\nC6 03\n5A\n26 FD\n"
        assert asm.get_code() == bytes([0xC6, 0x03, 0x5A, 0x26, 0xFD])

    def test_assembled_lines(self):
        asm = Assembler()
        asm.assemble_string(COUNTDOWN)
        lines = asm.get_assembled_lines()
        assert len(lines) == 6
        assert lines[3].address == 0xC002
        assert lines[3].data == bytes([0x5A])

    def test_listing(self):
        asm = Assembler()
        asm.assemble_string(COUNTDOWN)
        assert "C002  5A" in asm.get_listing()

    def test_write_files(self, tmp_path):
        asm = Assembler()
        asm.assemble_string(COUNTDOWN)
        asm.write_object(tmp_path / "prog.obj")
        asm.write_listing(tmp_path / "prog.lst")
        asm.write_symbols(tmp_path / "prog.sym")
        assert (tmp_path / "prog.obj").read_text() == "\n\nC6 03\n5A\n26 FD\n\n"
        assert "LOOP $C002" in (tmp_path / "prog.sym").read_text()
        assert "M6800 Assembler Listing" in (tmp_path / "prog.lst").read_text()

    def test_verbose_output(self, capsys):
        asm = Assembler(verbose=True)
        asm.assemble_string("NOP\nJMP NOWHERE")
        captured = capsys.readouterr()
        assert "Assembling 2 lines" in captured.out
        assert "1 lines failed to assemble" in captured.out


# =============================================================================
# Error Reporting Tests
# =============================================================================

class TestErrorReporting:
    """Test that failing lines are reported and assembly continues."""

    def test_errors_do_not_stop_assembly(self):
        asm = Assembler()
        output = asm.assemble_string("LDAA #1\nFOO BAR\nJMP NOWHERE\nINCA")
        assert output[0] == "86 01"
        assert output[1].startswith(ERROR_MARKER)
        assert output[2] == "ERROR: cannot resolve operand -> NOWHERE"
        assert output[3] == "4C"
        assert asm.has_errors()

    def test_error_report_names_file_and_line(self, tmp_path):
        source = tmp_path / "bad.asm"
        source.write_text("NOP\n  BNE LOPP\nLOOP NOP\n")
        asm = Assembler()
        asm.assemble_file(source)
        report = asm.get_error_report()
        assert f"{source}:2:7: error: undefined symbol 'LOPP'" in report
        assert "hint: did you mean 'LOOP'?" in report
        assert "1 error, 0 warnings" in report

    def test_duplicate_label_warning(self):
        asm = Assembler()
        asm.assemble_string("HERE NOP\nHERE NOP")
        assert not asm.has_errors()
        assert len(asm.get_warnings()) == 1


# =============================================================================
# Convenience Function Tests
# =============================================================================

class TestConvenienceFunctions:
    """Test module-level assemble() and assemble_file()."""

    def test_assemble(self):
        assert assemble("LDX #$1234") == ["CE 12 34"]

    def test_assemble_file(self, tmp_path):
        source = tmp_path / "prog.asm"
        source.write_text(COUNTDOWN)
        assert assemble_file(source) == ["", "", "C6 03", "5A", "26 FD", ""]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            assemble_file(tmp_path / "missing.asm")
