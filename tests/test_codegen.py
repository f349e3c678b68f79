# =============================================================================
# test_codegen.py - Code Generator Unit Tests
# =============================================================================
# Tests for the two-pass code generator.
#
# Test coverage includes:
#   - Encoding of every addressing mode
#   - Symbol collection, ORG handling and forward references
#   - Branch offset calculation and range limits
#   - Line-local error handling and location counter behavior
#   - Listing, symbol and object text output
# =============================================================================

import pytest

import m6800_sdk
from m6800_sdk.assembler.codegen import CodeGenerator
from m6800_sdk.errors import (
    AssemblerError,
    AddressingModeError,
    BranchRangeError,
    DirectiveError,
    ExpressionError,
    UndefinedSymbolError,
)


def generate(*lines: str, origin: int = 0) -> list[str]:
    """Helper to assemble lines with a fresh code generator."""
    return CodeGenerator(origin=origin).generate(lines)


# =============================================================================
# Basic Encoding Tests
# =============================================================================

class TestEncoding:
    """Test encoding of each addressing mode."""

    @pytest.mark.parametrize("source,expected", [
        ("LDAA #5", "86 05"),
        ("LDAA #$1F", "86 1F"),
        ("LDAA #-1", "86 FF"),
        ("LDAB #255", "C6 FF"),
        ("LDX #$1234", "CE 12 34"),
        ("LDX #5", "CE 00 05"),
        ("STAA $40", "97 40"),
        ("LDAA 64", "96 40"),
        ("LDAA 5,X", "A6 05"),
        ("STAA ,X", "A7 00"),
        ("STX $10,X", "EF 10"),
        ("LDAA $1234", "B6 12 34"),
        ("JMP $C010", "7E C0 10"),
        ("JSR 0xC100", "BD C1 00"),
        ("INCA", "4C"),
        ("ASLB", "58"),
    ])
    def test_single_instruction(self, source, expected):
        assert generate(source) == [expected]

    def test_one_output_line_per_source_line(self):
        output = generate("ORG $C000", "", "; comment", "LDAA #5", "ADDA #3", "END")
        assert output == ["", "", "", "86 05", "8B 03", ""]

    def test_label_only_line_emits_nothing(self):
        assert generate("LOOP:", "NOP") == ["", "01"]


# =============================================================================
# Symbol and ORG Tests
# =============================================================================

class TestSymbols:
    """Test symbol collection and the location counter."""

    def test_label_after_instruction(self):
        codegen = CodeGenerator()
        codegen.generate(["ORG $C000", "LDAA #5", "DONE"])
        assert codegen.get_symbols() == {"DONE": 0xC002}
        assert codegen.get_origin() == 0xC000

    def test_default_origin_is_zero(self):
        codegen = CodeGenerator()
        codegen.generate(["START NOP"])
        assert codegen.get_symbols()["START"] == 0

    def test_initial_origin(self):
        codegen = CodeGenerator(origin=0x4000)
        codegen.generate(["START NOP", "NEXT NOP"])
        assert codegen.get_symbols() == {"START": 0x4000, "NEXT": 0x4001}

    def test_org_resets_location_counter(self):
        """Addresses are not monotonic across ORG."""
        codegen = CodeGenerator()
        codegen.generate(["ORG $C100", "HIGH NOP", "ORG $C000", "LOW NOP"])
        assert codegen.get_symbols() == {"HIGH": 0xC100, "LOW": 0xC000}
        assert codegen.get_origin() == 0xC000

    def test_label_on_org_line_bound_before_origin_moves(self):
        codegen = CodeGenerator()
        codegen.generate(["NOP", "HERE ORG $C000", "THERE NOP"])
        assert codegen.get_symbols() == {"HERE": 1, "THERE": 0xC000}

    def test_symbols_are_case_insensitive(self):
        assert generate("ORG $C000", "loop decb", "bne LOOP") == ["", "5A", "26 FD"]

    def test_forward_reference(self):
        output = generate("ORG $C000", "JMP TARGET", "NOP", "TARGET RTS")
        assert output == ["", "7E C0 04", "01", "39"]

    def test_label_operand_uses_extended_mode(self):
        output = generate("ORG $C000", "DATA NOP", "STAA $40", "LDAA VALUE", "VALUE NOP")
        assert output[3] == "B6 C0 06"

    def test_label_operand_in_direct_mode(self):
        """STX has no extended form, so a label operand is truncated to its low byte."""
        output = generate("ORG $C000", "STX VALUE", "VALUE NOP")
        assert output == ["", "DF 02", "01"]

    def test_duplicate_label_later_wins(self):
        codegen = CodeGenerator()
        codegen.generate(["X1 NOP", "X1 NOP"])
        assert codegen.get_symbols() == {"X1": 1}
        assert len(codegen.get_warnings()) == 1
        assert "duplicate label 'X1'" in codegen.get_warnings()[0]
        assert not codegen.has_errors()

    def test_forward_and_backward_orderings_agree(self):
        """The same reference encodes identically before or after its label."""
        forward = generate("ORG $C000", "JMP TARGET", "ORG $C100", "TARGET NOP")
        backward = generate("ORG $C100", "TARGET NOP", "ORG $C000", "JMP TARGET")
        assert forward[1] == backward[3] == "7E C1 00"

    def test_regenerate_is_idempotent(self):
        source = ["ORG $C000", "LOOP DECB", "BNE LOOP", "JMP NOWHERE"]
        codegen = CodeGenerator()
        first = codegen.generate(source)
        second = codegen.generate(source)
        assert first == second
        assert len(codegen.get_errors()) == 1


# =============================================================================
# Branch Tests
# =============================================================================

class TestBranches:
    """Test relative branch offsets."""

    def test_backward_branch(self):
        assert generate("ORG $C000", "LOOP DECB", "BNE LOOP") == ["", "5A", "26 FD"]

    def test_forward_branch(self):
        output = generate("ORG $C000", "BEQ DONE", "INCA", "DONE NOP")
        assert output == ["", "27 01", "4C", "01"]

    def test_branch_to_itself(self):
        assert generate("HERE BRA HERE") == ["20 FE"]

    def test_numeric_branch_target(self):
        assert generate("BRA 5") == ["20 03"]

    def test_max_forward_offset(self):
        output = generate("BRA TARGET", *["NOP"] * 127, "TARGET NOP")
        assert output[0] == "20 7F"

    def test_forward_out_of_range(self):
        codegen = CodeGenerator()
        output = codegen.generate(["BRA TARGET", *["NOP"] * 128, "TARGET NOP"])
        assert output[0] == "ERROR: branch out of range -> TARGET"
        error = codegen.get_errors()[0]
        assert isinstance(error, BranchRangeError)
        assert error.offset == 128

    def test_max_backward_offset(self):
        output = generate("TARGET NOP", *["NOP"] * 125, "BRA TARGET")
        assert output[-1] == "20 80"

    def test_backward_out_of_range(self):
        output = generate("TARGET NOP", *["NOP"] * 126, "BRA TARGET")
        assert output[-1] == "ERROR: branch out of range -> TARGET"


# =============================================================================
# Error Handling Tests
# =============================================================================

class TestErrors:
    """Test that errors are line-local and assembly continues."""

    def test_invalid_addressing_mode(self):
        codegen = CodeGenerator()
        output = codegen.generate(["STAA #5", "NOP"])
        assert output == ["ERROR: invalid instruction -> STAA", "01"]
        assert isinstance(codegen.get_errors()[0], AddressingModeError)

    def test_unknown_mnemonic(self):
        assert generate("FOO BAR") == ["ERROR: invalid instruction -> BAR"]

    @pytest.mark.parametrize("lines,error_type", [
        (["JMP NOWHERE"], UndefinedSymbolError),
        (["STAA #5"], AddressingModeError),
        (["BRA TARGET", *["NOP"] * 128, "TARGET NOP"], BranchRangeError),
        (["LDAA 256,X"], ExpressionError),
        (["ORG $ZZ"], DirectiveError),
    ])
    def test_each_error_type_is_reachable(self, lines, error_type):
        codegen = CodeGenerator()
        codegen.generate(lines)
        assert type(codegen.get_errors()[0]) is error_type

    def test_every_error_type_is_raised_and_exported(self):
        """No assembler error class exists without a line that produces it."""
        raised = {
            UndefinedSymbolError,
            AddressingModeError,
            BranchRangeError,
            ExpressionError,
            DirectiveError,
        }
        assert set(AssemblerError.__subclasses__()) == raised
        for error_type in raised:
            assert error_type.__name__ in m6800_sdk.__all__

    def test_error_names_unsupported_mode(self):
        """Known mnemonics report the rejected mode, unknown ones do not."""
        codegen = CodeGenerator()
        codegen.generate(["STAA #5", "FOO BAR"])
        bad_mode, unknown = codegen.get_errors()
        assert bad_mode.mode == "immediate"
        assert "direct" in bad_mode.valid_modes
        assert "does not support immediate" in bad_mode.message
        assert unknown.mode is None
        assert unknown.valid_modes == []
        assert "unknown instruction 'BAR'" in unknown.message

    def test_undefined_symbol(self):
        codegen = CodeGenerator(filename="prog.asm")
        output = codegen.generate(["NOP", "JMP NOWHERE"])
        assert output[1] == "ERROR: cannot resolve operand -> NOWHERE"
        error = codegen.get_errors()[0]
        assert isinstance(error, UndefinedSymbolError)
        assert error.location.line == 2
        assert error.location.column == 5
        assert str(error).startswith("prog.asm:2:5: error: undefined symbol 'NOWHERE'")

    def test_immediate16_out_of_range(self):
        assert generate("LDX #70000") == ["ERROR: cannot resolve operand -> #70000"]

    def test_index_offset_out_of_range(self):
        assert generate("LDAA 300,X") == ["ERROR: cannot resolve operand -> 300,X"]

    def test_unparsable_org(self):
        codegen = CodeGenerator()
        output = codegen.generate(["ORG $ZZ", "START NOP"])
        assert output == ["ERROR: cannot resolve ORG -> $ZZ", "01"]
        assert isinstance(codegen.get_errors()[0], DirectiveError)
        # Origin and location counter are unchanged
        assert codegen.get_symbols()["START"] == 0
        assert codegen.get_origin() == 0

    def test_operand_error_does_not_advance(self):
        """Pass 2 addresses after an operand error are best-effort."""
        codegen = CodeGenerator()
        codegen.generate(["JMP NOWHERE", "HERE NOP"])
        assert codegen.get_symbols()["HERE"] == 3
        assert codegen.get_assembled_lines()[1].address == 0

    def test_unknown_instruction_advances_one_byte(self):
        codegen = CodeGenerator()
        codegen.generate(["FOO BAR", "HERE NOP"])
        assert codegen.get_symbols()["HERE"] == 1
        assert codegen.get_assembled_lines()[1].address == 1

    def test_error_lines_excluded_from_code(self):
        codegen = CodeGenerator()
        codegen.generate(["LDAA #1", "JMP NOWHERE", "INCA"])
        assert codegen.get_code() == bytes([0x86, 0x01, 0x4C])

    def test_error_report(self):
        codegen = CodeGenerator()
        codegen.generate(["JMP NOWHERE", "STAA #5"])
        report = codegen.get_error_report()
        assert "undefined symbol 'NOWHERE'" in report
        assert "2 errors, 0 warnings" in report


# =============================================================================
# Output File Tests
# =============================================================================

class TestOutputs:
    """Test listing, symbol file and object text."""

    SOURCE = ["ORG $C000", "START LDAA #5", "DONE NOP"]

    def test_object_text(self):
        codegen = CodeGenerator()
        codegen.generate(self.SOURCE)
        assert codegen.get_object_text() == "\n86 05\n01"

    def test_listing(self):
        codegen = CodeGenerator()
        codegen.generate(self.SOURCE + ["JMP NOWHERE"])
        listing = codegen.get_listing()
        assert listing.startswith("M6800 Assembler Listing")
        assert "C000  86 05" in listing
        assert "C002  01" in listing
        assert "*** ERROR: cannot resolve operand -> NOWHERE" in listing
        assert "= $C002" in listing

    def test_write_symbols(self, tmp_path):
        codegen = CodeGenerator()
        codegen.generate(self.SOURCE)
        path = tmp_path / "prog.sym"
        codegen.write_symbols(path)
        lines = path.read_text().splitlines()
        assert lines[0] == "# Symbol table"
        assert "DONE $C002" in lines
        assert "START $C000" in lines

    def test_write_object(self, tmp_path):
        codegen = CodeGenerator()
        codegen.generate(self.SOURCE)
        path = tmp_path / "prog.obj"
        codegen.write_object(path)
        assert path.read_text() == "\n86 05\n01\n"

    def test_write_listing(self, tmp_path):
        codegen = CodeGenerator()
        codegen.generate(self.SOURCE)
        path = tmp_path / "prog.lst"
        codegen.write_listing(path)
        assert "START" in path.read_text()
