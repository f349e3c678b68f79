# =============================================================================
# test_parser.py - Line Parser Unit Tests
# =============================================================================
# Tests for parse_line() and resolve_instruction().
#
# Test coverage includes:
#   - Line kinds: blank, directives, label only, instructions
#   - Label detection by resolution failure (no reserved words)
#   - Mode widening for forms the lexical classifier cannot express
#   - Purity: the same text always parses the same way
# =============================================================================

from m6800_sdk.cpu import AddressingMode
from m6800_sdk.assembler.parser import LineKind, parse_line, resolve_instruction


# =============================================================================
# Line Kind Tests
# =============================================================================

class TestLineKinds:
    """Test classification of whole lines."""

    def test_blank_and_comment_lines(self):
        assert parse_line("").kind == LineKind.BLANK
        assert parse_line("   ; just a comment").kind == LineKind.BLANK
        assert parse_line("* star comment").kind == LineKind.BLANK

    def test_org_directive(self):
        line = parse_line("    ORG $C000")
        assert line.kind == LineKind.ORG
        assert line.operand == "$C000"
        assert line.size == 0

    def test_end_directives(self):
        assert parse_line("END").kind == LineKind.END
        assert parse_line("  .end").kind == LineKind.END

    def test_label_only(self):
        line = parse_line("LOOP:")
        assert line.kind == LineKind.LABEL_ONLY
        assert line.label == "LOOP"
        assert line.size == 0

    def test_bare_label_without_colon(self):
        """A single unknown token on its own line is a label."""
        line = parse_line("DONE")
        assert line.kind == LineKind.LABEL_ONLY
        assert line.label == "DONE"

    def test_label_on_org_line(self):
        line = parse_line("START ORG $C000")
        assert line.kind == LineKind.ORG
        assert line.label == "START"
        assert line.operand == "$C000"


# =============================================================================
# Instruction Line Tests
# =============================================================================

class TestInstructionLines:
    """Test parsing of instruction lines."""

    def test_simple_instruction(self):
        line = parse_line("    LDAA #5")
        assert line.kind == LineKind.INSTRUCTION
        assert line.label is None
        assert line.mnemonic == "LDAA"
        assert line.operand == "#5"
        assert line.mode == AddressingMode.IMMEDIATE
        assert line.info.opcode == 0x86
        assert line.size == 2

    def test_inherent_instruction(self):
        line = parse_line("INCA")
        assert line.is_known_instruction
        assert line.mode == AddressingMode.INHERENT
        assert line.size == 1

    def test_labelled_instruction(self):
        line = parse_line("START LDAA #5 ; comment")
        assert line.label == "START"
        assert line.mnemonic == "LDAA"
        assert line.operand == "#5"

    def test_label_with_colon_lowercase(self):
        line = parse_line("loop: decb")
        assert line.label == "LOOP"
        assert line.mnemonic == "DECB"

    def test_label_named_like_mnemonic(self):
        """'NOP NOP' does not resolve as an instruction, so the first NOP is a label."""
        line = parse_line("NOP NOP")
        assert line.label == "NOP"
        assert line.mnemonic == "NOP"
        assert line.mode == AddressingMode.INHERENT

    def test_unknown_mnemonic_after_label(self):
        """An unknown instruction is sized as one byte."""
        line = parse_line("FOO BAR")
        assert line.kind == LineKind.INSTRUCTION
        assert line.label == "FOO"
        assert line.mnemonic == "BAR"
        assert line.info is None
        assert not line.is_known_instruction
        assert line.size == 1

    def test_line_number(self):
        assert parse_line("NOP", 4).line_number == 5

    def test_operand_column(self):
        assert parse_line("  LDAA #5").operand_column == 8
        assert parse_line("NOP").operand_column == 0

    def test_parse_is_pure(self):
        """The same text always parses to an equal record."""
        text = "LOOP  BNE LOOP"
        assert parse_line(text, 3) == parse_line(text, 3)


# =============================================================================
# Mode Widening Tests
# =============================================================================

class TestModeWidening:
    """Test resolve_instruction() retries with wider modes."""

    def test_exact_match(self):
        mode, info = resolve_instruction("LDAA", "#5")
        assert mode == AddressingMode.IMMEDIATE
        assert info.opcode == 0x86

    def test_small_immediate_widens_to_16bit(self):
        """LDX #5 classifies as 8-bit immediate but LDX only has IMM16."""
        mode, info = resolve_instruction("LDX", "#5")
        assert mode == AddressingMode.IMMEDIATE16
        assert info.opcode == 0xCE

    def test_jump_to_label_is_extended(self):
        mode, info = resolve_instruction("JMP", "START")
        assert mode == AddressingMode.EXTENDED
        assert info.opcode == 0x7E

    def test_small_integer_is_direct(self):
        mode, info = resolve_instruction("LDAA", "64")
        assert mode == AddressingMode.DIRECT
        assert info.opcode == 0x96

    def test_label_operand_prefers_extended(self):
        mode, _ = resolve_instruction("LDAA", "VALUE")
        assert mode == AddressingMode.EXTENDED

    def test_branch_keeps_relative(self):
        mode, info = resolve_instruction("BNE", "LOOP")
        assert mode == AddressingMode.RELATIVE
        assert info.opcode == 0x26

    def test_unsupported_combination(self):
        assert resolve_instruction("STAA", "#5") is None
        assert resolve_instruction("INCA", "#5") is None
        assert resolve_instruction(None, None) is None
