"""
Memory and Program Image Unit Tests
===================================

Tests for the sparse memory map and the address-indexed program image
the emulator steps through.
"""

import pytest

from m6800_sdk.emulator import Memory, ProgramImage, decode_line


# =============================================================================
# Memory Tests
# =============================================================================

class TestMemory:
    """Test sparse memory reads and writes."""

    def test_unwritten_reads_zero(self):
        mem = Memory()
        assert mem.read(0x1234) == 0
        assert len(mem) == 0

    def test_write_and_read(self):
        mem = Memory()
        mem.write(0x40, 7)
        assert mem.read(0x40) == 7
        assert 0x40 in mem
        assert 0x41 not in mem

    def test_values_masked(self):
        mem = Memory()
        mem.write(0x40, 0x1FF)
        assert mem.read(0x40) == 0xFF

    def test_addresses_masked(self):
        mem = Memory()
        mem.write(0x10040, 5)
        assert mem.read(0x40) == 5

    def test_words_are_big_endian(self):
        mem = Memory()
        mem.write_word(0x40, 0xBEEF)
        assert mem.read(0x40) == 0xBE
        assert mem.read(0x41) == 0xEF
        assert mem.read_word(0x40) == 0xBEEF

    def test_word_wraps_at_top_of_memory(self):
        mem = Memory()
        mem.write_word(0xFFFF, 0x1234)
        assert mem.read(0xFFFF) == 0x12
        assert mem.read(0x0000) == 0x34

    def test_snapshot_and_nonzero(self):
        mem = Memory()
        mem.write(0x50, 1)
        mem.write(0x40, 0)
        assert mem.snapshot() == {0x40: 0, 0x50: 1}
        assert mem.nonzero() == {0x50: 1}
        assert list(mem) == [0x40, 0x50]

    def test_snapshot_is_a_copy(self):
        mem = Memory()
        snap = mem.snapshot()
        snap[0x40] = 1
        assert mem.read(0x40) == 0

    def test_clear(self):
        mem = Memory()
        mem.write(0x40, 1)
        mem.clear()
        assert len(mem) == 0


# =============================================================================
# Line Decoding Tests
# =============================================================================

class TestDecodeLine:
    """Test decoding of assembler output lines."""

    @pytest.mark.parametrize("text,data", [
        ("86 05", b"\x86\x05"),
        ("ce 12 34", b"\xce\x12\x34"),
        ("8", b"\x08"),
        ("", b""),
        ("ERROR: invalid instruction -> FOO", b""),
        ("123", b""),
        ("86 GG", b""),
    ])
    def test_decode(self, text, data):
        assert decode_line(text) == data


# =============================================================================
# Program Image Tests
# =============================================================================

class TestProgramImage:
    """Test address assignment and address lookup."""

    def test_addresses_follow_byte_counts(self):
        image = ProgramImage.from_text("\n86 05\n\n20 FE", 0xC000)
        assert [line.address for line in image] == [0xC000, 0xC000, 0xC002, 0xC002]
        assert image.code_size() == 4
        assert len(image) == 4

    def test_find_line_skips_empty_lines(self):
        """Lookup lands on the first code line at the address."""
        image = ProgramImage.from_text("\n86 05\n\n20 FE", 0xC000)
        assert image.find_line(0xC000) == 1
        assert image.find_line(0xC002) == 3

    def test_find_line_misses(self):
        image = ProgramImage.from_text("86 05\n20 FE", 0xC000)
        assert image.find_line(0xC001) is None
        assert image.find_line(0xC004) is None
        assert image.find_line(0x0000) is None

    def test_error_lines_take_no_space(self):
        image = ProgramImage.from_text(["86 01", "ERROR: cannot resolve operand -> X", "4C"], 0x4000)
        assert image[1].size == 0
        assert not image[1].is_code
        assert not image[1].is_blank
        assert image[2].address == 0x4002

    def test_lines_are_trimmed(self):
        image = ProgramImage.from_text(["  86 05  "])
        assert image[0].text == "86 05"
        assert image.load_address == 0xC000
