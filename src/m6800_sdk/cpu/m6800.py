"""
M6800 Instruction Set Definition
================================

This module defines the instruction subset understood by the assembler and
the emulator: an 8-bit accumulator machine in the Motorola 6800 family with
two accumulators (A, B), a 16-bit index register (X) and a 16-bit program
counter. Multi-byte operands are big-endian (most significant byte first).

Addressing Modes
----------------
1. **INHERENT**: No operand (e.g. INCA, RTS)
   - 1 byte: opcode only
   - Example: INCA -> $4C

2. **IMMEDIATE**: 8-bit literal follows the opcode (e.g. LDAA #$41)
   - 2 bytes: opcode + value
   - Example: LDAA #5 -> $86 $05

3. **IMMEDIATE16**: 16-bit literal (only LDX)
   - 3 bytes: opcode + high byte + low byte
   - Example: LDX #$1234 -> $CE $12 $34

4. **DIRECT**: Zero-page address ($00-$FF)
   - 2 bytes: opcode + address byte
   - Example: STAA $40 -> $97 $40

5. **INDEXED**: X register + unsigned 8-bit offset
   - 2 bytes: opcode + offset
   - Example: LDAA 5,X -> $A6 $05

6. **EXTENDED**: Full 16-bit address
   - 3 bytes: opcode + high byte + low byte
   - Example: JMP $C010 -> $7E $C0 $10

7. **RELATIVE**: PC-relative branch
   - 2 bytes: opcode + signed displacement
   - Range: -128 to +127 from the address after the branch
   - Example: BRA LOOP -> $20 $FE (branch to itself)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Addressing Mode Enumeration
# =============================================================================

class AddressingMode(Enum):
    """
    Addressing modes of the instruction set.

    Each mode determines how the operand text is interpreted and how many
    operand bytes follow the opcode.
    """
    IMMEDIATE = auto()    # #value (8-bit literal)
    IMMEDIATE16 = auto()  # #value (16-bit literal)
    DIRECT = auto()       # Zero page address ($00-$FF)
    INDEXED = auto()      # offset,X
    EXTENDED = auto()     # Full 16-bit address
    RELATIVE = auto()     # Branch target (signed 8-bit displacement)
    INHERENT = auto()     # No operand

    def __str__(self) -> str:
        """Return human-readable name for error messages."""
        return {
            AddressingMode.IMMEDIATE: "immediate",
            AddressingMode.IMMEDIATE16: "16-bit immediate",
            AddressingMode.DIRECT: "direct",
            AddressingMode.INDEXED: "indexed",
            AddressingMode.EXTENDED: "extended",
            AddressingMode.RELATIVE: "relative",
            AddressingMode.INHERENT: "inherent",
        }[self]


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Encoding of one (mnemonic, addressing mode) pair.

    Frozen so the opcode table cannot be modified at runtime.

    Attributes:
        opcode: The opcode byte
        mode: The addressing mode this encoding belongs to
        size: Total instruction size in bytes (including operand)
        operand_size: Size of the operand in bytes (0, 1 or 2)
    """
    opcode: int
    mode: AddressingMode
    size: int
    operand_size: int

    def __repr__(self) -> str:
        return f"InstructionInfo(opcode=${self.opcode:02X}, mode={self.mode.name}, size={self.size})"


def _info(opcode: int, mode: AddressingMode) -> InstructionInfo:
    """Build a table entry; the size follows from the mode."""
    operand_size = _OPERAND_SIZES[mode]
    return InstructionInfo(opcode, mode, 1 + operand_size, operand_size)


_OPERAND_SIZES = {
    AddressingMode.IMMEDIATE: 1,
    AddressingMode.IMMEDIATE16: 2,
    AddressingMode.DIRECT: 1,
    AddressingMode.INDEXED: 1,
    AddressingMode.EXTENDED: 2,
    AddressingMode.RELATIVE: 1,
    AddressingMode.INHERENT: 0,
}

_IMM = AddressingMode.IMMEDIATE
_IMM16 = AddressingMode.IMMEDIATE16
_DIR = AddressingMode.DIRECT
_IDX = AddressingMode.INDEXED
_EXT = AddressingMode.EXTENDED
_REL = AddressingMode.RELATIVE
_INH = AddressingMode.INHERENT


# =============================================================================
# Opcode Table
# =============================================================================
# Key: (mnemonic, addressing_mode)
# Value: InstructionInfo(opcode, mode, total_size, operand_size)
# =============================================================================

OPCODE_TABLE: dict[tuple[str, AddressingMode], InstructionInfo] = {
    # =========================================================================
    # IMMEDIATE
    # =========================================================================
    ("LDAA", _IMM): _info(0x86, _IMM),
    ("LDAB", _IMM): _info(0xC6, _IMM),
    ("ADDA", _IMM): _info(0x8B, _IMM),
    ("ADDB", _IMM): _info(0xCB, _IMM),
    ("SUBA", _IMM): _info(0x80, _IMM),
    ("SUBB", _IMM): _info(0xC0, _IMM),
    ("CMPA", _IMM): _info(0x81, _IMM),
    ("CMPB", _IMM): _info(0xC1, _IMM),
    ("ANDA", _IMM): _info(0x84, _IMM),
    ("LDX", _IMM16): _info(0xCE, _IMM16),

    # =========================================================================
    # DIRECT (zero page)
    # =========================================================================
    ("LDAA", _DIR): _info(0x96, _DIR),
    ("LDAB", _DIR): _info(0xD6, _DIR),
    ("STAA", _DIR): _info(0x97, _DIR),
    ("STAB", _DIR): _info(0xD7, _DIR),
    ("LDX", _DIR): _info(0xDE, _DIR),
    ("STX", _DIR): _info(0xDF, _DIR),
    ("CMPA", _DIR): _info(0x91, _DIR),
    ("CMPB", _DIR): _info(0xD1, _DIR),
    ("ANDA", _DIR): _info(0x94, _DIR),
    ("ADDA", _DIR): _info(0x9B, _DIR),
    ("SUBA", _DIR): _info(0x90, _DIR),

    # =========================================================================
    # INDEXED (offset,X)
    # =========================================================================
    ("LDAA", _IDX): _info(0xA6, _IDX),
    ("LDAB", _IDX): _info(0xE6, _IDX),
    ("STAA", _IDX): _info(0xA7, _IDX),
    ("STAB", _IDX): _info(0xE7, _IDX),
    ("LDX", _IDX): _info(0xEE, _IDX),
    ("STX", _IDX): _info(0xEF, _IDX),

    # =========================================================================
    # EXTENDED (16-bit address)
    # =========================================================================
    ("LDAA", _EXT): _info(0xB6, _EXT),
    ("LDAB", _EXT): _info(0xF6, _EXT),
    ("STAA", _EXT): _info(0xB7, _EXT),
    ("STAB", _EXT): _info(0xF7, _EXT),
    ("CMPA", _EXT): _info(0xB1, _EXT),
    ("CMPB", _EXT): _info(0xF1, _EXT),
    ("ANDA", _EXT): _info(0xB4, _EXT),
    ("ADDA", _EXT): _info(0xBB, _EXT),
    ("SUBA", _EXT): _info(0xB0, _EXT),
    ("JMP", _EXT): _info(0x7E, _EXT),    # Jump
    ("JSR", _EXT): _info(0xBD, _EXT),    # Jump to subroutine

    # =========================================================================
    # RELATIVE (branches)
    # Displacement is relative to the address of the byte after the branch
    # =========================================================================
    ("BRA", _REL): _info(0x20, _REL),    # Branch always
    ("BNE", _REL): _info(0x26, _REL),    # Branch if B != 0
    ("BEQ", _REL): _info(0x27, _REL),    # Branch if B == 0
    ("BMI", _REL): _info(0x2B, _REL),    # Branch if A bit 7 set
    ("BPL", _REL): _info(0x2A, _REL),    # Branch if A bit 7 clear
    ("BSR", _REL): _info(0x8D, _REL),    # Branch to subroutine

    # =========================================================================
    # INHERENT
    # =========================================================================
    ("INCA", _INH): _info(0x4C, _INH),
    ("DECA", _INH): _info(0x4A, _INH),
    ("INCB", _INH): _info(0x5C, _INH),
    ("DECB", _INH): _info(0x5A, _INH),
    ("CLRA", _INH): _info(0x4F, _INH),
    ("CLRB", _INH): _info(0x5F, _INH),
    ("NOP", _INH): _info(0x01, _INH),
    ("RTS", _INH): _info(0x39, _INH),
    ("CBA", _INH): _info(0x11, _INH),    # Compare B to A
    ("ABA", _INH): _info(0x1B, _INH),    # Add B to A
    ("SBA", _INH): _info(0x10, _INH),    # Subtract B from A
    ("TAB", _INH): _info(0x16, _INH),    # Transfer A to B
    ("TBA", _INH): _info(0x17, _INH),    # Transfer B to A
    ("DEX", _INH): _info(0x09, _INH),
    ("INX", _INH): _info(0x08, _INH),
    ("SEC", _INH): _info(0x0D, _INH),    # Set carry
    ("CLC", _INH): _info(0x0C, _INH),    # Clear carry
    ("ASLA", _INH): _info(0x48, _INH),
    ("ASLB", _INH): _info(0x58, _INH),

    # Shift & rotate
    ("LSRA", _INH): _info(0x44, _INH),
    ("LSRB", _INH): _info(0x54, _INH),
    ("ASRA", _INH): _info(0x47, _INH),
    ("ASRB", _INH): _info(0x57, _INH),
    ("ROLA", _INH): _info(0x49, _INH),
    ("ROLB", _INH): _info(0x59, _INH),
    ("RORA", _INH): _info(0x46, _INH),
    ("RORB", _INH): _info(0x56, _INH),
}


# =============================================================================
# Instruction Set Reference Lists
# =============================================================================

# Set of all valid mnemonics
MNEMONICS: frozenset[str] = frozenset({
    mnemonic for mnemonic, _ in OPCODE_TABLE.keys()
})

# Reverse map used by the emulator: opcode -> (mnemonic, info)
OPCODE_MAP: dict[int, tuple[str, InstructionInfo]] = {
    info.opcode: (mnemonic, info) for (mnemonic, _), info in OPCODE_TABLE.items()
}


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(
    mnemonic: Optional[str],
    mode: AddressingMode
) -> Optional[InstructionInfo]:
    """
    Look up instruction information by mnemonic and addressing mode.

    Args:
        mnemonic: The instruction mnemonic (e.g., "LDAA"), any case
        mode: The addressing mode

    Returns:
        InstructionInfo if found, None if the combination is invalid
    """
    if not mnemonic:
        return None
    return OPCODE_TABLE.get((mnemonic.upper(), mode))


def get_valid_modes(mnemonic: str) -> list[AddressingMode]:
    """
    Get all valid addressing modes for an instruction.

    Args:
        mnemonic: The instruction mnemonic

    Returns:
        List of valid AddressingModes for this instruction
    """
    mnemonic = mnemonic.upper()
    return [
        mode for (m, mode) in OPCODE_TABLE.keys()
        if m == mnemonic
    ]


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic belongs to the instruction set."""
    return mnemonic.upper() in MNEMONICS


def decode_opcode(opcode: int) -> Optional[tuple[str, InstructionInfo]]:
    """
    Decode an opcode byte.

    Args:
        opcode: The opcode byte

    Returns:
        (mnemonic, InstructionInfo) or None for an unknown opcode
    """
    return OPCODE_MAP.get(opcode & 0xFF)
