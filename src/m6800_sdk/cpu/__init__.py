"""
M6800 SDK CPU Package
=====================

CPU architecture definitions shared by the assembler and the emulator.
The assembler encodes instructions with OPCODE_TABLE and the emulator
decodes them with OPCODE_MAP, so both sides always agree on opcodes,
addressing modes and instruction sizes.

Modules:
    m6800: Instruction set definitions, addressing modes, and lookup
           helpers for encoding and decoding.

Usage:
    from m6800_sdk.cpu import (
        AddressingMode,
        InstructionInfo,
        OPCODE_TABLE,
        get_instruction_info,
    )
"""

from m6800_sdk.cpu.m6800 import (
    # Core types
    AddressingMode,
    InstructionInfo,
    # Master instruction database
    OPCODE_TABLE,
    OPCODE_MAP,
    # Instruction set reference lists
    MNEMONICS,
    # Lookup functions
    get_instruction_info,
    get_valid_modes,
    is_valid_instruction,
    decode_opcode,
)

__all__ = [
    # Core types
    "AddressingMode",
    "InstructionInfo",
    # Master instruction database
    "OPCODE_TABLE",
    "OPCODE_MAP",
    # Instruction set reference lists
    "MNEMONICS",
    # Lookup functions
    "get_instruction_info",
    "get_valid_modes",
    "is_valid_instruction",
    "decode_opcode",
]
