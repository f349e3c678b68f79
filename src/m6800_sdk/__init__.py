"""
M6800 SDK - Assembler and Step Emulator for an 8-bit 6800 Subset
================================================================

This package provides a small toolchain for the Motorola 6800 family:
a two-pass assembler for a subset of the instruction set and an
instruction-level emulator that runs the assembler's output one line at
a time.

Main Components
---------------
- **cpu**: Instruction set definition
    Opcode table, addressing modes and opcode decoding

- **assembler**: Two-pass assembler (m6asm)
    Converts assembly source to one output line per source line:
    hex bytes, nothing, or an ERROR line

- **emulator**: Step emulator (m6sim)
    Executes assembler output with a step ceiling and a full trace

Quick Start
-----------
Assemble a program:
    >>> from m6800_sdk import Assembler
    >>> asm = Assembler()
    >>> asm.assemble_string("LDAA #5\\nSTAA $40")
    ['86 05', '97 40']

Run it:
    >>> from m6800_sdk import Emulator
    >>> emu = Emulator()
    >>> emu.load(asm.get_object_text())
    >>> entries = emu.run()
    >>> emu.read_byte(0x40)
    5

Or use the command-line tools:
    $ m6asm prog.asm -o prog.obj -l prog.lst
    $ m6sim prog.asm
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from m6800_sdk.assembler import Assembler, assemble, assemble_file
from m6800_sdk.emulator import Emulator, EmulatorConfig, EmulatorStatus, TraceEntry, TraceKind
from m6800_sdk.errors import (
    M6800Error,
    AssemblerError,
    UndefinedSymbolError,
    AddressingModeError,
    BranchRangeError,
    ExpressionError,
    DirectiveError,
    EmulatorError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    # Emulator
    "Emulator",
    "EmulatorConfig",
    "EmulatorStatus",
    "TraceEntry",
    "TraceKind",
    # Exception hierarchy
    "M6800Error",
    "AssemblerError",
    "UndefinedSymbolError",
    "AddressingModeError",
    "BranchRangeError",
    "ExpressionError",
    "DirectiveError",
    "EmulatorError",
]
