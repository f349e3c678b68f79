"""
M6800 Emulator
==============

An instruction-level emulator for the CPU subset the assembler targets.

This package runs assembler output directly, one line per step:

- **CPU**: Accumulators A and B, index register X, PC and a carry bit
- **Memory**: Sparse 64KB address space, unwritten cells read as zero
- **Program image**: Assembler output lines with their load addresses,
  used to follow branches and jumps
- **Session**: Status tracking, step ceiling and a full step trace

Quick Start
-----------

Basic usage::

    >>> from m6800_sdk.assembler import Assembler
    >>> from m6800_sdk.emulator import Emulator
    >>> asm = Assembler()
    >>> asm.assemble_string("LDAA #5\\nADDA #3")
    ['86 05', '8B 03']
    >>> emu = Emulator()
    >>> emu.load(asm.get_object_text())
    >>> entries = emu.run()
    >>> emu.a, f"${emu.pc:04X}"
    (8, '$C004')

With a larger step ceiling::

    >>> emu = Emulator(EmulatorConfig(max_steps=10_000))
"""

from .cpu import M6800, CPUState, ExecutionResult
from .memory import Memory
from .program import ProgramImage, ProgramLine, decode_line
from .emulator import (
    Emulator,
    EmulatorConfig,
    EmulatorStatus,
    TraceEntry,
    TraceKind,
    DEFAULT_LOAD_ADDRESS,
    DEFAULT_MAX_STEPS,
)

__all__ = [
    # Session
    "Emulator",
    "EmulatorConfig",
    "EmulatorStatus",
    "TraceEntry",
    "TraceKind",
    "DEFAULT_LOAD_ADDRESS",
    "DEFAULT_MAX_STEPS",
    # CPU
    "M6800",
    "CPUState",
    "ExecutionResult",
    # Memory and program
    "Memory",
    "ProgramImage",
    "ProgramLine",
    "decode_line",
]
