"""
M6800 Emulator - Stepping Session
=================================

This module provides the `Emulator` class, a resettable session that runs
assembler output one line at a time and records a trace of every step.

The Emulator:
- Loads the assembler's output text (one line per source line)
- Places it at a fixed load address ($C000 by default)
- Executes one line per step, following branches and jumps through the
  program image's address lookup
- Guards against runaway loops with a step ceiling
- Exposes registers, the sparse memory map and the trace

Session States
--------------
    IDLE --load()--> RUNNING --end of program--> COMPLETED
                        |
                        +--step ceiling reached--> HALTED

load() may be called in any state; it discards everything and starts over.

Nothing is raised while stepping: unknown opcodes and the step ceiling are
reported as trace entries. Only stepping before load() raises
EmulatorError.

Example usage:
    >>> from m6800_sdk.emulator import Emulator
    >>> emu = Emulator()
    >>> emu.load("86 05\\n8B 03")
    >>> print(emu.step())
    PC: $C000 -> LDAA -> A = 5
    >>> print(emu.step())
    PC: $C002 -> ADDA -> A = 8
    >>> emu.status
    <EmulatorStatus.COMPLETED: 4>
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Optional, Union

from m6800_sdk.errors import EmulatorError
from m6800_sdk.assembler.lexer import parse_number
from .cpu import M6800
from .memory import Memory
from .program import ProgramImage

# Logger for this module
logger = logging.getLogger(__name__)

DEFAULT_LOAD_ADDRESS = 0xC000
DEFAULT_MAX_STEPS = 100


# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for an emulator session.

    Attributes:
        load_address: Address of the first program line. Default $C000.
        max_steps: Step ceiling; stepping stops with a STEP_LIMIT entry
                   once the step count exceeds it. Default 100.

    Example:
        >>> config = EmulatorConfig(max_steps=1000)
        >>> config = EmulatorConfig.from_env()
    """
    load_address: int = DEFAULT_LOAD_ADDRESS
    max_steps: int = DEFAULT_MAX_STEPS

    def __post_init__(self):
        if not 0 <= self.load_address <= 0xFFFF:
            raise ValueError(f"load address out of range: {self.load_address}")
        if self.max_steps < 0:
            raise ValueError(f"max_steps must not be negative: {self.max_steps}")

    @classmethod
    def from_env(cls) -> "EmulatorConfig":
        """
        Create EmulatorConfig from environment variables.

        Environment variables (all optional):
            M6800_LOAD_ADDRESS: Load address ($C000, 0xC000 or 49152)
            M6800_MAX_STEPS: Step ceiling (integer)

        Invalid values are ignored with a warning.

        Returns:
            EmulatorConfig with values from environment variables
        """
        load_address = DEFAULT_LOAD_ADDRESS
        max_steps = DEFAULT_MAX_STEPS

        if value := os.environ.get("M6800_LOAD_ADDRESS"):
            address = parse_number(value)
            if address is not None and 0 <= address <= 0xFFFF:
                load_address = address
            else:
                logger.warning(f"Ignoring invalid M6800_LOAD_ADDRESS: {value!r}")

        if value := os.environ.get("M6800_MAX_STEPS"):
            try:
                steps = int(value)
            except ValueError:
                steps = -1
            if steps >= 0:
                max_steps = steps
            else:
                logger.warning(f"Ignoring invalid M6800_MAX_STEPS: {value!r}")

        return cls(load_address=load_address, max_steps=max_steps)


# =============================================================================
# Session State and Trace
# =============================================================================

class EmulatorStatus(Enum):
    """State of an emulator session."""
    IDLE = auto()       # Nothing loaded
    RUNNING = auto()    # Program loaded, steps remaining
    HALTED = auto()     # Step ceiling reached
    COMPLETED = auto()  # Cursor moved past the last line


class TraceKind(Enum):
    """What happened in one step."""
    EXECUTED = auto()          # Instruction executed
    BRANCH_TAKEN = auto()      # Branch condition held, PC retargeted
    BRANCH_NOT_TAKEN = auto()  # Branch condition failed
    SKIPPED = auto()           # Blank line consumed
    UNKNOWN_OPCODE = auto()    # Line did not decode to a known instruction
    STEP_LIMIT = auto()        # Step ceiling reached, session halted
    COMPLETED = auto()         # No more lines


@dataclass(frozen=True)
class TraceEntry:
    """
    Record of one step.

    Attributes:
        step: Step number (1-based; STEP_LIMIT and COMPLETED entries carry
              the count of steps run so far)
        pc: Program counter before the step
        kind: What happened
        message: Human-readable effect, e.g. "A = 5"
        mnemonic: Decoded mnemonic, None when nothing was decoded
    """
    step: int
    pc: int
    kind: TraceKind
    message: str
    mnemonic: Optional[str] = None

    def __str__(self) -> str:
        """Format as 'PC: $C000 -> LDAA -> A = 5'."""
        if self.mnemonic:
            return f"PC: ${self.pc:04X} -> {self.mnemonic} -> {self.message}"
        return f"PC: ${self.pc:04X} -> {self.message}"


# =============================================================================
# Emulator Session
# =============================================================================

class Emulator:
    """
    Stepping emulator session.

    Each session owns its CPU, memory, program image and trace. Use one
    session per program run; load() is the only reset point.

    Attributes:
        config: Session configuration
    """

    def __init__(self, config: Optional[EmulatorConfig] = None):
        """
        Initialize the emulator.

        Args:
            config: Session configuration. Uses defaults if None.
        """
        self.config = config or EmulatorConfig()
        self._memory = Memory()
        self._cpu = M6800(self._memory)
        self._cpu.reset(self.config.load_address)
        self._program = ProgramImage([], self.config.load_address)
        self._cursor = 0
        self._step_count = 0
        self._trace: list[TraceEntry] = []
        self._status = EmulatorStatus.IDLE
        self._halt_entry: Optional[TraceEntry] = None

    # =========================================================================
    # Program Loading
    # =========================================================================

    def load(self, encoded: Union[str, Iterable[str]]) -> None:
        """
        Load assembler output and reset the session.

        Registers, carry, memory, step counter and trace are cleared, PC is
        set to the load address and the session becomes RUNNING.

        Args:
            encoded: Output lines joined with newlines, or a sequence of
                     output lines
        """
        self._program = ProgramImage.from_text(encoded, self.config.load_address)
        self._memory.clear()
        self._cpu.reset(self.config.load_address)
        self._cursor = 0
        self._step_count = 0
        self._trace = []
        self._halt_entry = None
        self._status = EmulatorStatus.RUNNING

        if len(self._program) == 0:
            self._status = EmulatorStatus.COMPLETED

    # =========================================================================
    # Execution Control
    # =========================================================================

    def has_next_step(self) -> bool:
        """True while the session is RUNNING with lines left to execute."""
        return (
            self._status == EmulatorStatus.RUNNING
            and self._cursor < len(self._program)
        )

    def step(self) -> TraceEntry:
        """
        Execute one line.

        Returns:
            Trace entry describing the step

        Raises:
            EmulatorError: If no program has been loaded
        """
        if self._status == EmulatorStatus.IDLE:
            raise EmulatorError("no program loaded; call load() first")

        if self._status == EmulatorStatus.HALTED:
            return self._halt_entry

        if self._status == EmulatorStatus.COMPLETED or self._cursor >= len(self._program):
            self._status = EmulatorStatus.COMPLETED
            return TraceEntry(self._step_count, self.pc, TraceKind.COMPLETED, "program completed")

        if self._step_count > self.config.max_steps:
            return self._halt()

        entry = self._execute_line()
        self._trace.append(entry)
        logger.debug(str(entry))

        if self._cursor >= len(self._program):
            self._status = EmulatorStatus.COMPLETED
            logger.debug(f"Program completed after {self._step_count} steps")
        return entry

    def run(self) -> list[TraceEntry]:
        """
        Step until the program completes or the step ceiling is reached.

        Returns:
            The entries produced by this call, including a final
            STEP_LIMIT entry when the ceiling stopped the run
        """
        entries = []
        while self.has_next_step():
            entries.append(self.step())
        return entries

    def _halt(self) -> TraceEntry:
        """Stop the session at the step ceiling."""
        self._status = EmulatorStatus.HALTED
        self._halt_entry = TraceEntry(
            self._step_count,
            self.pc,
            TraceKind.STEP_LIMIT,
            f"step limit of {self.config.max_steps} reached, execution halted "
            f"(possible infinite loop)",
        )
        self._trace.append(self._halt_entry)
        logger.warning(str(self._halt_entry))
        return self._halt_entry

    def _execute_line(self) -> TraceEntry:
        """Execute the line under the cursor and move the cursor on."""
        line = self._program[self._cursor]
        pc = self.pc
        self._step_count += 1
        step = self._step_count

        if line.is_blank:
            self._cursor += 1
            return TraceEntry(step, pc, TraceKind.SKIPPED, "blank line skipped")

        if not line.is_code:
            # Not a hex byte sequence (assembler error line): zero-size unknown
            self._cursor += 1
            return TraceEntry(step, pc, TraceKind.UNKNOWN_OPCODE, f"unknown opcode: {line.text}")

        opcode = line.data[0]
        result = self._cpu.execute(opcode, list(line.data[1:]))
        if result is None:
            self._cpu.pc += line.size
            self._cursor += 1
            return TraceEntry(step, pc, TraceKind.UNKNOWN_OPCODE, f"unknown opcode ${opcode:02X}")

        if result.transferred:
            target = self._program.find_line(self.pc)
            self._cursor = target if target is not None else len(self._program)
        else:
            self._cursor += 1

        if result.branch_taken is True:
            kind = TraceKind.BRANCH_TAKEN
        elif result.branch_taken is False:
            kind = TraceKind.BRANCH_NOT_TAKEN
        else:
            kind = TraceKind.EXECUTED
        return TraceEntry(step, pc, kind, result.message, result.mnemonic)

    # =========================================================================
    # State Queries
    # =========================================================================

    @property
    def a(self) -> int:
        """Accumulator A."""
        return self._cpu.a

    @property
    def b(self) -> int:
        """Accumulator B."""
        return self._cpu.b

    @property
    def x(self) -> int:
        """Index register X."""
        return self._cpu.x

    @property
    def pc(self) -> int:
        """Program counter."""
        return self._cpu.pc

    @property
    def carry(self) -> bool:
        """Carry bit."""
        return self._cpu.carry

    @property
    def registers(self) -> dict:
        """
        Get all register values as a dictionary.

        Returns:
            Dictionary with a, b, x, pc and carry
        """
        return self._cpu.get_registers()

    @property
    def memory(self) -> dict[int, int]:
        """Snapshot of the written memory cells (address -> byte)."""
        return self._memory.snapshot()

    def nonzero_memory(self) -> dict[int, int]:
        """Written memory cells holding a non-zero byte."""
        return self._memory.nonzero()

    @property
    def trace(self) -> list[TraceEntry]:
        """All trace entries since the last load()."""
        return list(self._trace)

    @property
    def status(self) -> EmulatorStatus:
        return self._status

    @property
    def step_count(self) -> int:
        """Number of steps executed since the last load()."""
        return self._step_count

    @property
    def cursor(self) -> int:
        """Index of the next program line to execute."""
        return self._cursor

    @property
    def program(self) -> ProgramImage:
        """The loaded program image."""
        return self._program

    def read_byte(self, address: int) -> int:
        """Read a byte from memory (unwritten cells read 0)."""
        return self._memory.read(address)

    def write_byte(self, address: int, value: int) -> None:
        """
        Write a byte to memory.

        Useful for seeding data before stepping; load() clears memory.
        """
        self._memory.write(address, value)

    def __repr__(self) -> str:
        return (
            f"Emulator(status={self._status.name}, PC=${self.pc:04X}, "
            f"A=${self.a:02X}, B=${self.b:02X}, X=${self.x:04X}, "
            f"steps={self._step_count})"
        )
