"""
M6800 Assembly Language Parser
==============================

This module parses a single line of M6800 assembly source into a
SourceLine record. Parsing is a pure function of the line text: both
assembler passes call parse_line() on every line, so a line is always
interpreted the same way no matter what came before it.

Line Kinds
----------
1. **BLANK**: Empty line or comment only
2. **ORG**: Set origin (`ORG $C000`)
3. **END**: End of source marker (`END`, `.END`); emits nothing
4. **LABEL_ONLY**: Label definition on its own line (`LOOP:`)
5. **INSTRUCTION**: Machine instruction, optionally labelled
   ```asm
   START  LDAA #$41    ; Immediate mode
          STAA $40     ; Direct mode
          LDAB 5,X     ; Indexed mode
   LOOP:  BNE LOOP     ; Relative mode
   ```

Label Detection
---------------
There are no reserved words and labels need no trailing colon. The first
field is taken as a mnemonic with the second field as its operand; only
when that combination does not resolve to an instruction is the first
field a label. The remaining fields are then re-parsed as mnemonic and
operand.

Mode Widening
-------------
Operand classification is purely lexical, so some valid instruction forms
come out with a mode the mnemonic does not support (`LDX #5` classifies as
8-bit immediate, `JMP START` as relative). resolve_instruction() retries
such lines with wider modes:

| Classified  | Retried as                                     |
|-------------|------------------------------------------------|
| IMMEDIATE   | IMMEDIATE16                                    |
| RELATIVE    | DIRECT (bare integer 0..255), EXTENDED, DIRECT |
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from m6800_sdk.cpu import AddressingMode, InstructionInfo, get_instruction_info
from m6800_sdk.assembler.lexer import classify_operand, parse_number, split_fields


# =============================================================================
# Line Kind Enumeration
# =============================================================================

class LineKind(Enum):
    """Kinds of source line recognised by the parser."""
    BLANK = auto()        # Empty or comment-only line
    ORG = auto()          # Origin directive
    END = auto()          # End directive
    LABEL_ONLY = auto()   # Label with nothing after it
    INSTRUCTION = auto()  # Instruction (known or unknown mnemonic)


# Directive names, matched on the whole token
ORG_DIRECTIVE = "ORG"
END_DIRECTIVES = frozenset({"END", ".END"})


# =============================================================================
# Source Line
# =============================================================================

@dataclass(frozen=True)
class SourceLine:
    """
    One parsed source line.

    Attributes:
        text: The raw source text
        index: 0-based position of the line in the source
        kind: Line classification
        label: Label defined by this line (upper-cased, ':' removed)
        mnemonic: Instruction mnemonic (upper-cased) or directive name
        operand: Operand text as written, or None
        mode: Resolved addressing mode (instructions only)
        info: Instruction encoding, None for an unknown instruction
    """
    text: str
    index: int
    kind: LineKind
    label: Optional[str] = None
    mnemonic: Optional[str] = None
    operand: Optional[str] = None
    mode: Optional[AddressingMode] = None
    info: Optional[InstructionInfo] = None

    @property
    def line_number(self) -> int:
        """1-based line number for messages and listings."""
        return self.index + 1

    @property
    def is_instruction(self) -> bool:
        """True for a line that occupies code space."""
        return self.kind == LineKind.INSTRUCTION

    @property
    def is_known_instruction(self) -> bool:
        """True for an instruction line whose mnemonic and mode resolved."""
        return self.kind == LineKind.INSTRUCTION and self.info is not None

    @property
    def size(self) -> int:
        """
        Number of bytes the line occupies.

        An unknown instruction is sized as one byte so both passes advance
        the location counter identically.
        """
        if self.kind != LineKind.INSTRUCTION:
            return 0
        return self.info.size if self.info is not None else 1

    @property
    def operand_column(self) -> int:
        """1-based column of the operand in the raw text (0 if none)."""
        if not self.operand:
            return 0
        return self.text.find(self.operand) + 1


# =============================================================================
# Instruction Resolution
# =============================================================================

def _candidate_modes(operand: Optional[str], mode: AddressingMode) -> list[AddressingMode]:
    """List the modes to try for an operand, the classified mode first."""
    if mode == AddressingMode.IMMEDIATE:
        return [AddressingMode.IMMEDIATE, AddressingMode.IMMEDIATE16]

    if mode == AddressingMode.RELATIVE:
        modes = [AddressingMode.RELATIVE]
        value = parse_number(operand or "")
        if value is not None and 0 <= value <= 0xFF:
            modes.append(AddressingMode.DIRECT)
        modes.append(AddressingMode.EXTENDED)
        if AddressingMode.DIRECT not in modes:
            modes.append(AddressingMode.DIRECT)
        return modes

    return [mode]


def resolve_instruction(
    mnemonic: Optional[str],
    operand: Optional[str],
) -> Optional[tuple[AddressingMode, InstructionInfo]]:
    """
    Resolve a mnemonic/operand pair to an instruction encoding.

    Args:
        mnemonic: The mnemonic, any case
        operand: The operand text, or None

    Returns:
        (mode, info) for the first supported mode, or None when the pair
        is not an instruction. Never raises.
    """
    if not mnemonic:
        return None
    mode = classify_operand(operand)
    for candidate in _candidate_modes(operand, mode):
        info = get_instruction_info(mnemonic, candidate)
        if info is not None:
            return candidate, info
    return None


# =============================================================================
# Line Parsing
# =============================================================================

def _parse_statement(
    text: str,
    index: int,
    fields: list[str],
    label: Optional[str] = None,
) -> SourceLine:
    """Parse the mnemonic/operand part of a line (fields after any label)."""
    keyword = fields[0].upper()
    operand = fields[1] if len(fields) > 1 else None

    if keyword == ORG_DIRECTIVE:
        return SourceLine(text, index, LineKind.ORG, label=label,
                          mnemonic=keyword, operand=operand)
    if keyword in END_DIRECTIVES:
        return SourceLine(text, index, LineKind.END, label=label,
                          mnemonic=keyword, operand=operand)

    resolved = resolve_instruction(keyword, operand)
    if resolved is None:
        return SourceLine(text, index, LineKind.INSTRUCTION, label=label,
                          mnemonic=keyword, operand=operand)
    mode, info = resolved
    return SourceLine(text, index, LineKind.INSTRUCTION, label=label,
                      mnemonic=keyword, operand=operand, mode=mode, info=info)


def parse_line(text: str, index: int = 0) -> SourceLine:
    """
    Parse one line of assembly source.

    Args:
        text: The raw line (no trailing newline)
        index: 0-based line position, carried into the result

    Returns:
        The parsed SourceLine. Parsing never fails; an unknown mnemonic
        yields an INSTRUCTION line with info None, which pass 2 reports.

    Example:
        >>> line = parse_line("LOOP  DECB", 3)
        >>> line.label, line.mnemonic, line.size
        ('LOOP', 'DECB', 1)
    """
    fields = split_fields(text)
    if not fields:
        return SourceLine(text, index, LineKind.BLANK)

    first = fields[0].upper()
    if first == ORG_DIRECTIVE or first in END_DIRECTIVES:
        return _parse_statement(text, index, fields)

    operand = fields[1] if len(fields) > 1 else None
    if resolve_instruction(first, operand) is not None:
        return _parse_statement(text, index, fields[:2])

    # First field did not resolve as a mnemonic: it is a label
    label = first.rstrip(":")
    rest = fields[1:]
    if not rest:
        return SourceLine(text, index, LineKind.LABEL_ONLY, label=label)
    return _parse_statement(text, index, rest, label=label)
