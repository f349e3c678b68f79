"""
M6800 Code Generator
====================

This module generates M6800 machine code from assembly source lines.
It implements a two-pass assembly process:

Pass 1 (Symbol Collection)
--------------------------
- Parse every line and compute its size
- Track the location counter, including ORG resets
- Build the symbol table with label addresses

Pass 2 (Code Generation)
------------------------
- Parse every line again, the same way pass 1 did
- Encode operands, resolving labels through the symbol table
- Calculate branch offsets
- Turn any failing line into an error line and carry on

Output
------
The result is one output line per source line, so output line N always
belongs to source line N:

| Source line               | Output line                         |
|---------------------------|-------------------------------------|
| blank, comment, ORG, END  | "" (empty)                          |
| label on its own          | "" (empty)                          |
| instruction               | "86 05" (uppercase hex, space-sep.) |
| failing line              | "ERROR: cannot resolve operand -> X"|

The output joined with newlines is the input format of the emulator.

Location Counter After Errors
----------------------------
A line whose operand fails to encode does not advance the location counter
in pass 2, while pass 1 already counted its full size. Addresses of code
after such a line are therefore best-effort. An unknown instruction
advances the counter by one byte in both passes.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from m6800_sdk.errors import (
    AssemblerError,
    AddressingModeError,
    BranchRangeError,
    DirectiveError,
    ExpressionError,
    SourceLocation,
    ErrorCollector,
)
from m6800_sdk.cpu import AddressingMode, get_valid_modes, is_valid_instruction
from m6800_sdk.assembler.lexer import classify_operand
from m6800_sdk.assembler.parser import LineKind, SourceLine, parse_line
from m6800_sdk.assembler.expressions import OperandEvaluator

# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Symbol Table Entry
# =============================================================================

@dataclass
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Symbol name (upper-cased)
        value: Address the label was bound to
        location: Where the symbol was defined
    """
    name: str
    value: int
    location: SourceLocation


# =============================================================================
# Assembled Line
# =============================================================================

@dataclass
class AssembledLine:
    """
    Pass 2 result for one source line.

    Attributes:
        source: The parsed source line
        address: Location counter when the line was encoded
        data: Encoded bytes (empty for lines that emit nothing)
        error: The error that replaced this line's output, if any
    """
    source: SourceLine
    address: int
    data: bytes = b""
    error: Optional[AssemblerError] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def text(self) -> str:
        """Output rendering: hex bytes, an error line, or ""."""
        if self.error is not None:
            return self.error.line_text
        return " ".join(f"{byte:02X}" for byte in self.data)


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Generates M6800 object code from source lines.

    The code generator maintains:
    - Symbol table with all labels
    - Location counter tracking
    - One AssembledLine per source line
    - Error collection for batch reporting

    Usage:
        codegen = CodeGenerator()
        output = codegen.generate(["ORG $C000", "LDAA #5", "ADDA #3"])
        # output == ["", "86 05", "8B 03"]
        codegen.write_listing("program.lst")
    """

    def __init__(self, origin: int = 0x0000, filename: str = "<input>"):
        """
        Initialize the code generator.

        Args:
            origin: Location counter at the start of each pass, used until
                    the source sets its own origin with ORG
            filename: Source name used in error messages
        """
        self._initial_origin = origin & 0xFFFF
        self._filename = filename
        self._origin = self._initial_origin
        self._pc = self._initial_origin
        self._symbols: dict[str, Symbol] = {}
        self._lines: list[AssembledLine] = []
        self._errors = ErrorCollector()

    # =========================================================================
    # Main Entry Point
    # =========================================================================

    def generate(self, source_lines: Iterable[str]) -> list[str]:
        """
        Assemble source lines with two passes.

        Calling generate() again starts from a clean state, so assembling
        the same source twice yields identical results.

        Args:
            source_lines: Source lines without line terminators

        Returns:
            One output string per source line
        """
        lines = list(source_lines)
        self._origin = self._initial_origin
        self._pc = self._initial_origin
        self._symbols.clear()
        self._lines = []
        self._errors.clear()

        self._pass1(lines)
        self._pass2(lines)

        logger.debug(
            f"Assembled {len(lines)} lines from {self._filename}: "
            f"{len(self.get_code())} bytes, {self._errors.error_count()} errors"
        )
        return self.get_output_lines()

    # =========================================================================
    # Results
    # =========================================================================

    def get_output_lines(self) -> list[str]:
        """Return the per-line output strings."""
        return [line.text for line in self._lines]

    def get_assembled_lines(self) -> list[AssembledLine]:
        """Return the per-line pass 2 results."""
        return list(self._lines)

    def get_object_text(self) -> str:
        """Return the output lines joined with newlines (emulator input)."""
        return "\n".join(self.get_output_lines())

    def get_code(self) -> bytes:
        """Return the bytes of all successfully encoded lines, in order."""
        return b"".join(line.data for line in self._lines if not line.is_error)

    def get_origin(self) -> int:
        """Return the active origin address."""
        return self._origin

    def get_symbols(self) -> dict[str, int]:
        """Return a dictionary of symbol names to values."""
        return {name: sym.value for name, sym in self._symbols.items()}

    def has_errors(self) -> bool:
        """Check if any errors occurred during assembly."""
        return self._errors.has_errors()

    def get_errors(self) -> list[AssemblerError]:
        """Return the collected errors in source order."""
        return list(self._errors.errors)

    def get_warnings(self) -> list[str]:
        """Return the collected warnings."""
        return list(self._errors.warnings)

    def get_error_report(self) -> str:
        """Get formatted error report."""
        return self._errors.report()

    # =========================================================================
    # Output File Writing
    # =========================================================================

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            The listing showing addresses, generated bytes, and source lines.
        """
        lines = []
        lines.append("M6800 Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr  Code      Line  Source")
        lines.append("-" * 60)
        for line in self._lines:
            source = line.source
            if source.is_instruction:
                code = "" if line.is_error else line.text
                lines.append(f"{line.address:04X}  {code:8s}  {source.line_number:4d}  {source.text}")
            else:
                lines.append(f"{'':4s}  {'':8s}  {source.line_number:4d}  {source.text}")
            if line.is_error:
                lines.append(f"{'':20s}*** {line.error.line_text}")
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for name, sym in sorted(self._symbols.items()):
            lines.append(f"{name:20s} = ${sym.value:04X}")
        return "\n".join(lines)

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        The listing shows addresses, generated bytes, and source lines.
        """
        with open(filepath, "w") as f:
            f.write(self.get_listing())
            f.write("\n")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by m6asm\n")
            for name, sym in sorted(self._symbols.items()):
                f.write(f"{name} ${sym.value:04X}\n")

    def write_object(self, filepath: str | Path) -> None:
        """Write the per-line output text, one line per source line."""
        with open(filepath, "w") as f:
            f.write(self.get_object_text())
            f.write("\n")

    # =========================================================================
    # Pass 1: Symbol Collection
    # =========================================================================

    def _pass1(self, source_lines: list[str]) -> None:
        """
        First pass: collect symbols and compute addresses.

        Emits nothing; errors are left for pass 2 to report.
        """
        self._pc = self._initial_origin

        for index, text in enumerate(source_lines):
            line = parse_line(text, index)

            # A label on an ORG line is bound before the origin moves
            if line.label:
                self._define_label(line)

            if line.kind == LineKind.ORG:
                address = self._try_origin(line)
                if address is not None:
                    self._origin = address
                    self._pc = address
            elif line.kind == LineKind.INSTRUCTION:
                self._pc += line.size

        logger.debug(f"Pass 1: {len(self._symbols)} symbols, origin ${self._origin:04X}")

    def _define_label(self, line: SourceLine) -> None:
        """Bind a label to the location counter; a redefinition wins."""
        location = SourceLocation(self._filename, line.line_number, 1)
        previous = self._symbols.get(line.label)
        if previous is not None:
            message = (
                f"{location}: warning: duplicate label '{line.label}' "
                f"(previous definition at line {previous.location.line})"
            )
            self._errors.add_warning(message)
            logger.warning(message)
        self._symbols[line.label] = Symbol(line.label, self._pc & 0xFFFF, location)

    def _try_origin(self, line: SourceLine) -> Optional[int]:
        """Evaluate an ORG address for pass 1, None if it does not parse."""
        try:
            return self._evaluate_origin(line)
        except AssemblerError:
            return None

    def _evaluate_origin(self, line: SourceLine) -> int:
        """
        Evaluate the address of an ORG directive.

        Raises:
            DirectiveError: If the address is missing or not a 16-bit literal
        """
        if not line.operand:
            raise DirectiveError("ORG requires an address", token=line.mnemonic)
        try:
            value = OperandEvaluator().evaluate_literal(line.operand)
        except ExpressionError:
            raise DirectiveError(
                f"invalid ORG address '{line.operand}'", token=line.operand
            ) from None
        if not 0 <= value <= 0xFFFF:
            raise DirectiveError(
                f"ORG address out of range: {value}", token=line.operand
            )
        return value

    # =========================================================================
    # Pass 2: Code Generation
    # =========================================================================

    def _pass2(self, source_lines: list[str]) -> None:
        """
        Second pass: generate object code.

        This pass:
        - Generates machine code for instructions
        - Resolves all forward references
        - Calculates branch offsets
        - Records one error per failing line without stopping
        """
        self._pc = self._initial_origin
        evaluator = OperandEvaluator(self.get_symbols())

        for index, text in enumerate(source_lines):
            line = parse_line(text, index)
            address = self._pc & 0xFFFF
            try:
                data = self._pass2_line(line, evaluator)
            except AssemblerError as e:
                self._record_error(line, address, e)
                continue
            self._lines.append(AssembledLine(line, address, data))

        logger.debug(f"Pass 2: {self._errors.error_count()} errors")

    def _pass2_line(self, line: SourceLine, evaluator: OperandEvaluator) -> bytes:
        """Process a single line in pass 2 and return its bytes."""
        if line.kind == LineKind.ORG:
            address = self._evaluate_origin(line)
            self._origin = address
            self._pc = address
            return b""

        if line.kind != LineKind.INSTRUCTION:
            return b""

        if line.info is None:
            # Unknown instructions keep pass 1's one-byte sizing
            self._pc += 1
            raise self._unknown_instruction(line)

        data = self._encode(line, evaluator)
        self._pc += line.info.size
        return data

    def _unknown_instruction(self, line: SourceLine) -> AddressingModeError:
        """Build the error for an instruction that did not resolve."""
        valid_modes = get_valid_modes(line.mnemonic)
        mode = None
        if is_valid_instruction(line.mnemonic):
            # Known mnemonic, unsupported operand shape
            mode = str(classify_operand(line.operand))
        return AddressingModeError(
            line.mnemonic,
            mode=mode,
            valid_modes=[str(m) for m in valid_modes],
        )

    def _record_error(self, line: SourceLine, address: int, error: AssemblerError) -> None:
        """Turn a failing line into an error line."""
        if error.token is None and line.operand:
            error.token = line.operand
        if isinstance(error, AddressingModeError):
            column = line.text.upper().find(line.mnemonic) + 1
        else:
            column = line.operand_column
        error.attach(SourceLocation(self._filename, line.line_number, column), line.text)

        self._errors.add(error)
        logger.warning(str(error).splitlines()[0])
        self._lines.append(AssembledLine(line, address, error=error))

    # =========================================================================
    # Operand Encoding
    # =========================================================================

    def _encode(self, line: SourceLine, evaluator: OperandEvaluator) -> bytes:
        """
        Encode one resolved instruction.

        Raises:
            ExpressionError: Malformed or out-of-range operand
            UndefinedSymbolError: Operand names an unknown label
            BranchRangeError: Branch target too far away
        """
        info = line.info
        operand = line.operand
        mode = info.mode
        out = bytearray([info.opcode])

        if mode == AddressingMode.INHERENT:
            pass

        elif mode == AddressingMode.IMMEDIATE:
            out.append(evaluator.evaluate_literal(operand) & 0xFF)

        elif mode == AddressingMode.IMMEDIATE16:
            value = evaluator.evaluate_literal(operand)
            if not 0 <= value <= 0xFFFF:
                raise ExpressionError(
                    f"16-bit immediate out of range: {value}", token=operand
                )
            out.extend(_word(value))

        elif mode == AddressingMode.DIRECT:
            out.append(evaluator.resolve_address(operand) & 0xFF)

        elif mode == AddressingMode.INDEXED:
            out.append(evaluator.evaluate_index_offset(operand))

        elif mode == AddressingMode.EXTENDED:
            out.extend(_word(evaluator.resolve_address(operand)))

        elif mode == AddressingMode.RELATIVE:
            target = evaluator.resolve_address(operand)
            offset = target - (self._pc + 2)
            if not -128 <= offset <= 127:
                raise BranchRangeError(operand.strip(), offset)
            out.append(offset & 0xFF)

        return bytes(out)


def _word(value: int) -> bytes:
    """Big-endian encoding of the low 16 bits of a value."""
    value &= 0xFFFF
    return bytes([(value >> 8) & 0xFF, value & 0xFF])
