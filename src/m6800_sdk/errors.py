"""
M6800 SDK Error Hierarchy
=========================

This module defines the exception hierarchy for the whole SDK. All
exceptions inherit from M6800Error, so callers can catch every SDK error
with a single except clause.

Exception Hierarchy
-------------------
M6800Error (base)
├── AssemblerError (assembler-related)
│   ├── UndefinedSymbolError - reference to an undefined label
│   ├── AddressingModeError - unknown mnemonic/addressing-mode combination
│   ├── BranchRangeError - relative branch target too far
│   ├── ExpressionError - malformed or out-of-range operand value
│   └── DirectiveError - unparsable ORG address
└── EmulatorError (emulator API misuse)

Error Policy
------------
Assembler errors are line-local. The code generator raises them while
encoding a single line and catches them at the line boundary, so one bad
line never aborts the rest of the assembly. The emulator never raises while
stepping; unknown opcodes and the runaway-execution guard are reported as
trace entries instead. EmulatorError is only raised for API misuse.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# Prefix of every object-code line that reports a failed source line
ERROR_MARKER = "ERROR:"


# =============================================================================
# Base Exception Class
# =============================================================================

class M6800Error(Exception):
    """
    Base exception for all M6800 SDK errors.

    Example:
        try:
            assembler.assemble_file("program.asm")
        except M6800Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(M6800Error):
    """
    Base exception for all assembler-related errors.

    Besides the formatted message, every assembler error knows how to
    render itself as a single object-code line (see `line_text`), which is
    what the assembler stores in place of the bytes of a failing line.

    Attributes:
        message: The error description
        token: The offending source token (operand, mnemonic or address)
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    # Short description used in the one-line rendering
    summary = "assembly error"

    def __init__(
        self,
        message: str,
        token: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.token = token
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            loop.asm:4:6: error: undefined symbol 'LOPP'
                BNE LOPP
                    ^
            hint: did you mean 'LOOP'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def attach(self, location: SourceLocation, source_line: str) -> "AssemblerError":
        """
        Attach source context to an error raised without it.

        The operand evaluator does not know which line it is working on,
        so the code generator fills in the location when it catches the
        error at the line boundary.
        """
        if self.location is None:
            self.location = location
        if self.source_line is None:
            self.source_line = source_line
        self.args = (self._format_message(),)
        return self

    @property
    def line_text(self) -> str:
        """One-line rendering used as the object-code output of the line."""
        if self.token:
            return f"{ERROR_MARKER} {self.summary} -> {self.token}"
        return f"{ERROR_MARKER} {self.summary}"


class UndefinedSymbolError(AssemblerError):
    """
    Reference to an undefined label.

    Raised during the second pass when an operand names a label that
    pass 1 never bound. Similar names are offered as a hint.
    """
    summary = "cannot resolve operand"

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        hint = None
        if self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            token=symbol,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class AddressingModeError(AssemblerError):
    """
    Unknown mnemonic, or a mnemonic used with a mode it does not support.

    Example:
        STAA #$41  ; STAA has no immediate form
    """
    summary = "invalid instruction"

    def __init__(
        self,
        mnemonic: str,
        mode: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        valid_modes: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.mode = mode
        self.valid_modes = valid_modes or []

        hint = None
        if self.valid_modes:
            hint = f"{mnemonic} supports: {', '.join(self.valid_modes)}"

        if mode and self.valid_modes:
            message = f"'{mnemonic}' does not support {mode} addressing mode"
        else:
            message = f"unknown instruction '{mnemonic}'"

        super().__init__(
            message,
            token=mnemonic,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class BranchRangeError(AssemblerError):
    """
    Relative branch target is out of range.

    Branches encode a signed 8-bit displacement measured from the address
    after the two-byte branch instruction, so the reachable range is
    -128 to +127 bytes. Use JMP for targets further away.
    """
    summary = "branch out of range"

    def __init__(
        self,
        target: str,
        offset: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.target = target
        self.offset = offset

        direction = "forward" if offset > 0 else "backward"
        hint = (
            f"branch offset is {offset}, but range is -128 to +127; "
            f"consider using JMP for {direction} references"
        )

        super().__init__(
            f"branch target '{target}' is out of range (offset: {offset})",
            token=target,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class ExpressionError(AssemblerError):
    """
    Malformed or out-of-range operand value.

    Raised for literals that do not parse (e.g. `$G0`) and for values that
    do not fit the field they are encoded into.
    """
    summary = "cannot resolve operand"


class DirectiveError(AssemblerError):
    """
    Error in an assembler directive.

    Raised when ORG has a missing or unparsable address.
    """
    summary = "cannot resolve ORG"


# =============================================================================
# Emulator Exceptions
# =============================================================================

class EmulatorError(M6800Error):
    """
    Emulator API misuse, such as stepping before a program is loaded.

    Runtime faults of the emulated program (unknown opcodes, runaway
    loops) are never raised; they are reported as trace entries.
    """
    pass


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects errors and warnings for batch reporting.

    The assembler keeps going after a failing line, so every error of a
    run ends up here and can be reported together.

    Example:
        collector = ErrorCollector()
        collector.add(UndefinedSymbolError("LOOP"))
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self):
        self.errors: list[AssemblerError] = []
        self.warnings: list[str] = []

    def add(self, error: AssemblerError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def warning_count(self) -> int:
        """Return the number of collected warnings."""
        return len(self.warnings)

    def report(self) -> str:
        """
        Format all errors and warnings for display.

        Returns:
            Formatted string with all errors, warnings and a summary line
        """
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  {warning}")

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()
