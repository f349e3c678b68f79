"""
M6800 Assembler - Main Interface
================================

This module provides the main Assembler class, which is the primary interface
for assembling M6800 source code. It feeds source lines to the two-pass code
generator and exposes the per-line output, the symbol table and the writers
for listing, symbol and object text files.

Example Usage
-------------
>>> from m6800_sdk.assembler import Assembler
>>>
>>> # Create assembler instance
>>> asm = Assembler()
>>>
>>> # Assemble from string
>>> asm.assemble_string('''
...     ORG $C000
... START LDAA #5
...     ADDA #3
... ''')
['', '', '86 05', '8B 03']
>>>
>>> # Emulator input
>>> text = asm.get_object_text()

Command-Line Usage
------------------
The assembler can also be invoked from the command line:

    $ m6asm program.asm -o program.obj -l program.lst -s program.sym

Options:
    -o, --output FILE      Output object text file
    -l, --listing FILE     Generate listing file
    -s, --symbols FILE     Generate symbol file
    --origin ADDR          Origin used until the source sets one with ORG
    -v, --verbose          Verbose output
"""

from pathlib import Path
from typing import Iterable

from m6800_sdk.assembler.codegen import AssembledLine, CodeGenerator


class Assembler:
    """
    Main M6800 assembler class.

    Every assemble_* call runs both passes from scratch, so one instance
    can assemble several sources in turn; the accessors always describe
    the most recent run.

    Assembly errors never raise. Failing lines are reported as `ERROR:`
    output lines and collected for get_error_report().

    Attributes:
        verbose: If True, print progress messages
        origin: Location counter used until the source sets one with ORG
    """

    def __init__(self, verbose: bool = False, origin: int = 0x0000):
        """
        Initialize the assembler.

        Args:
            verbose: Enable verbose output
            origin: Initial origin (default $0000)
        """
        self._verbose = verbose
        self._origin = origin
        self._codegen = CodeGenerator(origin=origin)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_lines(self, lines: Iterable[str], filename: str = "<input>") -> list[str]:
        """
        Assemble an ordered sequence of source lines.

        Args:
            lines: Source lines without line terminators
            filename: Virtual filename for error messages

        Returns:
            One output string per source line: "", hex bytes, or an
            `ERROR:` line
        """
        lines = list(lines)
        self._codegen = CodeGenerator(origin=self._origin, filename=filename)

        if self._verbose:
            print(f"Assembling {len(lines)} lines from {filename}...")

        output = self._codegen.generate(lines)

        if self._verbose:
            print(f"Generated {len(self._codegen.get_code())} bytes of code")
            if self._codegen.has_errors():
                print(f"{len(self._codegen.get_errors())} lines failed to assemble")

        return output

    def assemble_string(self, source: str, filename: str = "<input>") -> list[str]:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            One output string per source line
        """
        return self.assemble_lines(source.splitlines(), filename)

    def assemble_file(self, filepath: str | Path) -> list[str]:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            One output string per source line

        Raises:
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        source = filepath.read_text()
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_output_lines(self) -> list[str]:
        """
        Get the per-line output of the last run.

        Returns:
            One output string per source line
        """
        return self._codegen.get_output_lines()

    def get_assembled_lines(self) -> list[AssembledLine]:
        """Get the per-line results (address, bytes, error) of the last run."""
        return self._codegen.get_assembled_lines()

    def get_object_text(self) -> str:
        """
        Get the output lines joined with newlines.

        This is the input format of Emulator.load().
        """
        return self._codegen.get_object_text()

    def get_code(self) -> bytes:
        """
        Get the generated object code.

        Returns:
            Object code as bytes, error lines skipped
        """
        return self._codegen.get_code()

    def get_origin(self) -> int:
        """
        Get the origin address.

        Returns:
            Active origin after the run (last ORG value)
        """
        return self._codegen.get_origin()

    def get_symbols(self) -> dict[str, int]:
        """
        Get the symbol table.

        Returns:
            Dictionary mapping symbol names to values
        """
        return self._codegen.get_symbols()

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            Assembly listing with addresses, code bytes, and source
        """
        return self._codegen.get_listing()

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write listing file.

        Args:
            filepath: Output file path
        """
        self._codegen.write_listing(filepath)

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Args:
            filepath: Output file path
        """
        self._codegen.write_symbols(filepath)

    def write_object(self, filepath: str | Path) -> None:
        """
        Write the object text file (one output line per source line).

        Args:
            filepath: Output file path
        """
        self._codegen.write_object(filepath)

    def has_errors(self) -> bool:
        """
        Check if assembly produced errors.

        Returns:
            True if errors occurred
        """
        return self._codegen.has_errors()

    def get_warnings(self) -> list[str]:
        """Get the warnings (duplicate labels) of the last run."""
        return self._codegen.get_warnings()

    def get_error_report(self) -> str:
        """
        Get formatted error report.

        Returns:
            Error report string
        """
        return self._codegen.get_error_report()


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> list[str]:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        filename: Virtual filename for errors

    Returns:
        One output string per source line
    """
    asm = Assembler()
    return asm.assemble_string(source, filename)


def assemble_file(filepath: str | Path) -> list[str]:
    """
    Convenience function to assemble a file.

    Args:
        filepath: Path to source file

    Returns:
        One output string per source line

    Raises:
        FileNotFoundError: If source file not found
    """
    asm = Assembler()
    return asm.assemble_file(filepath)
