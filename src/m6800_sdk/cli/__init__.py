"""
M6800 SDK Command-Line Interface
================================

This package provides command-line tools for the M6800 SDK:

- **m6asm**: Two-pass assembler
- **m6sim**: Assemble-and-run step emulator

Each tool is implemented as a Click-based CLI application with
help text, --version and shared error reporting.
"""

__all__ = ["m6asm", "m6sim"]
