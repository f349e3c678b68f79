"""
M6800 Assembler
===============

This package provides a two-pass assembler for a Motorola 6800 instruction
subset. It converts assembly source into one output line per source line:
uppercase hex bytes, an empty line, or an `ERROR:` line. That output is what
the emulator loads.

Main Components
---------------
- **Assembler**: Main assembler class that orchestrates the assembly process
- **lexer**: Comment stripping, field splitting, number scanning and
  addressing-mode classification
- **parser**: Pure per-line parser (label/mnemonic/operand, directives)
- **CodeGenerator**: Two-pass code generation and output writers
- **OperandEvaluator**: Literal and label resolution

Assembly Process
----------------
1. **Pass 1**: Parse each line, size instructions, bind labels
2. **Pass 2**: Parse each line again, encode operands, compute branch
   offsets, and turn failing lines into error lines

Example Usage
-------------
>>> from m6800_sdk.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_string('''
...     ORG $C000
... LOOP DECB
...     BNE LOOP
... ''')
['', '', '5A', '26 FD']
>>> asm.get_symbols()
{'LOOP': 49152}

Supported Features
------------------
- Addressing modes: inherent, immediate (8/16-bit), direct, indexed,
  extended, relative
- Labels with or without a trailing colon, forward references
- ORG and END directives
- Decimal, $hex and 0xhex literals
- Listing, symbol table and object text output
"""

from m6800_sdk.assembler.assembler import Assembler, assemble, assemble_file
from m6800_sdk.assembler.lexer import classify_operand, parse_number, split_fields, strip_comment
from m6800_sdk.assembler.parser import LineKind, SourceLine, parse_line, resolve_instruction
from m6800_sdk.assembler.codegen import AssembledLine, CodeGenerator, Symbol
from m6800_sdk.assembler.expressions import OperandEvaluator

__all__ = [
    # Main interface
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "classify_operand",
    "parse_number",
    "split_fields",
    "strip_comment",
    # Parser
    "LineKind",
    "SourceLine",
    "parse_line",
    "resolve_instruction",
    # Code generation
    "AssembledLine",
    "CodeGenerator",
    "Symbol",
    # Expressions
    "OperandEvaluator",
]
