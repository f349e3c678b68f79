"""
M6800 Assembly Language Lexer
=============================

This module splits one line of M6800 assembly source into its fields and
classifies operands by their lexical shape. It works a line at a time:
every pass of the assembler re-scans each line from scratch, so nothing
here carries state between lines.

Source Line Format
------------------
    [label[:]]  mnemonic  [operand]   [; comment]

Fields are separated by whitespace. A line is split into at most three
fields; anything after the second separator belongs to the last field.

Comments
--------
Two comment styles are supported:
- Semicolon: "; comment" (anywhere on line)
- Asterisk: "* comment" (only as the first non-blank character)

Number Formats
--------------
| Format      | Prefix   | Example   | Value |
|-------------|----------|-----------|-------|
| Decimal     | (none)   | 123, -5   | 123   |
| Hexadecimal | $ or 0x  | $7F, 0x7F | 127   |

Operand Classification
----------------------
The addressing mode of an operand is inferred from its shape alone, with
the rules applied in this order (operand trimmed and upper-cased first):

1. No operand                                    -> INHERENT
2. Starts with '#'                               -> IMMEDIATE / IMMEDIATE16
3. Ends with ',X'                                -> INDEXED
4. '$'/'0x' + 4 hex digits, or 4 decimal digits  -> EXTENDED
5. Bare integer or bare identifier               -> RELATIVE
6. Anything else                                 -> DIRECT

Example
-------
>>> from m6800_sdk.assembler.lexer import split_fields, classify_operand
>>> split_fields("LOOP: DECB ; count down")
['LOOP:', 'DECB']
>>> classify_operand("#$1F")
<AddressingMode.IMMEDIATE: 1>
>>> classify_operand("$C010")
<AddressingMode.EXTENDED: 5>
"""

import re
from typing import Optional

from m6800_sdk.cpu import AddressingMode


# =============================================================================
# Lexical Patterns
# =============================================================================

COMMENT_CHAR = ";"
LINE_COMMENT_CHAR = "*"

# Index register suffix of an indexed operand ("5,X")
INDEX_SUFFIX = ",X"

_DECIMAL_RE = re.compile(r"-?\d+")
_HEX_RE = re.compile(r"-?(?:\$|0X)([0-9A-F]+)")
_EXTENDED_RE = re.compile(r"(?:\$|0X)[0-9A-F]{4}|\d{4}")
_IDENTIFIER_RE = re.compile(r"[A-Z_][A-Z0-9_]*")

# Range of values that still fit an 8-bit immediate
_BYTE_MIN = -128
_BYTE_MAX = 0xFF


# =============================================================================
# Line Scanning
# =============================================================================

def strip_comment(line: str) -> str:
    """
    Remove the comment from a source line.

    Args:
        line: Raw source line

    Returns:
        The line without its comment, trailing whitespace removed. A line
        whose first non-blank character is '*' yields an empty string.
    """
    if line.lstrip().startswith(LINE_COMMENT_CHAR):
        return ""
    pos = line.find(COMMENT_CHAR)
    if pos >= 0:
        line = line[:pos]
    return line.rstrip()


def split_fields(line: str, maxsplit: int = 2) -> list[str]:
    """
    Split a source line into at most three whitespace-separated fields.

    The comment is removed first. The last field keeps any inner
    whitespace, so "LBL LDAA 5 ,X" yields ['LBL', 'LDAA', '5 ,X'].

    Args:
        line: Raw source line
        maxsplit: Maximum number of splits (two by default)

    Returns:
        List of fields; empty for blank and comment-only lines.
    """
    text = strip_comment(line).strip()
    if not text:
        return []
    return [field.strip() for field in text.split(None, maxsplit)]


def is_label_token(token: str) -> bool:
    """Check whether a token can name a label (an optional ':' is allowed)."""
    return _IDENTIFIER_RE.fullmatch(token.rstrip(":").upper()) is not None


# =============================================================================
# Numbers
# =============================================================================

def parse_number(text: str) -> Optional[int]:
    """
    Scan a numeric literal.

    Accepts decimal ("42", "-5"), '$' hex ("$1F") and '0x' hex ("0x1F"),
    case-insensitively.

    Args:
        text: The literal text, without any '#' prefix

    Returns:
        The integer value, or None when the text is not a literal.
    """
    text = text.strip().upper()
    if _DECIMAL_RE.fullmatch(text):
        return int(text)
    match = _HEX_RE.fullmatch(text)
    if match:
        value = int(match.group(1), 16)
        return -value if text.startswith("-") else value
    return None


# =============================================================================
# Addressing-Mode Classification
# =============================================================================

def classify_operand(operand: Optional[str]) -> AddressingMode:
    """
    Infer the addressing mode of an operand from its lexical shape.

    Classification never fails; an operand that matches none of the more
    specific shapes is DIRECT. Whether the mnemonic supports the mode is
    decided later by the instruction table.

    Args:
        operand: Operand text, or None when the line has no operand

    Returns:
        The inferred AddressingMode
    """
    if operand is None:
        return AddressingMode.INHERENT
    text = operand.strip().upper()
    if not text:
        return AddressingMode.INHERENT

    if text.startswith("#"):
        body = text[1:].strip()
        value = parse_number(body)
        if value is None:
            # Symbolic immediates are sized by length
            if len(body) > 2:
                return AddressingMode.IMMEDIATE16
            return AddressingMode.IMMEDIATE
        if _BYTE_MIN <= value <= _BYTE_MAX:
            return AddressingMode.IMMEDIATE
        return AddressingMode.IMMEDIATE16

    if text.endswith(INDEX_SUFFIX):
        return AddressingMode.INDEXED

    if _EXTENDED_RE.fullmatch(text):
        return AddressingMode.EXTENDED

    if _DECIMAL_RE.fullmatch(text) or _IDENTIFIER_RE.fullmatch(text):
        return AddressingMode.RELATIVE

    return AddressingMode.DIRECT
