"""
Operand Evaluator
=================

This module turns operand text into numbers for the second assembly pass.
Operands are either numeric literals or label references; there are no
arithmetic expressions.

Literal Forms
-------------
- Decimal: 42, -5
- Hexadecimal: $2A, 0x2A

Resolution Order
----------------
Address operands (direct, extended, relative) look the text up in the
symbol table first and fall back to a literal. Immediate and indexed
operands are literals only.

Symbols are case-insensitive: they are stored and looked up upper-cased.

Example Usage
-------------
>>> from m6800_sdk.assembler.expressions import OperandEvaluator
>>> evaluator = OperandEvaluator({"LOOP": 0xC002})
>>> evaluator.resolve_address("loop")
49154
>>> evaluator.evaluate_literal("#$1F")
31
"""

from typing import Optional

from m6800_sdk.errors import ExpressionError, UndefinedSymbolError
from m6800_sdk.assembler.lexer import INDEX_SUFFIX, is_label_token, parse_number


# =============================================================================
# Operand Evaluator
# =============================================================================

class OperandEvaluator:
    """
    Resolves operand text against a symbol table.

    The evaluator holds a reference to the symbol table built by pass 1 and
    never modifies it. Errors are raised without a source location; the code
    generator attaches the location when it catches them at the line
    boundary.

    Attributes:
        symbols: Mapping of upper-cased label names to addresses
    """

    def __init__(self, symbols: Optional[dict[str, int]] = None):
        self._symbols: dict[str, int] = symbols if symbols is not None else {}

    # =========================================================================
    # Symbol Table Access
    # =========================================================================

    def get_symbol(self, name: str) -> Optional[int]:
        """
        Look up a symbol's value.

        Args:
            name: Symbol name to look up, any case

        Returns:
            Symbol value if defined, None otherwise
        """
        return self._symbols.get(name.strip().upper())

    def has_symbol(self, name: str) -> bool:
        """Check if a symbol is defined."""
        return name.strip().upper() in self._symbols

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluate_literal(self, text: Optional[str]) -> int:
        """
        Evaluate a numeric literal, with or without an immediate '#' prefix.

        Args:
            text: The literal text

        Returns:
            The literal value (may be negative or wider than 16 bits;
            range checks belong to the caller)

        Raises:
            ExpressionError: If the text is not a literal
        """
        if text is None or not text.strip():
            raise ExpressionError("missing operand")
        body = text.strip()
        if body.startswith("#"):
            body = body[1:]
        value = parse_number(body)
        if value is None:
            raise ExpressionError(f"invalid numeric literal '{text.strip()}'", token=text.strip())
        return value

    def resolve_address(self, text: Optional[str]) -> int:
        """
        Resolve an address operand: symbol table first, else a literal.

        Args:
            text: Label name or numeric literal

        Returns:
            The resolved address

        Raises:
            UndefinedSymbolError: If the text names an unknown label
            ExpressionError: If the text is neither a label nor a literal
        """
        if text is None or not text.strip():
            raise ExpressionError("missing operand")
        name = text.strip().upper()
        if name in self._symbols:
            return self._symbols[name]

        value = parse_number(name)
        if value is not None:
            return value

        if is_label_token(name):
            raise UndefinedSymbolError(
                name,
                similar_symbols=self._find_similar_symbols(name),
            )
        raise ExpressionError(f"cannot resolve operand '{text.strip()}'", token=text.strip())

    def evaluate_index_offset(self, text: Optional[str]) -> int:
        """
        Evaluate the offset of an indexed operand ("5,X").

        An empty offset (",X") means zero.

        Raises:
            ExpressionError: If the offset is not a literal in 0..255
        """
        body = (text or "").strip().upper()
        if body.endswith(INDEX_SUFFIX):
            body = body[:-len(INDEX_SUFFIX)].strip()
        if not body:
            return 0
        value = parse_number(body)
        if value is None or not 0 <= value <= 0xFF:
            raise ExpressionError(
                f"index offset must be 0..255, got '{body}'",
                token=(text or "").strip(),
            )
        return value

    # =========================================================================
    # Hints
    # =========================================================================

    def _find_similar_symbols(self, name: str) -> list[str]:
        """
        Find symbols with similar names for error hints.

        Uses simple edit distance heuristic.
        """
        similar = []
        for sym in sorted(self._symbols):
            if abs(len(sym) - len(name)) <= 1 and _edit_distance(name, sym) <= 2:
                similar.append(sym)
        return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min(distances[j], distances[j + 1], new_distances[-1]))
        distances = new_distances
    return distances[-1]
