"""
Program Image
=============

The emulator does not execute from a flat memory image. It walks the
assembler's output line by line, so a program is an ordered sequence of
lines, each with the address it occupies:

    index  text        address  size
    0      ""          $C000    0      (ORG line)
    1      "86 05"     $C000    2
    2      "8B 03"     $C002    2
    3      ""          $C004    0      (label only)
    4      "20 FE"     $C004    2

Addresses are derived the same way the assembler's second pass derived
them: starting from the load address and adding each line's byte count.
Lines that emit nothing (blank lines, directives, error lines) take no
space and share the address of the next code line.

Branches and jumps look the target address up with a binary search over
these addresses instead of re-summing line lengths on every transfer.
"""

import logging
import re
from bisect import bisect_left
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

# Logger for this module
logger = logging.getLogger(__name__)

_HEX_BYTE_RE = re.compile(r"[0-9A-Fa-f]{1,2}")


# =============================================================================
# Program Line
# =============================================================================

@dataclass(frozen=True)
class ProgramLine:
    """
    One line of the loaded program.

    Attributes:
        index: 0-based line position
        text: The line as loaded (trimmed)
        data: Decoded bytes; empty for blank and non-hex lines
        address: Address of the first byte
    """
    index: int
    text: str
    data: bytes
    address: int

    @property
    def size(self) -> int:
        """Number of bytes the line occupies."""
        return len(self.data)

    @property
    def is_blank(self) -> bool:
        return not self.text

    @property
    def is_code(self) -> bool:
        """True when the line decoded to at least one byte."""
        return len(self.data) > 0


def decode_line(text: str) -> bytes:
    """
    Decode a line of space-separated hex bytes.

    Args:
        text: Line text such as "86 05"

    Returns:
        The bytes, or b"" if the line is blank or any token is not a hex
        byte (assembler error lines decode to b"").
    """
    tokens = text.split()
    if not tokens or not all(_HEX_BYTE_RE.fullmatch(token) for token in tokens):
        return b""
    return bytes(int(token, 16) for token in tokens)


# =============================================================================
# Program Image
# =============================================================================

class ProgramImage:
    """
    Address-indexed sequence of program lines.

    Example:
        >>> image = ProgramImage.from_text("86 05\\n8B 03\\n20 FE", 0xC000)
        >>> [f"${line.address:04X}" for line in image]
        ['$C000', '$C002', '$C004']
        >>> image.find_line(0xC002)
        1
    """

    def __init__(self, lines: list[ProgramLine], load_address: int):
        self._lines = lines
        self._addresses = [line.address for line in lines]
        self._load_address = load_address

    @classmethod
    def from_text(
        cls,
        encoded: Union[str, Iterable[str]],
        load_address: int = 0xC000,
    ) -> "ProgramImage":
        """
        Build the image from assembler output.

        Args:
            encoded: Output lines joined with newlines, or a sequence of lines
            load_address: Address of the first line

        Returns:
            The program image
        """
        texts = encoded.split("\n") if isinstance(encoded, str) else list(encoded)

        lines = []
        address = load_address & 0xFFFF
        for index, raw in enumerate(texts):
            text = raw.strip()
            data = decode_line(text)
            lines.append(ProgramLine(index, text, data, address))
            address += len(data)

        logger.debug(
            f"Loaded {len(lines)} lines, {address - (load_address & 0xFFFF)} bytes "
            f"at ${load_address & 0xFFFF:04X}"
        )
        return cls(lines, load_address & 0xFFFF)

    @property
    def load_address(self) -> int:
        return self._load_address

    def find_line(self, address: int) -> Optional[int]:
        """
        Find the code line that starts at an address.

        Args:
            address: Target address

        Returns:
            Index of the first line with code at that address, or None if
            no instruction starts there.
        """
        index = bisect_left(self._addresses, address)
        while index < len(self._lines) and self._addresses[index] == address:
            if self._lines[index].is_code:
                return index
            index += 1
        return None

    def code_size(self) -> int:
        """Total number of bytes in the program."""
        return sum(line.size for line in self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, index: int) -> ProgramLine:
        return self._lines[index]

    def __iter__(self) -> Iterator[ProgramLine]:
        return iter(self._lines)
