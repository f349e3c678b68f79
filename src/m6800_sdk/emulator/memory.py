"""
Memory Subsystem for the M6800 Emulator
=======================================

Sparse 64KB address space. Only bytes that have been written are stored;
every other address reads as zero. There is no ROM, no I/O region and no
bank switching: the whole space is plain RAM.

Multi-byte values are big-endian, matching the CPU (high byte at the lower
address).
"""

from typing import Iterator


class Memory:
    """
    Sparse byte-addressable memory.

    Addresses are masked to 16 bits and values to 8 bits on every access,
    so callers can pass unmasked arithmetic results.

    Example:
        >>> mem = Memory()
        >>> mem.write(0x40, 0x105)
        >>> mem.read(0x40), mem.read(0x41)
        (5, 0)
    """

    ADDRESS_MASK = 0xFFFF

    def __init__(self):
        self._data: dict[int, int] = {}

    def read(self, address: int) -> int:
        """Read a byte; unwritten addresses read as 0."""
        return self._data.get(address & self.ADDRESS_MASK, 0)

    def write(self, address: int, value: int) -> None:
        """Write a byte (value masked to 8 bits)."""
        self._data[address & self.ADDRESS_MASK] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word."""
        return (self.read(address) << 8) | self.read(address + 1)

    def write_word(self, address: int, value: int) -> None:
        """Write a big-endian 16-bit word."""
        self.write(address, (value >> 8) & 0xFF)
        self.write(address + 1, value & 0xFF)

    def snapshot(self) -> dict[int, int]:
        """Return a copy of all written cells, ordered by address."""
        return dict(sorted(self._data.items()))

    def nonzero(self) -> dict[int, int]:
        """Return the written cells that hold a non-zero value."""
        return {addr: value for addr, value in sorted(self._data.items()) if value}

    def clear(self) -> None:
        """Forget every written cell."""
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._data))

    def __contains__(self, address: int) -> bool:
        return (address & self.ADDRESS_MASK) in self._data
