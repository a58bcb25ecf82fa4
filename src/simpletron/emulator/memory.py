"""
Word Store for the Simpletron
=============================

Simpletron memory is a fixed array of textual cells. A cell holds either
a 4-digit instruction word or a decimal value of any length; code and data
are not distinguished, so a program can read (and overwrite) its own
instructions.

Layout after loading a compiled program of N instructions::

    00 .. N-1    instruction words
    N  .. N+k-1  relocated variable values
    N+k .. 99    "0000"

Unwritten cells hold ``"0000"``.

Copyright (c) 2025 Simpletron SDK Contributors
"""

import logging
from typing import Iterable

from simpletron.errors import MemoryAddressError, ProgramLoadError

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_SIZE = 100
EMPTY_WORD = "0000"


class Memory:
    """
    Fixed-size word store.

    Attributes:
        size: Number of addressable cells
    """

    def __init__(self, size: int = DEFAULT_MEMORY_SIZE):
        """
        Initialize memory with every cell empty.

        Args:
            size: Number of cells (must be positive)
        """
        if size <= 0:
            raise ValueError(f"memory size must be positive, got {size}")
        self.size = size
        self._cells: list[str] = [EMPTY_WORD] * size

    def is_address_valid(self, address: int) -> bool:
        return 0 <= address < self.size

    def _check(self, address: int) -> None:
        if not self.is_address_valid(address):
            raise MemoryAddressError(address, self.size)

    def read(self, address: int) -> str:
        """
        Read a cell.

        Raises:
            MemoryAddressError: If address is outside 0..size-1
        """
        self._check(address)
        return self._cells[address]

    def write(self, address: int, value: str) -> None:
        """
        Write a cell.

        Raises:
            MemoryAddressError: If address is outside 0..size-1
        """
        self._check(address)
        self._cells[address] = value

    def clear(self) -> None:
        """Reset every cell to the empty word."""
        self._cells = [EMPTY_WORD] * self.size

    def load(self, words: Iterable[str]) -> int:
        """
        Clear memory and store words from address 0.

        Args:
            words: Program words in address order

        Returns:
            Number of words loaded

        Raises:
            ProgramLoadError: If there are more words than cells, or a
                              word is empty
        """
        program = [str(word).strip() for word in words]
        if len(program) > self.size:
            raise ProgramLoadError(
                f"program has {len(program)} words but memory holds only {self.size}"
            )
        for address, word in enumerate(program):
            if not word:
                raise ProgramLoadError(f"empty word at address {address:02d}")

        self.clear()
        self._cells[:len(program)] = program
        logger.debug(f"Loaded {len(program)} words")
        return len(program)

    def snapshot(self) -> tuple[str, ...]:
        """Immutable copy of every cell."""
        return tuple(self._cells)

    def format_table(self, columns: int = 10) -> str:
        """Render memory as a grid, one row per ``columns`` cells."""
        return format_cells(self._cells, columns)

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, address: int) -> str:
        return self.read(address)

    def __setitem__(self, address: int, value: str) -> None:
        self.write(address, value)


def format_cells(cells, columns: int = 10) -> str:
    """
    Render cells as a grid with address headings.

    Example output (first rows)::

        -------------------------------------------------------------------
                0      1      2  ...
            0   2005   3006   2107 ...
           10   0000   0000   0000 ...
        -------------------------------------------------------------------
    """
    cells = list(cells)
    rule = "\t" + "-" * 67
    lines = [rule, "\t" + "\t".join(f"{c:>5}" for c in range(columns))]
    for start in range(0, len(cells), columns):
        row = cells[start:start + columns]
        lines.append(f"{start:>5}\t" + "\t".join(f"{cell:>5}" for cell in row))
    lines.append(rule)
    return "\n".join(lines)
