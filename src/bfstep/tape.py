from __future__ import annotations

from typing import List

import numpy as np

from .config import DEFAULT_TAPE_SIZE


class Tape:
    """Growable row of 8-bit wrapping cells.

    Growth is monotonic: the backing array is only ever extended with zeros.
    """

    def __init__(self, size: int = DEFAULT_TAPE_SIZE):
        self.cells = np.zeros(max(1, size), dtype=np.uint8)

    def __len__(self) -> int:
        return len(self.cells)

    def __getitem__(self, index: int) -> int:
        return int(self.cells[index])

    def __setitem__(self, index: int, value: int) -> None:
        self.ensure(index)
        self.cells[index] = np.uint8(value & 0xFF)

    def ensure(self, index: int) -> None:
        """Make `index` addressable, at least doubling the tape when it grows."""
        size = len(self.cells)
        if index < size:
            return
        new_size = max(index + 1, size * 2)
        self.cells = np.concatenate((self.cells, np.zeros(new_size - size, dtype=np.uint8)))

    def increment(self, index: int) -> None:
        self.cells[index] = np.uint8((int(self.cells[index]) + 1) & 0xFF)

    def decrement(self, index: int) -> None:
        self.cells[index] = np.uint8((int(self.cells[index]) - 1) & 0xFF)

    def window(self, start: int, stop: int) -> List[int]:
        start = max(0, start)
        stop = min(len(self.cells), stop)
        return [int(v) for v in self.cells[start:stop]]

    def tolist(self) -> List[int]:
        return [int(v) for v in self.cells]
