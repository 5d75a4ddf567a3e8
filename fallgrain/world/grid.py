"""Grid — the dense cell store the simulation runs on.

Cells live in one flat row-major list addressed by ``y * width + x``.
All coordinate lookups are bounds-checked and report an out-of-range
position as ``None`` instead of raising, so movement rules can probe
neighbours at the edges without special cases.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from fallgrain.world.cell import Cell


@dataclass
class Grid:
    """A fixed-size 2D grid of cells.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        cells: Flat list of ``width * height`` cells in row-major order.
    """

    width: int
    height: int
    cells: list[Cell] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Allocate every cell up front, all empty."""
        if self.width <= 0 or self.height <= 0:
            msg = f"grid dimensions must be positive, got {self.width}x{self.height}"
            raise ValueError(msg)
        self.cells = [Cell() for _ in range(self.width * self.height)]

    def __len__(self) -> int:
        return len(self.cells)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def index_of(self, x: int, y: int) -> int | None:
        """Return the flat index of ``(x, y)``, or None if out of range."""
        if not self.in_bounds(x, y):
            return None
        return y * self.width + x

    def cell_at(self, x: int, y: int) -> Cell | None:
        """Return the cell at ``(x, y)``, or None if out of range.

        Args:
            x: Column index.
            y: Row index.
        """
        index = self.index_of(x, y)
        if index is None:
            return None
        return self.cells[index]

    def swap(self, a: int, b: int) -> None:
        """Exchange the full contents of the cells at flat indices ``a`` and ``b``."""
        cells = self.cells
        cells[a], cells[b] = cells[b], cells[a]

    def cells_of(self) -> Iterator[tuple[int, int, Cell]]:
        """Yield ``(x, y, cell)`` for every cell, row by row."""
        width = self.width
        for index, cell in enumerate(self.cells):
            y, x = divmod(index, width)
            yield x, y, cell

    def counts(self) -> Counter[str]:
        """Return how many particles of each material are on the grid.

        Empty cells are not counted.
        """
        return Counter(cell.name for cell in self.cells if not cell.is_empty)

    def clear(self) -> None:
        for cell in self.cells:
            cell.clear()

    def reset_moved(self) -> None:
        for cell in self.cells:
            cell.moved = False

    def names(self) -> list[list[str]]:
        """Return material names as ``rows[y][x]``."""
        w = self.width
        return [
            [cell.name for cell in self.cells[y * w : (y + 1) * w]]
            for y in range(self.height)
        ]

    def color_array(self) -> NDArray[np.uint8]:
        """Return display colours as a ``(height, width, 3)`` array."""
        colours = np.array([cell.color for cell in self.cells], dtype=np.uint8)
        return colours.reshape(self.height, self.width, 3)
