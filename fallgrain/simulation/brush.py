"""Brush — paints new particles onto the grid.

A small brush reveals the single cell under the cursor.  Medium and big
brushes scatter reveals inside a square around the cursor: a fixed share
of the square's cells is sampled in polar coordinates from its centre,
so strokes come out as sparse, roughly round blobs instead of filled
squares.  Samples can land on the same cell more than once.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

from fallgrain.materials.material import EMPTY_NAME
from fallgrain.materials.table import UnknownMaterialError

if TYPE_CHECKING:
    from numpy.random import Generator

    from fallgrain.materials.table import RuleTable
    from fallgrain.world.grid import Grid

logger = logging.getLogger(__name__)

DEFAULT_REVEAL_FRACTION = 0.2


class Brush(IntEnum):
    """Brush sizes; the value is the extent around the cursor in cells."""

    SMALL = 0
    MEDIUM = 8
    BIG = 16

    @property
    def label(self) -> str:
        if self is Brush.SMALL:
            return "small (1 cell)"
        return f"{self.name.lower()} (extent {self.value})"

    def next(self) -> Brush:
        """Return the following brush size, wrapping around."""
        members = list(Brush)
        return members[(members.index(self) + 1) % len(members)]


@dataclass
class InputState:
    """Per-frame input handed to the brush.

    Attributes:
        cursor_x: Cursor column in grid coordinates.
        cursor_y: Cursor row in grid coordinates.
        painting: Whether the paint button is held.
        material: Name of the material to paint.
        brush: Selected brush size.
    """

    cursor_x: int = 0
    cursor_y: int = 0
    painting: bool = False
    material: str = EMPTY_NAME
    brush: Brush = Brush.SMALL


@dataclass(frozen=True)
class Bounds:
    """An inclusive rectangle of grid cells."""

    x_start: int
    y_start: int
    x_end: int
    y_end: int

    @property
    def total(self) -> int:
        if self.x_start > self.x_end or self.y_start > self.y_end:
            return 0
        return (self.x_end - self.x_start + 1) * (self.y_end - self.y_start + 1)

    @property
    def center(self) -> tuple[int, int]:
        return (self.x_start + self.x_end) // 2, (self.y_start + self.y_end) // 2

    def clamp(self, x: int, y: int) -> tuple[int, int]:
        return (
            max(self.x_start, min(x, self.x_end)),
            max(self.y_start, min(y, self.y_end)),
        )


def brush_bounds(grid: Grid, x: int, y: int, extent: int) -> Bounds:
    """Return the square of half-size ``extent`` around ``(x, y)``, clipped."""
    return Bounds(
        x_start=max(0, x - extent),
        y_start=max(0, y - extent),
        x_end=min(grid.width - 1, x + extent),
        y_end=min(grid.height - 1, y + extent),
    )


def reveal_at(grid: Grid, table: RuleTable, x: int, y: int, name: str) -> bool:
    """Fill the cell at ``(x, y)`` with a fresh particle of ``name``.

    Args:
        grid: Grid to paint on.
        table: Rules used to resolve ``name``.
        x: Column.
        y: Row.
        name: Material to reveal; ``"none"`` erases.

    Returns:
        True if the cell was written.  Out-of-range coordinates and
        unknown materials leave the grid untouched and return False.
    """
    cell = grid.cell_at(x, y)
    if cell is None:
        return False
    try:
        material = table.material(name)
    except UnknownMaterialError:
        logger.warning("Cannot reveal unknown material %r at (%d, %d)", name, x, y)
        return False
    cell.fill(material)
    return True


def reveal_region(
    grid: Grid,
    table: RuleTable,
    bounds: Bounds,
    name: str,
    rng: Generator,
    *,
    fraction: float = DEFAULT_REVEAL_FRACTION,
) -> int:
    """Scatter reveals of ``name`` inside ``bounds``.

    Draws ``floor(bounds.total * fraction)`` points.  Each point sits at
    a uniform angle and a uniform radius (up to the centre's distance
    from the top-left edge) from the centre of ``bounds``, and is clamped
    back inside it.

    Returns:
        Number of reveals that were applied (repeats included).
    """
    if name not in table:
        logger.warning("Cannot reveal unknown material %r", name)
        return 0

    to_reveal = math.floor(bounds.total * fraction)
    cx, cy = bounds.center
    max_radius = min(cx - bounds.x_start, cy - bounds.y_start)

    revealed = 0
    for _ in range(to_reveal):
        angle = rng.uniform(0.0, 2.0 * math.pi)
        radius = rng.uniform(0.0, max_radius) if max_radius > 0 else 0.0
        x, y = bounds.clamp(
            int(cx + radius * math.cos(angle)),
            int(cy + radius * math.sin(angle)),
        )
        if reveal_at(grid, table, x, y, name):
            revealed += 1
    return revealed


def paint(
    grid: Grid,
    table: RuleTable,
    state: InputState,
    rng: Generator,
    *,
    fraction: float = DEFAULT_REVEAL_FRACTION,
) -> int:
    """Apply one frame of brush input.

    Returns:
        Number of reveals applied; 0 when the paint button is up.
    """
    if not state.painting:
        return 0
    if state.brush == Brush.SMALL:
        written = reveal_at(
            grid,
            table,
            state.cursor_x,
            state.cursor_y,
            state.material,
        )
        return int(written)
    bounds = brush_bounds(grid, state.cursor_x, state.cursor_y, int(state.brush))
    return reveal_region(grid, table, bounds, state.material, rng, fraction=fraction)
