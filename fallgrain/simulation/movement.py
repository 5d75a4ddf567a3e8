"""Movement policies — one update rule per movement class.

Every policy looks only at the immediate neighbours of the cell it is
given and performs at most one swap.  A neighbour is *viable* when it is
empty or when the mover's spread rule lists the neighbour's material as
replaceable; the target's own rule is never consulted.

Y grows downward: "below" is ``y + 1``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fallgrain.materials.material import MovementClass

if TYPE_CHECKING:
    from numpy.random import Generator

    from fallgrain.world.cell import Cell
    from fallgrain.world.grid import Grid

Offset = tuple[int, int]

_BELOW: Offset = (0, 1)
_BELOW_LEFT: Offset = (-1, 1)
_BELOW_RIGHT: Offset = (1, 1)
_LEFT: Offset = (-1, 0)
_RIGHT: Offset = (1, 0)
_ABOVE: Offset = (0, -1)

SOLID_ORDER: tuple[Offset, ...] = (_BELOW, _BELOW_LEFT, _BELOW_RIGHT)
LIQUID_ORDER: tuple[Offset, ...] = (*SOLID_ORDER, _LEFT, _RIGHT)
GAS_NEIGHBOURS: tuple[Offset, ...] = (_ABOVE, _LEFT, _RIGHT, _BELOW)


@dataclass(frozen=True)
class Contact:
    """A completed move of one particle into a neighbouring cell.

    Attributes:
        mover: Material that moved.
        target: Material that occupied the destination before the move
            (``"none"`` for an empty cell).
        source: ``(x, y)`` the mover left.
        dest: ``(x, y)`` the mover entered.
        sound: Sound resource the mover's rule attaches to ``target``.
    """

    mover: str
    target: str
    source: tuple[int, int]
    dest: tuple[int, int]
    sound: str | None = None


def is_viable(mover: Cell, target: Cell) -> bool:
    """Return True if ``mover`` may move into ``target``."""
    return target.is_empty or mover.rule.can_displace(target.name)


def _move(grid: Grid, x: int, y: int, nx: int, ny: int) -> Contact:
    src = y * grid.width + x
    dst = ny * grid.width + nx
    mover = grid.cells[src]
    target_name = grid.cells[dst].name

    colour = mover.rule.contact_color(target_name)
    if colour is not None:
        mover.color = colour
    mover.moved = True
    grid.swap(src, dst)

    return Contact(
        mover=mover.name,
        target=target_name,
        source=(x, y),
        dest=(nx, ny),
        sound=mover.rule.contact_sound(target_name),
    )


def _try_in_order(
    grid: Grid,
    x: int,
    y: int,
    offsets: Sequence[Offset],
) -> Contact | None:
    mover = grid.cell_at(x, y)
    if mover is None:
        return None
    for dx, dy in offsets:
        nx, ny = x + dx, y + dy
        target = grid.cell_at(nx, ny)
        if target is None:
            continue  # grid edge
        if is_viable(mover, target):
            return _move(grid, x, y, nx, ny)
    return None


def update_solid(grid: Grid, x: int, y: int) -> Contact | None:
    """Let a solid fall straight down, else slide down-left, else down-right.

    Args:
        grid: Grid to mutate.
        x: Column of the solid particle.
        y: Row of the solid particle.

    Returns:
        The move performed, or None if the particle stayed put.
    """
    return _try_in_order(grid, x, y, SOLID_ORDER)


def update_liquid(grid: Grid, x: int, y: int) -> Contact | None:
    """Move a liquid like a solid, flowing left then right when blocked below.

    Args:
        grid: Grid to mutate.
        x: Column of the liquid particle.
        y: Row of the liquid particle.

    Returns:
        The move performed, or None if the particle stayed put.
    """
    return _try_in_order(grid, x, y, LIQUID_ORDER)


def update_gas(grid: Grid, x: int, y: int, rng: Generator) -> Contact | None:
    """Move a gas into a random viable orthogonal neighbour.

    The four neighbours (above, left, right, below) are visited in an
    order drawn uniformly from ``rng``; the first viable one wins.  A
    fixed order would make the gas drift in one direction.

    Args:
        grid: Grid to mutate.
        x: Column of the gas particle.
        y: Row of the gas particle.
        rng: Random source deciding the visiting order.

    Returns:
        The move performed, or None if every neighbour was blocked.
    """
    order = [GAS_NEIGHBOURS[int(i)] for i in rng.permutation(len(GAS_NEIGHBOURS))]
    return _try_in_order(grid, x, y, order)


Policy = Callable[["Grid", int, int, "Generator"], "Contact | None"]


def _solid(grid: Grid, x: int, y: int, rng: Generator) -> Contact | None:
    return update_solid(grid, x, y)


def _liquid(grid: Grid, x: int, y: int, rng: Generator) -> Contact | None:
    return update_liquid(grid, x, y)


POLICIES: dict[MovementClass, Policy] = {
    MovementClass.SOLID: _solid,
    MovementClass.LIQUID: _liquid,
    MovementClass.GAS: update_gas,
}
