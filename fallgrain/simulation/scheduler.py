"""Scheduler — one full movement pass over the grid.

Rows are scanned from the bottom row up to row 1, each left to right.
Scanning bottom-up means a particle that falls lands in a row that has
already been visited, so gravity moves it at most one row per pass.
Row 0 is never dispatched.

Sideways and upward moves can land in a cell that has not been visited
yet, and the particle is then dispatched a second time in the same pass.
Pass ``single_move=True`` to skip particles that already moved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fallgrain.simulation.movement import POLICIES, Contact

if TYPE_CHECKING:
    from numpy.random import Generator

    from fallgrain.world.grid import Grid


def step_grid(
    grid: Grid,
    rng: Generator,
    *,
    single_move: bool = False,
) -> list[Contact]:
    """Advance every particle on ``grid`` by one movement step.

    Args:
        grid: Grid to update in place.
        rng: Random source handed to the gas policy.
        single_move: If True, a particle moves at most once per pass.

    Returns:
        Every move performed during the pass, in scan order.
    """
    if single_move:
        grid.reset_moved()

    contacts: list[Contact] = []
    cells = grid.cells
    width = grid.width
    for y in range(grid.height - 1, 0, -1):
        row = y * width
        for x in range(width):
            cell = cells[row + x]
            policy = POLICIES.get(cell.movement)
            if policy is None:
                continue
            if single_move and cell.moved:
                continue
            contact = policy(grid, x, y, rng)
            if contact is not None:
                contacts.append(contact)
    return contacts
