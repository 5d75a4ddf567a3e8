"""SimulationEngine — the per-frame loop.

Owns the rule table, the grid and the random source, and advances them
in the canonical frame order:

1. Apply brush input (reveal new particles)
2. Run one movement pass over the grid
3. Hand the grid to the renderer
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np
from numpy.random import Generator

from fallgrain.materials.table import RuleTable
from fallgrain.simulation.brush import InputState, paint
from fallgrain.simulation.config import SimulationConfig
from fallgrain.simulation.movement import Contact
from fallgrain.simulation.scheduler import step_grid
from fallgrain.world.grid import Grid

logger = logging.getLogger(__name__)


@dataclass
class SimulationEngine:
    """Drives the simulation forward frame by frame.

    Attributes:
        config: Loaded simulation configuration.
        table: Material rules in effect.
        grid: The cell grid.
        rng: Seeded random generator shared by the brush and gas moves.
        tick: Number of movement passes run so far.
        last_contacts: Moves performed by the most recent pass.
    """

    config: SimulationConfig
    table: RuleTable = field(init=False)
    grid: Grid = field(init=False)
    rng: Generator = field(init=False)
    tick: int = 0
    last_contacts: list[Contact] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        """Build rules, grid, and RNG from config."""
        self.rng = np.random.default_rng(self.config.seed)
        self.table = RuleTable.builtin()
        if self.config.materials_path is not None:
            self.table.load(self.config.materials_path)
        self.grid = Grid(
            width=self.config.grid_width,
            height=self.config.grid_height,
        )
        logger.info(
            "Engine ready: %dx%d grid, %d materials",
            self.grid.width,
            self.grid.height,
            len(self.table),
        )

    def selectable_materials(self) -> list[str]:
        """Return material names in the order the UI should offer them."""
        return self.table.names()

    def apply_input(self, state: InputState) -> int:
        """Paint with the brush described by ``state``.

        Returns:
            Number of reveals applied.
        """
        return paint(
            self.grid,
            self.table,
            state,
            self.rng,
            fraction=self.config.reveal_fraction,
        )

    def step(self) -> list[Contact]:
        """Run one movement pass and return the moves it made."""
        self.last_contacts = step_grid(
            self.grid,
            self.rng,
            single_move=self.config.single_move_per_frame,
        )
        self.tick += 1
        return self.last_contacts

    def frame(
        self,
        state: InputState | None = None,
        on_render: Callable[[Grid], None] | None = None,
    ) -> list[Contact]:
        """Run one full frame: input, movement, render.

        Args:
            state: Brush input for this frame, if any.
            on_render: Called with the grid once the pass has finished.

        Returns:
            The moves made by this frame's movement pass.
        """
        if state is not None:
            self.apply_input(state)
        contacts = self.step()
        if on_render is not None:
            on_render(self.grid)
        return contacts

    def run(self, ticks: int) -> None:
        """Run the simulation for a fixed number of passes.

        Args:
            ticks: Number of passes to run.
        """
        for _ in range(ticks):
            self.step()

    def clear(self) -> None:
        self.grid.clear()
