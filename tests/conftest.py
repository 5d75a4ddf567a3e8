"""Shared fixtures for the Fallgrain test suite."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import pytest
from numpy.random import Generator

from fallgrain.materials.material import Material, MovementClass, SpreadRule
from fallgrain.materials.table import RuleTable
from fallgrain.simulation.config import SimulationConfig
from fallgrain.world.grid import Grid


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def table() -> RuleTable:
    """Built-in rules plus a solid that can bore through stone."""
    rules = RuleTable.builtin()
    rules.register(
        Material(
            name="drill",
            movement=MovementClass.SOLID,
            initial_color=(200, 60, 200),
            rule=SpreadRule(
                can_replace=frozenset({"stone"}),
                contact_colors={"stone": (255, 0, 255)},
                contact_sounds={"stone": "sounds/grind.wav"},
            ),
        ),
    )
    return rules


@pytest.fixture
def small_grid() -> Grid:
    """A 3x3 grid, the smallest with a full neighbourhood around (1, 1)."""
    return Grid(width=3, height=3)


@pytest.fixture
def default_config() -> SimulationConfig:
    """Small seeded config (no YAML file needed)."""
    return SimulationConfig(
        seed=42,
        window_width=160,
        window_height=120,
        cell_size=10,
    )


@pytest.fixture
def place(table: RuleTable) -> Callable[[Grid, int, int, str], None]:
    """Return a helper that puts a fresh particle at ``(x, y)``."""

    def _place(grid: Grid, x: int, y: int, name: str) -> None:
        cell = grid.cell_at(x, y)
        assert cell is not None
        cell.fill(table.material(name))

    return _place
