"""Cell — a single slot in the simulation grid.

A cell always holds exactly one material; an unoccupied cell holds the
empty material.  The material reference carries the movement class and
spread rule, so changing what a cell contains always goes through
:meth:`Cell.fill` and the three can never disagree.
"""

from __future__ import annotations

from dataclasses import dataclass

from fallgrain.materials.material import (
    EMPTY,
    Color,
    Material,
    MovementClass,
    SpreadRule,
)


@dataclass
class Cell:
    """A single grid slot.

    Attributes:
        material: Material currently occupying the cell.
        life_time: Remaining lifetime; ``-1.0`` means infinite.  Carried
            with the particle but not consumed by any movement rule.
        color: Current display colour; starts at the material's initial
            colour and may change on contact.
        moved: Set when the particle moved during the current pass.
    """

    material: Material = EMPTY
    life_time: float = -1.0
    color: Color = (0, 0, 0)
    moved: bool = False

    @property
    def name(self) -> str:
        return self.material.name

    @property
    def movement(self) -> MovementClass:
        return self.material.movement

    @property
    def rule(self) -> SpreadRule:
        return self.material.rule

    @property
    def is_empty(self) -> bool:
        """Return True if no particle occupies this cell."""
        return self.material.is_empty

    def fill(self, material: Material) -> None:
        """Replace the particle in this cell with a fresh ``material`` one."""
        self.material = material
        self.life_time = material.initial_life_time
        self.color = material.initial_color
        self.moved = False

    def clear(self) -> None:
        self.fill(EMPTY)
