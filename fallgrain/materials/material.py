"""Material — the substances that can occupy a grid cell.

A material couples a name with a movement class and a spread rule.  The
spread rule says which other materials it may displace and which contact
effects (colour, sound) fire when it moves into them.  Materials are
immutable so a cell can hold a reference to one without ever getting out
of sync with its rule.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

Color = tuple[int, int, int]

EMPTY_NAME = "none"


class MovementClass(IntEnum):
    """Which movement policy a material follows.

    The integer values match the ``type`` codes used in rule sources.
    """

    NONE = 0
    SOLID = 1
    LIQUID = 2
    GAS = 3


@dataclass(frozen=True)
class SpreadRule:
    """Displacement and contact rules for one material.

    Attributes:
        spread_speed: Cells per frame the material would like to travel.
            Policies currently move at most one cell per activation.
        can_replace: Names of non-empty materials this one may displace.
            Empty cells are always enterable and need not be listed.
        contact_colors: Colour adopted when moving into the named material.
        contact_sounds: Sound resource to play when moving into the named
            material.
    """

    spread_speed: int = 1
    can_replace: frozenset[str] = frozenset()
    contact_colors: dict[str, Color] = field(default_factory=dict)
    contact_sounds: dict[str, str] = field(default_factory=dict)

    def can_displace(self, name: str) -> bool:
        """Return True if ``name`` is listed as replaceable."""
        return name in self.can_replace

    def contact_color(self, name: str) -> Color | None:
        return self.contact_colors.get(name)

    def contact_sound(self, name: str) -> str | None:
        return self.contact_sounds.get(name)


@dataclass(frozen=True)
class Material:
    """A named substance.

    Attributes:
        name: Unique key, also what the UI shows.
        movement: Movement class selecting the update policy.
        initial_life_time: Lifetime given to a freshly revealed particle;
            ``-1.0`` means it never decays.
        initial_color: Display colour of a freshly revealed particle.
        rule: Displacement and contact rules.
    """

    name: str
    movement: MovementClass = MovementClass.NONE
    initial_life_time: float = -1.0
    initial_color: Color = (0, 0, 0)
    rule: SpreadRule = field(default_factory=SpreadRule)

    @property
    def is_empty(self) -> bool:
        return self.name == EMPTY_NAME


EMPTY = Material(name=EMPTY_NAME)
