"""RuleTable — resolves material names to their definitions.

The table always knows the empty material.  Built-in materials are
provided by :meth:`RuleTable.builtin`; more can be merged in from an
external rule source with :meth:`RuleTable.load`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from fallgrain.materials.loader import MaterialLoadError, load_materials
from fallgrain.materials.material import (
    EMPTY,
    EMPTY_NAME,
    Material,
    MovementClass,
    SpreadRule,
)

logger = logging.getLogger(__name__)


class UnknownMaterialError(KeyError):
    """Raised when a material name is not present in the table."""


_BUILTIN: tuple[Material, ...] = (
    Material(
        name="sand",
        movement=MovementClass.SOLID,
        initial_color=(194, 178, 128),
        rule=SpreadRule(
            can_replace=frozenset({"water", "toxic_gas"}),
            contact_colors={"water": (160, 140, 90)},
        ),
    ),
    Material(
        name="water",
        movement=MovementClass.LIQUID,
        initial_color=(38, 139, 210),
        rule=SpreadRule(
            spread_speed=2,
            can_replace=frozenset({"toxic_gas"}),
        ),
    ),
    Material(
        name="lava",
        movement=MovementClass.LIQUID,
        initial_color=(207, 16, 32),
        rule=SpreadRule(
            can_replace=frozenset({"water", "toxic_gas"}),
            contact_colors={"water": (90, 90, 90)},
            contact_sounds={"water": "sounds/sizzle.wav"},
        ),
    ),
    Material(
        name="acid",
        movement=MovementClass.LIQUID,
        initial_color=(130, 255, 0),
        rule=SpreadRule(
            can_replace=frozenset({"sand", "stone", "water"}),
            contact_colors={"stone": (100, 200, 0)},
        ),
    ),
    Material(
        name="toxic_gas",
        movement=MovementClass.GAS,
        initial_life_time=300.0,
        initial_color=(120, 190, 60),
    ),
    Material(
        name="stone",
        movement=MovementClass.NONE,
        initial_color=(110, 110, 110),
    ),
)


@dataclass
class RuleTable:
    """Mapping from material name to :class:`Material`.

    Attributes:
        materials: Registered materials keyed by name, in registration
            order.  Always contains the empty material.
    """

    materials: dict[str, Material] = field(default_factory=dict)

    def __post_init__(self) -> None:
        rest = {k: v for k, v in self.materials.items() if k != EMPTY_NAME}
        self.materials = {EMPTY_NAME: EMPTY, **rest}

    @classmethod
    def builtin(cls) -> RuleTable:
        """Return a table holding the built-in materials."""
        table = cls()
        for material in _BUILTIN:
            table.register(material)
        return table

    def __contains__(self, name: object) -> bool:
        return name in self.materials

    def __len__(self) -> int:
        return len(self.materials)

    def names(self) -> list[str]:
        """Return material names in registration order (empty first)."""
        return list(self.materials)

    def get(self, name: str) -> Material | None:
        return self.materials.get(name)

    def material(self, name: str) -> Material:
        """Return the material registered under ``name``.

        Raises:
            UnknownMaterialError: If ``name`` is not registered.
        """
        try:
            return self.materials[name]
        except KeyError:
            raise UnknownMaterialError(name) from None

    def rules_for(self, name: str) -> SpreadRule:
        """Return the spread rule for ``name``.

        The empty material resolves to a rule that can replace nothing.

        Raises:
            UnknownMaterialError: If ``name`` is not registered.
        """
        return self.material(name).rule

    def register(self, material: Material) -> None:
        """Add ``material``, replacing any entry with the same name.

        Raises:
            ValueError: If ``material`` tries to redefine the empty material.
        """
        if material.name == EMPTY_NAME and material is not EMPTY:
            msg = f"material name {EMPTY_NAME!r} is reserved"
            raise ValueError(msg)
        self.materials[material.name] = material

    def extend(self, materials: Iterable[Material]) -> int:
        count = 0
        for material in materials:
            self.register(material)
            count += 1
        return count

    def load(self, path: str | Path) -> int:
        """Merge materials from the rule source at ``path``.

        A source that cannot be read or parsed is logged and ignored; the
        table keeps whatever it already holds.

        Args:
            path: JSON rule source.

        Returns:
            Number of materials registered from the source.
        """
        try:
            materials = load_materials(path)
        except MaterialLoadError as exc:
            logger.error("Keeping current rules, could not load %s: %s", path, exc)
            return 0
        return self.extend(materials)
