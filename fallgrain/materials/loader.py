"""Loader — read and write material definitions in the JSON rule format.

A rule source is a JSON array of records shaped like::

    {
      "name": "salt",
      "type": 1,
      "initial_life_time": -1.0,
      "initial_color": [240, 240, 240],
      "spread_rules": {
        "can_replace": ["water"],
        "contact_colors": {"water": [200, 200, 220]},
        "contact_sounds": {},
        "spread_speed": 1
      }
    }

Each record is validated on its own, so one malformed entry does not
prevent the rest of the file from loading.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from fallgrain.materials.material import (
    EMPTY_NAME,
    Color,
    Material,
    MovementClass,
    SpreadRule,
)

logger = logging.getLogger(__name__)


class MaterialLoadError(ValueError):
    """Raised when a rule source or one of its records is malformed."""


def _require(
    record: Mapping[str, Any],
    key: str,
    kind: type | tuple[type, ...],
) -> Any:
    if key not in record:
        msg = f"missing field {key!r}"
        raise MaterialLoadError(msg)
    value = record[key]
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) or not isinstance(value, kind):
        msg = f"field {key!r} has invalid value {value!r}"
        raise MaterialLoadError(msg)
    return value


def _parse_color(value: Any, where: str) -> Color:
    if (
        not isinstance(value, list | tuple)
        or len(value) != 3
        or not all(
            isinstance(c, int | float) and not isinstance(c, bool) for c in value
        )
    ):
        msg = f"{where} must be three numbers, got {value!r}"
        raise MaterialLoadError(msg)
    # json accepts NaN and Infinity; ints clamp below whatever their size
    if any(isinstance(c, float) and not math.isfinite(c) for c in value):
        msg = f"{where} must be finite, got {value!r}"
        raise MaterialLoadError(msg)
    r, g, b = (max(0, min(255, int(c))) for c in value)
    return (r, g, b)


def parse_material(record: Any) -> Material:
    """Build a :class:`Material` from one rule-source record.

    Args:
        record: Decoded JSON object.

    Returns:
        The parsed material.

    Raises:
        MaterialLoadError: If a field is missing or malformed, the type
            code is unknown, or the record uses the reserved empty name.
    """
    if not isinstance(record, Mapping):
        msg = f"record must be an object, got {type(record).__name__}"
        raise MaterialLoadError(msg)

    name = _require(record, "name", str)
    if not name:
        msg = "field 'name' is empty"
        raise MaterialLoadError(msg)
    if name == EMPTY_NAME:
        msg = f"material name {EMPTY_NAME!r} is reserved"
        raise MaterialLoadError(msg)

    type_code = _require(record, "type", int)
    try:
        movement = MovementClass(type_code)
    except ValueError:
        msg = f"unknown movement type {type_code!r}"
        raise MaterialLoadError(msg) from None

    raw_life_time = _require(record, "initial_life_time", (int, float))
    try:
        life_time = float(raw_life_time)
    except OverflowError:
        life_time = math.inf
    if not math.isfinite(life_time):
        msg = f"field 'initial_life_time' must be finite, got {raw_life_time!r}"
        raise MaterialLoadError(msg)
    color = _parse_color(_require(record, "initial_color", list), "initial_color")

    rules = _require(record, "spread_rules", dict)
    can_replace = _require(rules, "can_replace", list)
    if not all(isinstance(item, str) for item in can_replace):
        msg = f"can_replace must list names, got {can_replace!r}"
        raise MaterialLoadError(msg)

    contact_colors = {
        str(target): _parse_color(value, f"contact_colors[{target!r}]")
        for target, value in _require(rules, "contact_colors", dict).items()
    }
    contact_sounds = _require(rules, "contact_sounds", dict)
    if not all(isinstance(value, str) for value in contact_sounds.values()):
        msg = f"contact_sounds must map names to strings, got {contact_sounds!r}"
        raise MaterialLoadError(msg)

    return Material(
        name=name,
        movement=movement,
        initial_life_time=life_time,
        initial_color=color,
        rule=SpreadRule(
            spread_speed=_require(rules, "spread_speed", int),
            can_replace=frozenset(can_replace),
            contact_colors=contact_colors,
            contact_sounds={str(k): v for k, v in contact_sounds.items()},
        ),
    )


def parse_materials(records: Any) -> list[Material]:
    """Parse every record of a rule source, skipping the malformed ones.

    Args:
        records: Decoded JSON document; must be a list.

    Returns:
        Materials in source order.

    Raises:
        MaterialLoadError: If ``records`` is not a list.
    """
    if not isinstance(records, list):
        msg = f"rule source must be a list, got {type(records).__name__}"
        raise MaterialLoadError(msg)

    materials: list[Material] = []
    for i, record in enumerate(records):
        try:
            materials.append(parse_material(record))
        except MaterialLoadError as exc:
            logger.warning("Skipping material record %d: %s", i, exc)
    return materials


def load_materials(path: str | Path) -> list[Material]:
    """Read the rule source at ``path``.

    Raises:
        MaterialLoadError: If the file cannot be read or is not valid JSON.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        msg = f"cannot read {path}: {exc}"
        raise MaterialLoadError(msg) from exc
    except json.JSONDecodeError as exc:
        msg = f"invalid JSON in {path}: {exc}"
        raise MaterialLoadError(msg) from exc

    materials = parse_materials(data)
    logger.info("Loaded %d material(s) from %s", len(materials), path)
    return materials


def material_to_record(material: Material) -> dict[str, Any]:
    """Encode ``material`` as a rule-source record."""
    rule = material.rule
    return {
        "name": material.name,
        "type": int(material.movement),
        "initial_life_time": material.initial_life_time,
        "initial_color": list(material.initial_color),
        "spread_rules": {
            "can_replace": sorted(rule.can_replace),
            "contact_colors": {k: list(v) for k, v in rule.contact_colors.items()},
            "contact_sounds": dict(rule.contact_sounds),
            "spread_speed": rule.spread_speed,
        },
    }


def save_material(material: Material, path: str | Path) -> None:
    """Append ``material`` to the rule source at ``path``.

    A missing, unreadable or non-array file is replaced by a new array.
    Library API for scripts; the application itself never writes rules.
    """
    path = Path(path)
    existing: list[Any] = []
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, list):
            existing = data
    except (OSError, json.JSONDecodeError):
        logger.info("Starting a new rule source at %s", path)

    existing.append(material_to_record(material))
    with path.open("w", encoding="utf-8") as f:
        json.dump(existing, f, indent=2)
        f.write("\n")

