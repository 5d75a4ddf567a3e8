"""Tests for fallgrain.materials — material types, rule table, loader."""

import json
import logging
import math
from pathlib import Path
from typing import Any

import pytest

from fallgrain.materials.loader import (
    MaterialLoadError,
    load_materials,
    material_to_record,
    parse_material,
    parse_materials,
    save_material,
)
from fallgrain.materials.material import (
    EMPTY,
    EMPTY_NAME,
    Material,
    MovementClass,
    SpreadRule,
)
from fallgrain.materials.table import RuleTable, UnknownMaterialError


def _record(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "name": "salt",
        "type": 1,
        "initial_life_time": -1.0,
        "initial_color": [240, 240, 240],
        "spread_rules": {
            "can_replace": ["water"],
            "contact_colors": {"water": [200, 200, 220]},
            "contact_sounds": {"water": "fizz.wav"},
            "spread_speed": 1,
        },
    }
    record.update(overrides)
    return record


class TestSpreadRule:
    """Tests for the SpreadRule dataclass."""

    def test_can_displace(self) -> None:
        rule = SpreadRule(can_replace=frozenset({"water"}))
        assert rule.can_displace("water")
        assert not rule.can_displace("sand")

    def test_contact_lookups(self) -> None:
        rule = SpreadRule(
            contact_colors={"water": (1, 2, 3)},
            contact_sounds={"water": "hiss.wav"},
        )
        assert rule.contact_color("water") == (1, 2, 3)
        assert rule.contact_color("sand") is None
        assert rule.contact_sound("water") == "hiss.wav"
        assert rule.contact_sound("sand") is None


class TestEmptyMaterial:
    """The empty material never moves and replaces nothing."""

    def test_empty_defaults(self) -> None:
        assert EMPTY.name == EMPTY_NAME
        assert EMPTY.is_empty
        assert EMPTY.movement is MovementClass.NONE
        assert EMPTY.rule.can_replace == frozenset()


class TestRuleTable:
    """Tests for RuleTable lookups and registration."""

    def test_new_table_knows_empty(self) -> None:
        table = RuleTable()
        assert EMPTY_NAME in table
        assert table.rules_for(EMPTY_NAME).can_replace == frozenset()

    def test_builtin_materials(self) -> None:
        table = RuleTable.builtin()
        for name in ("sand", "water", "lava", "acid", "toxic_gas", "stone"):
            assert name in table
        assert table.material("sand").movement is MovementClass.SOLID
        assert table.material("water").movement is MovementClass.LIQUID
        assert table.material("toxic_gas").movement is MovementClass.GAS
        assert table.material("stone").movement is MovementClass.NONE

    def test_names_start_with_empty(self) -> None:
        assert RuleTable.builtin().names()[0] == EMPTY_NAME

    def test_rules_for_is_total_over_builtins(self) -> None:
        table = RuleTable.builtin()
        for name in table.names():
            assert isinstance(table.rules_for(name), SpreadRule)

    def test_unknown_material_raises(self) -> None:
        table = RuleTable.builtin()
        with pytest.raises(UnknownMaterialError):
            table.rules_for("unobtainium")
        assert table.get("unobtainium") is None

    def test_unknown_material_is_key_error(self) -> None:
        assert issubclass(UnknownMaterialError, KeyError)

    def test_register_replaces(self) -> None:
        table = RuleTable.builtin()
        heavy = Material(name="sand", movement=MovementClass.LIQUID)
        table.register(heavy)
        assert table.material("sand") is heavy

    def test_register_refuses_empty_name(self) -> None:
        table = RuleTable()
        with pytest.raises(ValueError, match="reserved"):
            table.register(Material(name=EMPTY_NAME, movement=MovementClass.SOLID))

    def test_load_merges_file(self, tmp_path: Path) -> None:
        path = tmp_path / "materials.json"
        path.write_text(json.dumps([_record()]))
        table = RuleTable.builtin()
        before = len(table)
        assert table.load(path) == 1
        assert len(table) == before + 1
        assert table.material("salt").movement is MovementClass.SOLID

    def test_load_missing_file_keeps_rules(
        self,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        table = RuleTable.builtin()
        names = table.names()
        with caplog.at_level(logging.ERROR):
            assert table.load(tmp_path / "missing.json") == 0
        assert table.names() == names
        assert "Keeping current rules" in caplog.text

    def test_load_invalid_json_keeps_rules(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("[{not json")
        table = RuleTable.builtin()
        names = table.names()
        assert table.load(path) == 0
        assert table.names() == names


class TestParseMaterial:
    """Tests for single-record parsing."""

    def test_valid_record(self) -> None:
        material = parse_material(_record())
        assert material.name == "salt"
        assert material.movement is MovementClass.SOLID
        assert material.initial_life_time == -1.0
        assert material.initial_color == (240, 240, 240)
        assert material.rule.can_replace == frozenset({"water"})
        assert material.rule.contact_color("water") == (200, 200, 220)
        assert material.rule.contact_sound("water") == "fizz.wav"
        assert material.rule.spread_speed == 1

    def test_float_colour_channels_truncated_and_clamped(self) -> None:
        material = parse_material(_record(initial_color=[12.9, 300, -4]))
        assert material.initial_color == (12, 255, 0)

    @pytest.mark.parametrize(
        "field",
        ["name", "type", "initial_life_time", "initial_color", "spread_rules"],
    )
    def test_missing_field(self, field: str) -> None:
        record = _record()
        del record[field]
        with pytest.raises(MaterialLoadError, match=field):
            parse_material(record)

    def test_missing_spread_rule_field(self) -> None:
        record = _record()
        del record["spread_rules"]["spread_speed"]
        with pytest.raises(MaterialLoadError, match="spread_speed"):
            parse_material(record)

    def test_unknown_type_code(self) -> None:
        with pytest.raises(MaterialLoadError, match="movement type"):
            parse_material(_record(type=7))

    def test_bool_is_not_a_type_code(self) -> None:
        with pytest.raises(MaterialLoadError):
            parse_material(_record(type=True))

    def test_bad_colour(self) -> None:
        with pytest.raises(MaterialLoadError, match="initial_color"):
            parse_material(_record(initial_color=[1, 2]))

    @pytest.mark.parametrize(
        "color",
        [[math.nan, 0, 0], [0, math.inf, 0], [0, 0, -math.inf]],
    )
    def test_non_finite_colour(self, color: list[float]) -> None:
        with pytest.raises(MaterialLoadError, match="finite"):
            parse_material(_record(initial_color=color))

    def test_non_finite_contact_colour(self) -> None:
        record = _record()
        record["spread_rules"]["contact_colors"] = {"water": [math.inf, 0, 0]}
        with pytest.raises(MaterialLoadError, match="contact_colors"):
            parse_material(record)

    def test_huge_integer_colour_is_clamped(self) -> None:
        material = parse_material(_record(initial_color=[10**400, 0, -(10**400)]))
        assert material.initial_color == (255, 0, 0)

    @pytest.mark.parametrize("life_time", [math.nan, math.inf, -math.inf, 10**400])
    def test_non_finite_life_time(self, life_time: float) -> None:
        with pytest.raises(MaterialLoadError, match="initial_life_time"):
            parse_material(_record(initial_life_time=life_time))

    def test_reserved_name(self) -> None:
        with pytest.raises(MaterialLoadError, match="reserved"):
            parse_material(_record(name=EMPTY_NAME))

    def test_record_must_be_object(self) -> None:
        with pytest.raises(MaterialLoadError):
            parse_material(["salt"])


class TestParseMaterials:
    """Tests for whole-source parsing."""

    def test_bad_record_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        records = [_record(), _record(name="oil", type="liquid"), _record(name="ash")]
        with caplog.at_level(logging.WARNING):
            materials = parse_materials(records)
        assert [m.name for m in materials] == ["salt", "ash"]
        assert "record 1" in caplog.text

    def test_non_finite_numbers_skip_only_their_record(
        self,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        path = tmp_path / "materials.json"
        path.write_text(
            "["
            '{"name": "glow", "type": 1, "initial_life_time": -1,'
            ' "initial_color": [1e400, 0, 0], "spread_rules": {"can_replace": [],'
            ' "contact_colors": {}, "contact_sounds": {}, "spread_speed": 1}},'
            '{"name": "ember", "type": 1, "initial_life_time": NaN,'
            ' "initial_color": [NaN, 0, 0], "spread_rules": {"can_replace": [],'
            ' "contact_colors": {}, "contact_sounds": {}, "spread_speed": 1}},'
            f"{json.dumps(_record())}"
            "]",
        )
        table = RuleTable.builtin()
        with caplog.at_level(logging.WARNING):
            assert table.load(path) == 1
        assert "salt" in table
        assert "glow" not in table
        assert "ember" not in table
        assert "record 0" in caplog.text
        assert "record 1" in caplog.text

    def test_source_must_be_list(self) -> None:
        with pytest.raises(MaterialLoadError, match="list"):
            parse_materials({"name": "salt"})

    def test_load_materials_unreadable(self, tmp_path: Path) -> None:
        with pytest.raises(MaterialLoadError, match="cannot read"):
            load_materials(tmp_path / "nope.json")

    def test_shipped_rule_source_loads(self) -> None:
        path = Path(__file__).resolve().parent.parent / "config" / "materials.json"
        names = [m.name for m in load_materials(path)]
        assert names == ["salt", "oil", "smoke", "steam"]


class TestSaveMaterial:
    """Tests for writing rule-source records."""

    def test_record_round_trips_through_parser(self) -> None:
        material = parse_material(_record())
        assert parse_material(material_to_record(material)) == material

    def test_save_creates_file(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.json"
        save_material(parse_material(_record()), path)
        data = json.loads(path.read_text())
        assert isinstance(data, list)
        assert data[0]["name"] == "salt"

    def test_save_appends(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.json"
        save_material(parse_material(_record()), path)
        save_material(parse_material(_record(name="ash")), path)
        assert [m.name for m in load_materials(path)] == ["salt", "ash"]

    def test_save_replaces_non_array(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.json"
        path.write_text('{"not": "a list"}')
        save_material(parse_material(_record()), path)
        assert len(json.loads(path.read_text())) == 1
