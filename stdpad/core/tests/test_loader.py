"""Tests for the structured and delimited mapping-database parsers."""

import json
import logging

import pytest

from stdpad.core.loader import (
    current_platform,
    load_json_db,
    load_sdl_db,
    parse_json_db,
    parse_json_record,
    parse_sdl_db,
    parse_sdl_line,
    preferred_platforms,
)
from stdpad.core.models import InputKind, MappingFormatError, SourceTag


# ── Sample data ──────────────────────────────────────────────────────────

RETRO_RECORD = {
    "name": "Retro Pad",
    "guid": "03000000790000000600000010010000",
    "source_tag": "retro_db_a",
    "input": [
        {"name": "b", "type": "button", "id": "1", "value": "1"},
        {"name": "a", "type": "button", "id": "2", "value": "1"},
        {"name": "y", "type": "button", "id": "0", "value": "1"},
        {"name": "x", "type": "button", "id": "3", "value": "1"},
        {"name": "joystick1left", "type": "axis", "id": "0", "value": "-1"},
        {"name": "joystick1up", "type": "axis", "id": "1", "value": "-1"},
        {"name": "l2", "type": "axis", "id": "2", "value": "1"},
        {"name": "up", "type": "hat", "id": "0", "value": "1"},
        {"name": "turbo", "type": "button", "id": "9", "value": "1"},
    ],
}

SDL_LINE = (
    "030000005e0400008e02000014010000,Xbox 360 Controller,"
    "a:b0,b:b1,x:b2,y:b3,back:b6,guide:b8,start:b7,"
    "leftx:a0,lefty:a1,righty:a4~,lefttrigger:a2,"
    "dpleft:-a6,dpright:+a6,dpup:h0.1,misc1:b15,"
    "platform:Linux,"
)

SDL_DB = "\n".join([
    "# Community controller mappings",
    "",
    "03000000aaaa0000bbbb000000000000,Pad Win,a:b0,b:b1,platform:Windows,",
    "03000000aaaa0000bbbb000000000000,Pad Linux,a:b1,b:b0,platform:Linux,",
    "03000000cccc0000dddd000000000000,Pad Mac,a:b0,platform:Mac OS X,",
    "03000000eeee0000ffff000000000000,No Platform,a:b0,",
    "tooshort,line",
    "03000000eeee0000ffff000000000000,Odd Platform,a:b0,platform:Amiga,",
])


def _by_symbol(definition):
    return {b.symbolic_name: b for b in definition.bindings}


# ── Structured records ───────────────────────────────────────────────────

class TestParseJsonRecord:
    def test_positional_face_buttons(self):
        d = parse_json_record(RETRO_RECORD)
        bindings = _by_symbol(d)
        assert bindings["south"].raw_index == 1
        assert bindings["east"].raw_index == 2
        assert bindings["west"].raw_index == 0
        assert bindings["north"].raw_index == 3
        assert bindings["south"].kind is InputKind.BUTTON

    def test_axis_multiplier_negates_declared_value(self):
        bindings = _by_symbol(parse_json_record(RETRO_RECORD))
        assert bindings["left-stick-x"].multiplier == 1
        assert bindings["left-stick-y"].multiplier == 1
        assert bindings["left-trigger"].multiplier == -1
        assert bindings["left-trigger"].kind is InputKind.AXIS

    def test_structured_axes_are_not_sign_gated(self):
        d = parse_json_record(RETRO_RECORD)
        assert all(b.sign is None for b in d.bindings)

    def test_unknown_names_and_hats_dropped(self):
        d = parse_json_record(RETRO_RECORD)
        assert len(d.bindings) == 7
        assert "turbo" not in _by_symbol(d)

    def test_source_tag_and_identity(self):
        d = parse_json_record(RETRO_RECORD)
        assert d.source_tag is SourceTag.RETRO_DB_A
        assert d.name == "Retro Pad"
        assert d.guid == "03000000790000000600000010010000"
        assert d.platform is None

    def test_unknown_source_tag_uses_default(self):
        record = dict(RETRO_RECORD, source_tag="mystery")
        d = parse_json_record(record, default_tag=SourceTag.RETRO_DB_B)
        assert d.source_tag is SourceTag.RETRO_DB_B

    def test_missing_input_list_raises(self):
        with pytest.raises(MappingFormatError):
            parse_json_record({"name": "x", "guid": "y"})

    def test_non_integer_id_raises(self):
        record = {
            "name": "Bad", "guid": "g",
            "input": [{"name": "b", "type": "button", "id": "one"}],
        }
        with pytest.raises(MappingFormatError):
            parse_json_record(record)


class TestParseJsonDb:
    def test_bad_records_are_skipped(self, caplog):
        text = json.dumps([RETRO_RECORD, "garbage", {"name": "no guid"}, RETRO_RECORD])
        with caplog.at_level(logging.WARNING, logger="stdpad.core.loader"):
            defs = parse_json_db(text)
        assert len(defs) == 2
        assert "Skipping structured record #1" in caplog.text

    def test_top_level_must_be_array(self):
        with pytest.raises(MappingFormatError):
            parse_json_db(json.dumps(RETRO_RECORD))

    def test_invalid_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            parse_json_db("{not json")

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "db.json"
        path.write_text(json.dumps([RETRO_RECORD]), encoding="utf-8")
        defs = load_json_db(path)
        assert [d.name for d in defs] == ["Retro Pad"]


# ── Delimited lines ──────────────────────────────────────────────────────

class TestParseSdlLine:
    def test_identity_and_platform(self):
        d = parse_sdl_line(SDL_LINE)
        assert d.guid == "030000005e0400008e02000014010000"
        assert d.name == "Xbox 360 Controller"
        assert d.platform == "Linux"
        assert d.source_tag is SourceTag.COMMUNITY_SDL

    def test_buttons(self):
        bindings = _by_symbol(parse_sdl_line(SDL_LINE))
        assert bindings["south"].raw_index == 0
        assert bindings["guide"].raw_index == 8
        assert bindings["select"].raw_index == 6
        assert bindings["south"].sign is None

    def test_unsigned_axis(self):
        b = _by_symbol(parse_sdl_line(SDL_LINE))["left-stick-x"]
        assert b.kind is InputKind.AXIS
        assert b.raw_index == 0
        assert b.sign is None
        assert b.multiplier == 1

    def test_signed_axes_set_sign(self):
        bindings = _by_symbol(parse_sdl_line(SDL_LINE))
        assert bindings["dpad-left"].sign == -1
        assert bindings["dpad-left"].multiplier == -1
        assert bindings["dpad-right"].sign == 1
        assert bindings["dpad-right"].multiplier == 1

    def test_inverted_axis(self):
        b = _by_symbol(parse_sdl_line(SDL_LINE))["right-stick-y"]
        assert b.raw_index == 4
        assert b.multiplier == -1
        assert b.sign is None

    def test_hats_and_unknown_names_dropped(self):
        bindings = _by_symbol(parse_sdl_line(SDL_LINE))
        assert "dpad-up" not in bindings
        assert "misc1" not in bindings
        assert len(parse_sdl_line(SDL_LINE).bindings) == 13

    def test_too_few_fields_raises(self):
        with pytest.raises(MappingFormatError):
            parse_sdl_line("guid,name")

    def test_missing_platform_raises(self):
        with pytest.raises(MappingFormatError):
            parse_sdl_line("guid,name,a:b0,")

    def test_platform_optional_when_not_required(self):
        d = parse_sdl_line("guid,name,a:b0", require_platform=False)
        assert d.platform is None
        assert len(d.bindings) == 1


class TestParseSdlDb:
    def test_skips_bad_lines_individually(self):
        defs = parse_sdl_db(SDL_DB)
        assert [d.name for d in defs] == ["Pad Win", "Pad Linux", "Pad Mac"]

    def test_platform_filter(self):
        defs = parse_sdl_db(SDL_DB, platforms=["Linux"])
        assert [d.name for d in defs] == ["Pad Linux"]

    def test_platform_preference_orders_definitions(self):
        defs = parse_sdl_db(SDL_DB, platforms=["Linux", "Windows", "Mac OS X"])
        assert [d.name for d in defs] == ["Pad Linux", "Pad Win", "Pad Mac"]

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "gamecontrollerdb.txt"
        path.write_text(SDL_DB, encoding="utf-8")
        assert len(load_sdl_db(path)) == 3

    def test_load_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_sdl_db(tmp_path / "missing.txt")


class TestPlatforms:
    def test_current_platform_is_known(self):
        assert current_platform() in ("Windows", "Mac OS X", "Linux")

    def test_preferred_platforms_leads_with_choice(self):
        order = preferred_platforms("Windows")
        assert order[0] == "Windows"
        assert sorted(order) == sorted(["Windows", "Mac OS X", "Linux", "iOS", "Android"])
