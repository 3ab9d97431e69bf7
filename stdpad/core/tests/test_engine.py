"""Tests for the engine's per-device mapping cache and snapshots."""

import pytest

from stdpad.core.config import Config
from stdpad.core.engine import NormalizationEngine
from stdpad.core.loader import parse_sdl_line
from stdpad.core.models import RawDeviceSample, StandardButton
from stdpad.core.resolver import MappingDatabase


PAD_GUID = "030000005e0400008e02000014010000"
PAD_NAME = "Xbox 360 Controller"
PAD_LINE = f"{PAD_GUID},{PAD_NAME},a:b1,b:b0,leftx:a0,dpleft:-a6,dpright:+a6,platform:Linux,"


@pytest.fixture
def engine():
    return NormalizationEngine(MappingDatabase([parse_sdl_line(PAD_LINE)]))


def _count_resolves(engine, monkeypatch):
    calls = []
    real_resolve = engine.database.resolve

    def counting(guid, name):
        calls.append((guid, name))
        return real_resolve(guid, name)

    monkeypatch.setattr(engine.database, "resolve", counting)
    return calls


class TestCache:
    def test_mapping_compiled_once_per_connection(self, engine, monkeypatch):
        calls = _count_resolves(engine, monkeypatch)
        first = engine.mapping_for(PAD_GUID, PAD_NAME)
        second = engine.mapping_for(PAD_GUID, PAD_NAME)
        assert first is second
        assert len(calls) == 1

    def test_misses_are_cached(self, engine, monkeypatch):
        calls = _count_resolves(engine, monkeypatch)
        assert engine.mapping_for("ffff", "Nobody") is None
        assert engine.mapping_for("ffff", "Nobody") is None
        assert len(calls) == 1

    def test_disconnect_invalidates(self, engine, monkeypatch):
        calls = _count_resolves(engine, monkeypatch)
        engine.connect(PAD_GUID, PAD_NAME)
        assert engine.disconnect(PAD_GUID, PAD_NAME)
        assert engine.cached_identities() == []
        engine.connect(PAD_GUID, PAD_NAME)
        assert len(calls) == 2

    def test_disconnect_unknown_device(self, engine):
        assert not engine.disconnect("nope", "nope")

    def test_cache_keyed_by_guid_and_name(self, engine):
        engine.connect(PAD_GUID, PAD_NAME)
        engine.connect(PAD_GUID, "Renamed Pad")
        assert set(engine.cached_identities()) == {
            (PAD_GUID, PAD_NAME), (PAD_GUID, "Renamed Pad"),
        }


class TestNormalize:
    def test_database_mapping_applied(self, engine):
        sample = RawDeviceSample(PAD_GUID, PAD_NAME, buttons=(False, True), axes=(0.4,))
        state = engine.normalize(sample)
        assert state.button(StandardButton.SOUTH).pressed
        assert not state.button(StandardButton.EAST).pressed
        assert state.axes[0] == 0.4

    def test_dpad_from_shared_axis(self, engine):
        axes = (0, 0, 0, 0, 0, 0, -0.5)
        state = engine.normalize(RawDeviceSample(PAD_GUID, PAD_NAME, axes=axes))
        assert state.button(StandardButton.DPAD_LEFT).pressed
        assert not state.button(StandardButton.DPAD_RIGHT).pressed

    def test_unknown_device_falls_back(self, engine):
        sample = RawDeviceSample("", "Totally Unknown Pad", buttons=(True, False), axes=(0.5, -0.5))
        state = engine.normalize(sample)
        assert state.button(StandardButton.SOUTH).pressed
        assert state.axes == [0.5, -0.5, 0.0, 0.0]

    def test_resolve_and_has_definition(self, engine):
        assert engine.resolve(PAD_GUID, PAD_NAME).name == PAD_NAME
        assert engine.has_definition(PAD_GUID, "")
        assert not engine.has_definition("", "Nobody")


class TestMappingSource:
    def test_database(self, engine):
        sample = RawDeviceSample(PAD_GUID, PAD_NAME)
        assert engine.mapping_source(sample) == "database:community_sdl"

    def test_native(self, engine):
        sample = RawDeviceSample("", "Some Pad", is_standard=True)
        assert engine.mapping_source(sample) == "native"

    def test_fallback(self, engine):
        assert engine.mapping_source(RawDeviceSample("", "Sony DualShock 4")) == "fallback:ps4"
        assert engine.mapping_source(RawDeviceSample("", "Generic")) == "fallback:xbox360"


class TestSnapshot:
    def test_snapshot_fields(self, engine):
        sample = RawDeviceSample(
            PAD_GUID, PAD_NAME, buttons=(True,), axes=(0.1,), has_haptics=True,
        )
        snap = engine.snapshot(sample, index=2)
        assert snap.index == 2
        assert snap.id == PAD_NAME
        assert snap.connected
        assert snap.mapping == "standard"
        assert snap.has_haptics
        assert len(snap.buttons) == 17
        assert len(snap.axes) == 4
        assert snap.buttons[StandardButton.EAST].pressed
        assert snap.mapping_source == "database:community_sdl"
        assert snap.timestamp > 0


class TestFromConfig:
    def test_builds_database_from_config(self, tmp_path):
        db = tmp_path / "gamecontrollerdb.txt"
        db.write_text(
            PAD_LINE + "\n" + PAD_LINE.replace("platform:Linux", "platform:Windows") + "\n",
            encoding="utf-8",
        )
        cfg = Config(
            sdl_databases=[str(db)],
            preferred_platform="Windows",
            platform_filter=True,
            warn_cache_size=4,
        )
        engine = NormalizationEngine.from_config(cfg)
        assert len(engine.database) == 1
        assert engine.resolve(PAD_GUID, PAD_NAME).platform == "Windows"

    def test_missing_files_give_empty_database(self, tmp_path):
        cfg = Config(json_databases=[str(tmp_path / "none.json")])
        engine = NormalizationEngine.from_config(cfg)
        assert len(engine.database) == 0
