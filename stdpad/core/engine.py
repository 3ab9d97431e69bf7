# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Entry point tying the resolver, compiler and normalizer together.

The engine owns one piece of per-device state: a compiled mapping per
``(guid, name)`` identity.  Entries live until the device backend reports
a disconnect, so a device is resolved and compiled once per connection
rather than on every poll.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .compiler import compile_definition
from .fallback import FallbackPolicy
from .normalizer import InputNormalizer
from .resolver import MappingDatabase
from .models import (
    ButtonState,
    CompiledMapping,
    ControllerDefinition,
    RawDeviceSample,
    StandardGamepadState,
)

if TYPE_CHECKING:
    from .config import Config

log = logging.getLogger(__name__)

Identity = tuple[str, str]


@dataclass
class GamepadSnapshot:
    """Standard state plus the metadata a consumer usually wants with it."""
    index: int
    id: str
    connected: bool = True
    timestamp: float = 0.0
    mapping: str = "standard"
    buttons: list[ButtonState] = field(default_factory=list)
    axes: list[float] = field(default_factory=list)
    has_haptics: bool = False
    mapping_source: str = ""


class NormalizationEngine:
    """Resolve, compile, cache and apply mappings for connected devices."""

    def __init__(
        self,
        database: MappingDatabase | None = None,
        normalizer: InputNormalizer | None = None,
    ) -> None:
        self.database = database if database is not None else MappingDatabase()
        self.normalizer = normalizer or InputNormalizer()
        # identity -> (definition, compiled); both None for a miss
        self._cache: dict[
            Identity, tuple[ControllerDefinition | None, CompiledMapping | None]
        ] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: Config) -> NormalizationEngine:
        database = MappingDatabase.from_files(
            json_paths=cfg.json_databases,
            sdl_paths=cfg.sdl_databases,
            platforms=cfg.sdl_platforms(),
        )
        log.info("Mapping database ready: %d definitions", len(database))
        fallback = FallbackPolicy(max_warned=cfg.warn_cache_size)
        return cls(database, InputNormalizer(fallback))

    # -- Connection lifecycle ----------------------------------------------

    def connect(self, guid: str, name: str) -> CompiledMapping | None:
        """Resolve and cache the mapping for a newly connected device."""
        return self.mapping_for(guid, name)

    def disconnect(self, guid: str, name: str) -> bool:
        """Forget the cached mapping.  Returns ``True`` if one was cached."""
        with self._lock:
            removed = self._cache.pop((guid, name), None) is not None
        if removed:
            log.debug("Dropped cached mapping for %r (%s)", name, guid)
        return removed

    def cached_identities(self) -> list[Identity]:
        with self._lock:
            return list(self._cache)

    # -- Lookup ------------------------------------------------------------

    def _entry(
        self, guid: str, name: str,
    ) -> tuple[ControllerDefinition | None, CompiledMapping | None]:
        key = (guid, name)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        definition = self.database.resolve(guid, name)
        compiled = compile_definition(definition) if definition is not None else None
        entry = (definition, compiled)
        with self._lock:
            entry = self._cache.setdefault(key, entry)
        if definition is not None:
            log.debug(
                "Compiled mapping for %r (%s) from %r [%s]",
                name, guid, definition.name, definition.source_tag.value,
            )
        return entry

    def mapping_for(self, guid: str, name: str) -> CompiledMapping | None:
        return self._entry(guid, name)[1]

    def resolve(self, guid: str, name: str) -> ControllerDefinition | None:
        return self.database.resolve(guid, name)

    def has_definition(self, guid: str, name: str) -> bool:
        return self.database.has_definition(guid, name)

    # -- Normalization -----------------------------------------------------

    def normalize(self, sample: RawDeviceSample) -> StandardGamepadState:
        mapping = self.mapping_for(sample.device_guid, sample.device_name)
        return self.normalizer.normalize(sample, mapping)

    def mapping_source(self, sample: RawDeviceSample) -> str:
        """Describe where :meth:`normalize` takes its layout from."""
        definition, _ = self._entry(sample.device_guid, sample.device_name)
        if definition is not None:
            return f"database:{definition.source_tag.value}"
        if sample.is_standard:
            return "native"
        layout = self.normalizer.fallback.fallback_for(sample.device_name)
        return f"fallback:{layout.layout}"

    def snapshot(self, sample: RawDeviceSample, index: int = 0) -> GamepadSnapshot:
        state = self.normalize(sample)
        return GamepadSnapshot(
            index=index,
            id=sample.device_name,
            timestamp=time.perf_counter() * 1000.0,
            buttons=state.buttons,
            axes=state.axes,
            has_haptics=sample.has_haptics,
            mapping_source=self.mapping_source(sample),
        )
