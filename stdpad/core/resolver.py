# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Tiered lookup of the best :class:`ControllerDefinition` for a device.

Resolution order (the first tier with any candidate wins):

1. exact GUID **and** name
2. exact GUID
3. exact name
4. vendor/product region of the GUID (characters 8-19), which stays the
   same across buses and connection-specific bytes

Within a tier the definition with the most bindings is returned; ties go
to whichever was loaded first.
"""

from __future__ import annotations

import json
import logging
from enum import IntEnum
from pathlib import Path
from typing import Iterable, Sequence

from .loader import load_json_db, load_sdl_db
from .models import ControllerDefinition, MappingFormatError, vendor_product_region

log = logging.getLogger(__name__)


class MatchTier(IntEnum):
    GUID_AND_NAME = 1
    GUID = 2
    NAME = 3
    VENDOR_PRODUCT = 4


def _richest(candidates: list[ControllerDefinition]) -> ControllerDefinition:
    best = candidates[0]
    for c in candidates[1:]:
        if len(c.bindings) > len(best.bindings):
            best = c
    return best


class MappingDatabase:
    """Read-only collection of controller definitions with lookup indexes."""

    def __init__(self, definitions: Iterable[ControllerDefinition] = ()) -> None:
        self._definitions: tuple[ControllerDefinition, ...] = tuple(definitions)
        self._by_guid_name: dict[tuple[str, str], list[ControllerDefinition]] = {}
        self._by_guid: dict[str, list[ControllerDefinition]] = {}
        self._by_name: dict[str, list[ControllerDefinition]] = {}
        self._by_vendor_product: dict[str, list[ControllerDefinition]] = {}

        for d in self._definitions:
            self._by_guid_name.setdefault((d.guid, d.name), []).append(d)
            self._by_guid.setdefault(d.guid, []).append(d)
            self._by_name.setdefault(d.name, []).append(d)
            vp = d.vendor_product
            if vp is not None:
                self._by_vendor_product.setdefault(vp, []).append(d)

    # -- Construction ------------------------------------------------------

    @classmethod
    def from_files(
        cls,
        json_paths: Sequence[str | Path] = (),
        sdl_paths: Sequence[str | Path] = (),
        platforms: Sequence[str] | None = None,
    ) -> MappingDatabase:
        """Load every database file, skipping those that cannot be read.

        Structured databases come first in load order, so they win ties
        against delimited ones.
        """
        definitions: list[ControllerDefinition] = []
        for path in json_paths:
            try:
                loaded = load_json_db(path)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError, MappingFormatError) as exc:
                log.warning("Could not load structured database %s: %s", path, exc)
                continue
            log.info("Loaded %d definitions from %s", len(loaded), path)
            definitions.extend(loaded)
        for path in sdl_paths:
            try:
                loaded = load_sdl_db(path, platforms)
            except OSError as exc:
                log.warning("Could not load mapping database %s: %s", path, exc)
                continue
            log.info("Loaded %d definitions from %s", len(loaded), path)
            definitions.extend(loaded)
        return cls(definitions)

    # -- Queries -----------------------------------------------------------

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self):
        return iter(self._definitions)

    def resolve(self, guid: str | None, name: str | None) -> ControllerDefinition | None:
        """Return the best definition for a device, or ``None``."""
        return self._lookup(guid, name)[0]

    def resolve_tier(self, guid: str | None, name: str | None) -> MatchTier | None:
        """Return which tier :meth:`resolve` would match on."""
        return self._lookup(guid, name)[1]

    def has_definition(self, guid: str | None, name: str | None) -> bool:
        return self._lookup(guid, name)[0] is not None

    def _lookup(
        self, guid: str | None, name: str | None,
    ) -> tuple[ControllerDefinition | None, MatchTier | None]:
        guid = guid or ""
        name = ("" if name is None else str(name)).strip()

        candidates = self._by_guid_name.get((guid, name))
        if candidates:
            return _richest(candidates), MatchTier.GUID_AND_NAME

        candidates = self._by_guid.get(guid) if guid else None
        if candidates:
            return _richest(candidates), MatchTier.GUID

        candidates = self._by_name.get(name) if name else None
        if candidates:
            return _richest(candidates), MatchTier.NAME

        vp = vendor_product_region(guid)
        candidates = self._by_vendor_product.get(vp) if vp else None
        if candidates:
            best = _richest(candidates)
            log.debug(
                "Vendor/product match for %s: using mapping from %s",
                guid, best.guid,
            )
            return best, MatchTier.VENDOR_PRODUCT

        return None, None
