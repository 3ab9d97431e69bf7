# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Parsers for the two mapping-database formats.

*Structured* databases are JSON arrays of retro-frontend style records::

    {"name": "...", "guid": "...", "source_tag": "retro_db_a",
     "input": [{"name": "b", "type": "button", "id": "0", "value": "1"}, ...]}

*Delimited* databases use the community SDL line format::

    GUID,Name,a:b0,b:b1,leftx:a0,dpleft:-a6,...,platform:Linux,

Both are converted into :class:`ControllerDefinition` objects whose binding
names come from the standard symbol table.  Names neither table knows are
dropped without comment so newer databases keep loading.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from pathlib import Path
from typing import Any, Sequence

from .models import (
    ControllerDefinition,
    InputBinding,
    InputKind,
    MappingFormatError,
    SourceTag,
)

log = logging.getLogger(__name__)


# ── Vocabularies ─────────────────────────────────────────────────────────
# Retro-frontend records name face buttons by SNES position:
# b = south, a = east, y = west, x = north.

_RETRO_BUTTON_NAMES: dict[str, str] = {
    "b": "south", "a": "east", "y": "west", "x": "north",
    "pageup": "left-shoulder", "pagedown": "right-shoulder",
    "l2": "left-trigger", "r2": "right-trigger",
    "select": "select", "start": "start",
    "l3": "left-stick-click", "r3": "right-stick-click",
    "up": "dpad-up", "down": "dpad-down",
    "left": "dpad-left", "right": "dpad-right",
    "hotkey": "guide",
}

_RETRO_AXIS_NAMES: dict[str, str] = {
    "joystick1left": "left-stick-x", "joystick1up": "left-stick-y",
    "joystick2left": "right-stick-x", "joystick2up": "right-stick-y",
    "l2": "left-trigger", "r2": "right-trigger",
    "up": "dpad-up", "down": "dpad-down",
    "left": "dpad-left", "right": "dpad-right",
}

# SDL names face buttons by Xbox label, which is positional in practice:
# a = south, b = east, x = west, y = north.
_SDL_NAMES: dict[str, str] = {
    "a": "south", "b": "east", "x": "west", "y": "north",
    "leftshoulder": "left-shoulder", "rightshoulder": "right-shoulder",
    "lefttrigger": "left-trigger", "righttrigger": "right-trigger",
    "back": "select", "start": "start",
    "leftstick": "left-stick-click", "rightstick": "right-stick-click",
    "dpup": "dpad-up", "dpdown": "dpad-down",
    "dpleft": "dpad-left", "dpright": "dpad-right",
    "guide": "guide",
    "leftx": "left-stick-x", "lefty": "left-stick-y",
    "rightx": "right-stick-x", "righty": "right-stick-y",
}

SDL_PLATFORMS: tuple[str, ...] = ("Windows", "Mac OS X", "Linux", "iOS", "Android")

_RE_SDL_BUTTON = re.compile(r"^b(\d+)$")
_RE_SDL_AXIS = re.compile(r"^([+-]?)a(\d+)(~?)$")


def current_platform() -> str:
    """Return the SDL platform name for the running interpreter."""
    if sys.platform == "win32":
        return "Windows"
    if sys.platform == "darwin":
        return "Mac OS X"
    return "Linux"


# ── Structured (JSON) records ────────────────────────────────────────────

def _coerce_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise MappingFormatError(f"{what} must be an integer, got {value!r}")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise MappingFormatError(f"{what} must be an integer, got {value!r}") from None


def _source_tag(raw: Any, default: SourceTag) -> SourceTag:
    if raw is None or raw == "":
        return default
    try:
        return SourceTag(raw)
    except ValueError:
        log.debug("Unknown source_tag %r, using %s", raw, default.value)
        return default


def _retro_binding(entry: Any) -> InputBinding | None:
    if not isinstance(entry, dict):
        raise MappingFormatError(f"input entry must be an object, got {entry!r}")

    name = entry.get("name")
    kind = entry.get("type")
    if not isinstance(name, str) or not isinstance(kind, str):
        raise MappingFormatError(f"input entry is missing name/type: {entry!r}")

    if kind == InputKind.BUTTON.value:
        symbol = _RETRO_BUTTON_NAMES.get(name)
        if symbol is None:
            return None
        return InputBinding(
            symbolic_name=symbol,
            kind=InputKind.BUTTON,
            raw_index=_coerce_int(entry.get("id"), "button id"),
        )

    if kind == InputKind.AXIS.value:
        symbol = _RETRO_AXIS_NAMES.get(name)
        if symbol is None:
            return None
        value = _coerce_int(entry.get("value", 1), "axis value")
        # Records store the direction that reads as "up"/"left"; negate it
        # so that direction comes out negative.
        return InputBinding(
            symbolic_name=symbol,
            kind=InputKind.AXIS,
            raw_index=_coerce_int(entry.get("id"), "axis id"),
            multiplier=-value,
        )

    # hat / key inputs have no representation in the standard layout
    return None


def parse_json_record(
    record: Any,
    default_tag: SourceTag = SourceTag.CUSTOM,
) -> ControllerDefinition:
    """Convert one structured record, raising :class:`MappingFormatError`."""
    if not isinstance(record, dict):
        raise MappingFormatError(f"record must be an object, got {type(record).__name__}")

    name = record.get("name")
    guid = record.get("guid")
    inputs = record.get("input")
    if not isinstance(name, str) or not isinstance(guid, str):
        raise MappingFormatError("record is missing name/guid")
    if not isinstance(inputs, list):
        raise MappingFormatError(f"record {name!r} has no input list")

    bindings: list[InputBinding] = []
    for entry in inputs:
        binding = _retro_binding(entry)
        if binding is None:
            continue
        binding.validate()
        bindings.append(binding)

    return ControllerDefinition(
        name=name.strip(),
        guid=guid.strip(),
        source_tag=_source_tag(record.get("source_tag"), default_tag),
        bindings=tuple(bindings),
    )


def parse_json_db(
    text: str,
    default_tag: SourceTag = SourceTag.CUSTOM,
) -> list[ControllerDefinition]:
    """Parse a structured database.

    Raises :class:`json.JSONDecodeError` if *text* is not JSON and
    :class:`MappingFormatError` if the top level is not an array.
    Individual bad records are logged and skipped.
    """
    raw = json.loads(text)
    if not isinstance(raw, list):
        raise MappingFormatError("structured database must be a JSON array")

    definitions: list[ControllerDefinition] = []
    for position, record in enumerate(raw):
        try:
            definitions.append(parse_json_record(record, default_tag))
        except MappingFormatError as exc:
            log.warning("Skipping structured record #%d: %s", position, exc)
    log.debug("Parsed %d of %d structured records", len(definitions), len(raw))
    return definitions


def load_json_db(
    path: str | Path,
    default_tag: SourceTag = SourceTag.CUSTOM,
) -> list[ControllerDefinition]:
    """Read and parse a structured database file."""
    return parse_json_db(Path(path).read_text(encoding="utf-8"), default_tag)


# ── Delimited (SDL) lines ────────────────────────────────────────────────

def _sdl_binding(key: str, value: str) -> InputBinding | None:
    symbol = _SDL_NAMES.get(key)
    if symbol is None:
        return None

    m = _RE_SDL_BUTTON.match(value)
    if m:
        return InputBinding(
            symbolic_name=symbol,
            kind=InputKind.BUTTON,
            raw_index=int(m.group(1)),
        )

    m = _RE_SDL_AXIS.match(value)
    if m:
        prefix, index, invert = m.groups()
        sign = {"+": 1, "-": -1}.get(prefix)
        multiplier = sign if sign is not None else 1
        if invert:
            multiplier = -multiplier
        return InputBinding(
            symbolic_name=symbol,
            kind=InputKind.AXIS,
            raw_index=int(index),
            sign=sign,
            multiplier=multiplier,
        )

    # hats (h0.1) and anything newer
    return None


def parse_sdl_line(line: str, require_platform: bool = True) -> ControllerDefinition:
    """Parse one ``GUID,Name,token:value,...,platform:X`` line.

    Raises :class:`MappingFormatError` if the line has fewer than three
    fields, or if *require_platform* is set and no recognized
    ``platform:`` token is present.
    """
    parts = line.strip().split(",")
    if len(parts) < 3:
        raise MappingFormatError(f"expected at least 3 fields, got {len(parts)}")

    guid = parts[0].strip()
    name = parts[1].strip()
    platform: str | None = None
    bindings: list[InputBinding] = []

    for token in parts[2:]:
        token = token.strip()
        if not token or ":" not in token:
            continue
        key, _, value = token.partition(":")
        key = key.strip()
        value = value.strip()
        if key == "platform":
            platform = value
            continue
        binding = _sdl_binding(key, value)
        if binding is not None:
            bindings.append(binding)

    if require_platform and platform not in SDL_PLATFORMS:
        raise MappingFormatError(f"unknown or missing platform {platform!r} for {name!r}")

    return ControllerDefinition(
        name=name,
        guid=guid,
        source_tag=SourceTag.COMMUNITY_SDL,
        bindings=tuple(bindings),
        platform=platform,
    )


def parse_sdl_db(
    text: str,
    platforms: Sequence[str] | None = None,
) -> list[ControllerDefinition]:
    """Parse a delimited database, one mapping per line.

    When *platforms* is given only those platforms are kept, ordered by
    their position in *platforms* (the first is preferred on ties).
    """
    definitions: list[ControllerDefinition] = []
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            definitions.append(parse_sdl_line(line))
        except MappingFormatError as exc:
            log.debug("Skipping mapping line %d: %s", lineno, exc)

    if platforms is not None:
        rank = {p: i for i, p in enumerate(platforms)}
        definitions = [d for d in definitions if d.platform in rank]
        definitions.sort(key=lambda d: rank[d.platform])

    log.debug("Parsed %d delimited mappings", len(definitions))
    return definitions


def load_sdl_db(
    path: str | Path,
    platforms: Sequence[str] | None = None,
) -> list[ControllerDefinition]:
    """Read and parse a delimited database file."""
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    return parse_sdl_db(text, platforms)


def preferred_platforms(first: str | None = None) -> list[str]:
    """Return all SDL platforms with *first* (default: the host) leading."""
    head = first or current_platform()
    return [head] + [p for p in SDL_PLATFORMS if p != head]
