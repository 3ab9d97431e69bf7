# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""Controller input normalization for stdpad.

Maps raw, vendor-ordered controller input onto a fixed 17-button / 4-axis
standard layout using community mapping databases, with built-in fallback
layouts for unknown hardware.

Quick start::

    from stdpad import MappingDatabase, NormalizationEngine, RawDeviceSample

    db = MappingDatabase.from_files(sdl_paths=["gamecontrollerdb.txt"])
    engine = NormalizationEngine(db)

    sample = RawDeviceSample(
        device_guid="030000005e0400008e02000014010000",
        device_name="Xbox 360 Controller",
        buttons=(True, False),
        axes=(0.25, -0.5),
    )
    state = engine.normalize(sample)
    state.buttons[0].pressed   # south face button
"""

from __future__ import annotations

from .core.compiler import compile_definition, compile_mapping, compile_sdl_line
from .core.engine import GamepadSnapshot, NormalizationEngine
from .core.fallback import PS4_LAYOUT, XBOX360_LAYOUT, FallbackPolicy
from .core.loader import (
    load_json_db,
    load_sdl_db,
    parse_json_db,
    parse_sdl_db,
    parse_sdl_line,
)
from .core.models import (
    AXIS_THRESHOLD,
    STANDARD_AXIS_COUNT,
    STANDARD_BUTTON_COUNT,
    UNMAPPED,
    AxisBinding,
    AxisTarget,
    ButtonState,
    CompiledMapping,
    ControllerDefinition,
    InputBinding,
    InputKind,
    MappingFormatError,
    RawDeviceSample,
    SourceTag,
    StandardAxis,
    StandardButton,
    StandardGamepadState,
)
from .core.normalizer import InputNormalizer
from .core.resolver import MappingDatabase, MatchTier

__all__ = [
    # Models
    "AxisBinding",
    "AxisTarget",
    "ButtonState",
    "CompiledMapping",
    "ControllerDefinition",
    "InputBinding",
    "InputKind",
    "MappingFormatError",
    "RawDeviceSample",
    "SourceTag",
    "StandardAxis",
    "StandardButton",
    "StandardGamepadState",
    "AXIS_THRESHOLD",
    "STANDARD_AXIS_COUNT",
    "STANDARD_BUTTON_COUNT",
    "UNMAPPED",
    # Loading
    "load_json_db",
    "load_sdl_db",
    "parse_json_db",
    "parse_sdl_db",
    "parse_sdl_line",
    # Resolution / compilation
    "MappingDatabase",
    "MatchTier",
    "compile_definition",
    "compile_mapping",
    "compile_sdl_line",
    # Normalization
    "FallbackPolicy",
    "InputNormalizer",
    "PS4_LAYOUT",
    "XBOX360_LAYOUT",
    # Engine
    "GamepadSnapshot",
    "NormalizationEngine",
]
