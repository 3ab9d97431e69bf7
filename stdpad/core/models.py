# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""Typed data models for controller mappings and normalized gamepad state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Union


STANDARD_BUTTON_COUNT = 17
STANDARD_AXIS_COUNT = 4

# Sentinel for raw buttons with no standard counterpart.  Anything outside
# 0-16 works; 100 matches what the mapping databases have always used.
UNMAPPED = 100

# Axis-synthesized buttons register as pressed above this magnitude.
AXIS_THRESHOLD = 0.11

# Analog button values reported by a native backend count as pressed above
# this value.
BUTTON_PRESS_THRESHOLD = 0.5


class MappingFormatError(ValueError):
    """A database record or raw mapping line could not be parsed."""


# ── Enumerations ─────────────────────────────────────────────────────────

class SourceTag(str, Enum):
    RETRO_DB_A = "retro_db_a"
    RETRO_DB_B = "retro_db_b"
    COMMUNITY_SDL = "community_sdl"
    CUSTOM = "custom"


class InputKind(str, Enum):
    BUTTON = "button"
    AXIS = "axis"


class StandardButton(IntEnum):
    """Standard button slots, named by physical position."""
    SOUTH = 0
    EAST = 1
    WEST = 2
    NORTH = 3
    LEFT_SHOULDER = 4
    RIGHT_SHOULDER = 5
    LEFT_TRIGGER = 6
    RIGHT_TRIGGER = 7
    SELECT = 8
    START = 9
    LEFT_STICK_CLICK = 10
    RIGHT_STICK_CLICK = 11
    DPAD_UP = 12
    DPAD_DOWN = 13
    DPAD_LEFT = 14
    DPAD_RIGHT = 15
    GUIDE = 16


class StandardAxis(IntEnum):
    LEFT_X = 0
    LEFT_Y = 1
    RIGHT_X = 2
    RIGHT_Y = 3


class TargetKind(Enum):
    STICK = "stick"        # writes a standard axis slot
    TRIGGER = "trigger"    # synthesizes an analog trigger button
    DPAD = "dpad"          # synthesizes a digital d-pad button


class AxisTarget(Enum):
    """Everything a raw axis can drive.

    ``index`` is a :class:`StandardAxis` for stick targets and a
    :class:`StandardButton` for synthesized buttons.
    """
    LEFT_STICK_X = (TargetKind.STICK, StandardAxis.LEFT_X)
    LEFT_STICK_Y = (TargetKind.STICK, StandardAxis.LEFT_Y)
    RIGHT_STICK_X = (TargetKind.STICK, StandardAxis.RIGHT_X)
    RIGHT_STICK_Y = (TargetKind.STICK, StandardAxis.RIGHT_Y)
    LEFT_TRIGGER = (TargetKind.TRIGGER, StandardButton.LEFT_TRIGGER)
    RIGHT_TRIGGER = (TargetKind.TRIGGER, StandardButton.RIGHT_TRIGGER)
    DPAD_UP = (TargetKind.DPAD, StandardButton.DPAD_UP)
    DPAD_DOWN = (TargetKind.DPAD, StandardButton.DPAD_DOWN)
    DPAD_LEFT = (TargetKind.DPAD, StandardButton.DPAD_LEFT)
    DPAD_RIGHT = (TargetKind.DPAD, StandardButton.DPAD_RIGHT)

    @property
    def kind(self) -> TargetKind:
        return self.value[0]

    @property
    def index(self) -> int:
        return int(self.value[1])


# ── Standard symbol table ────────────────────────────────────────────────
# Positional names (south/east/west/north) describe where a button sits on
# the pad, not what is printed on it.

BUTTON_SYMBOLS: dict[str, StandardButton] = {
    "south":             StandardButton.SOUTH,
    "east":              StandardButton.EAST,
    "west":              StandardButton.WEST,
    "north":             StandardButton.NORTH,
    "left-shoulder":     StandardButton.LEFT_SHOULDER,
    "right-shoulder":    StandardButton.RIGHT_SHOULDER,
    "left-trigger":      StandardButton.LEFT_TRIGGER,
    "right-trigger":     StandardButton.RIGHT_TRIGGER,
    "select":            StandardButton.SELECT,
    "start":             StandardButton.START,
    "left-stick-click":  StandardButton.LEFT_STICK_CLICK,
    "right-stick-click": StandardButton.RIGHT_STICK_CLICK,
    "dpad-up":           StandardButton.DPAD_UP,
    "dpad-down":         StandardButton.DPAD_DOWN,
    "dpad-left":         StandardButton.DPAD_LEFT,
    "dpad-right":        StandardButton.DPAD_RIGHT,
    "guide":             StandardButton.GUIDE,
}

AXIS_SYMBOLS: dict[str, AxisTarget] = {
    "left-stick-x":  AxisTarget.LEFT_STICK_X,
    "left-stick-y":  AxisTarget.LEFT_STICK_Y,
    "right-stick-x": AxisTarget.RIGHT_STICK_X,
    "right-stick-y": AxisTarget.RIGHT_STICK_Y,
    "left-trigger":  AxisTarget.LEFT_TRIGGER,
    "right-trigger": AxisTarget.RIGHT_TRIGGER,
    "dpad-up":       AxisTarget.DPAD_UP,
    "dpad-down":     AxisTarget.DPAD_DOWN,
    "dpad-left":     AxisTarget.DPAD_LEFT,
    "dpad-right":    AxisTarget.DPAD_RIGHT,
}

KNOWN_SYMBOLS: frozenset[str] = frozenset(BUTTON_SYMBOLS) | frozenset(AXIS_SYMBOLS)


# ── Mapping definitions ──────────────────────────────────────────────────

@dataclass(frozen=True)
class InputBinding:
    """One symbolic input bound to a raw button or axis.

    *sign* is only set for direction-gated axis bindings, where one raw
    axis drives two opposite digital outputs.
    """
    symbolic_name: str
    kind: InputKind
    raw_index: int
    sign: int | None = None
    multiplier: int | None = None

    def validate(self) -> None:
        if self.raw_index < 0:
            raise MappingFormatError(
                f"raw_index must be >= 0, got {self.raw_index}"
            )
        if self.sign is not None and self.sign not in (-1, 0, 1):
            raise MappingFormatError(f"sign must be -1, 0 or 1, got {self.sign}")


@dataclass(frozen=True)
class ControllerDefinition:
    """A controller's full binding list as loaded from a mapping database."""
    name: str
    guid: str
    source_tag: SourceTag
    bindings: tuple[InputBinding, ...] = ()
    platform: str | None = None

    @property
    def vendor_product(self) -> str | None:
        return vendor_product_region(self.guid)


def vendor_product_region(guid: str | None) -> str | None:
    """Return the hardware-identifying slice of *guid* (chars 8-19)."""
    if not guid or len(guid) < 20:
        return None
    return guid[8:20]


# ── Compiled mappings ────────────────────────────────────────────────────

@dataclass(frozen=True)
class AxisBinding:
    target: AxisTarget
    sign: int | None = None
    multiplier: int = 1


@dataclass(frozen=True)
class CompiledMapping:
    """Executable lookup tables built from a :class:`ControllerDefinition`.

    ``button_table[raw_index]`` is a standard button index or
    :data:`UNMAPPED`.  ``axis_table`` only has keys for raw axes that a
    binding declared, each holding its bindings in declaration order.
    """
    button_table: tuple[int, ...]
    axis_table: Mapping[int, tuple[AxisBinding, ...]]
    layout: str = ""

    def __post_init__(self) -> None:
        table = tuple(self.button_table)
        if len(table) != STANDARD_BUTTON_COUNT:
            raise ValueError(
                f"button_table must have {STANDARD_BUTTON_COUNT} entries, "
                f"got {len(table)}"
            )
        object.__setattr__(self, "button_table", table)
        object.__setattr__(
            self,
            "axis_table",
            MappingProxyType({k: tuple(v) for k, v in self.axis_table.items()}),
        )

    def __hash__(self) -> int:
        return hash((self.button_table, tuple(self.axis_table.items()), self.layout))


# ── Samples and normalized state ─────────────────────────────────────────

RawButton = Union[bool, float]


@dataclass(frozen=True)
class RawDeviceSample:
    """One poll's worth of raw input as reported by the device backend.

    *is_standard* is set when the backend recognized the hardware and
    already delivers buttons/axes in standard order.  *has_haptics* is
    passed through for consumers; it is never derived here.
    """
    device_guid: str = ""
    device_name: str = ""
    buttons: tuple[RawButton, ...] = ()
    axes: tuple[float, ...] = ()
    is_standard: bool = False
    has_haptics: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "buttons", tuple(self.buttons or ()))
        object.__setattr__(self, "axes", tuple(self.axes or ()))

    @property
    def identity(self) -> tuple[str, str]:
        return (self.device_guid, self.device_name)


@dataclass
class ButtonState:
    pressed: bool = False
    touched: bool = False
    value: float = 0.0


@dataclass
class StandardGamepadState:
    """Normalized output: always 17 buttons and 4 axes."""
    buttons: list[ButtonState] = field(
        default_factory=lambda: [ButtonState() for _ in range(STANDARD_BUTTON_COUNT)]
    )
    axes: list[float] = field(
        default_factory=lambda: [0.0] * STANDARD_AXIS_COUNT
    )

    @classmethod
    def blank(cls) -> StandardGamepadState:
        return cls()

    def button(self, which: StandardButton | int) -> ButtonState:
        return self.buttons[int(which)]

    def axis(self, which: StandardAxis | int) -> float:
        return self.axes[int(which)]
