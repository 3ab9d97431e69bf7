# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Built-in layouts used when no database definition matches a device.

Only two layouts exist: a PlayStation one chosen by name, and an Xbox 360
one for everything else.  Most cheap pads clone the Xbox 360 ordering, so
it is the safer guess.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict

from .models import (
    STANDARD_BUTTON_COUNT,
    UNMAPPED,
    AxisBinding,
    AxisTarget,
    CompiledMapping,
    RawDeviceSample,
    StandardButton as B,
)

log = logging.getLogger(__name__)

_PLAYSTATION_HINTS: tuple[str, ...] = ("sony", "ps4", "dualshock")


def _pad(table: list[int]) -> tuple[int, ...]:
    return tuple(int(i) for i in table) + (UNMAPPED,) * (STANDARD_BUTTON_COUNT - len(table))


_FALLBACK_AXES: dict[int, tuple[AxisBinding, ...]] = {
    0: (AxisBinding(AxisTarget.LEFT_STICK_X),),
    1: (AxisBinding(AxisTarget.LEFT_STICK_Y),),
    2: (AxisBinding(AxisTarget.LEFT_TRIGGER),),
    3: (AxisBinding(AxisTarget.RIGHT_STICK_X),),
    4: (AxisBinding(AxisTarget.RIGHT_STICK_Y),),
    5: (AxisBinding(AxisTarget.RIGHT_TRIGGER),),
}

XBOX360_LAYOUT = CompiledMapping(
    button_table=_pad([
        B.SOUTH,             # A
        B.EAST,              # B
        B.WEST,              # X
        B.NORTH,             # Y
        B.LEFT_SHOULDER,     # LB
        B.RIGHT_SHOULDER,    # RB
        B.SELECT,            # Back
        B.START,
        B.GUIDE,
        B.LEFT_STICK_CLICK,
        B.RIGHT_STICK_CLICK,
    ]),
    axis_table=_FALLBACK_AXES,
    layout="xbox360",
)

PS4_LAYOUT = CompiledMapping(
    button_table=_pad([
        B.SOUTH,             # Cross
        B.EAST,              # Circle
        B.NORTH,             # Triangle
        B.WEST,              # Square
        B.LEFT_SHOULDER,     # L1
        B.RIGHT_SHOULDER,    # R1
        UNMAPPED,            # L2 / R2 digital, triggers come from axes 2 and 5
        UNMAPPED,
        B.SELECT,            # Share
        B.START,             # Options
        B.GUIDE,             # PS
        B.LEFT_STICK_CLICK,
        B.RIGHT_STICK_CLICK,
    ]),
    axis_table=_FALLBACK_AXES,
    layout="ps4",
)


def is_playstation_name(display_name: str | None) -> bool:
    lc = str(display_name or "").lower()
    return any(hint in lc for hint in _PLAYSTATION_HINTS)


class FallbackPolicy:
    """Pick a built-in layout and warn once per unmapped hardware identity.

    The warned set is bounded: once *max_warned* identities are remembered
    the least recently seen one is forgotten.
    """

    def __init__(self, max_warned: int = 256) -> None:
        if max_warned < 1:
            raise ValueError(f"max_warned must be >= 1, got {max_warned}")
        self._max_warned = max_warned
        self._warned: OrderedDict[str, None] = OrderedDict()
        self._lock = threading.Lock()

    def fallback_for(self, display_name: str | None) -> CompiledMapping:
        if is_playstation_name(display_name):
            return PS4_LAYOUT
        return XBOX360_LAYOUT

    def note_fallback(self, sample: RawDeviceSample, layout: CompiledMapping) -> bool:
        """Log the fallback for *sample* unless already done.

        Returns ``True`` if a warning was emitted.
        """
        identity = sample.device_guid or sample.device_name
        with self._lock:
            if identity in self._warned:
                self._warned.move_to_end(identity)
                return False
            self._warned[identity] = None
            if len(self._warned) > self._max_warned:
                self._warned.popitem(last=False)
        log.warning(
            "No database mapping for %r (%s), using %s fallback",
            sample.device_name, sample.device_guid, layout.layout,
        )
        return True

    def has_warned(self, identity: str) -> bool:
        with self._lock:
            return identity in self._warned

    def warned_count(self) -> int:
        with self._lock:
            return len(self._warned)
