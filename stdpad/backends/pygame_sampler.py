# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Build :class:`RawDeviceSample` objects from pygame devices.

Two kinds of device exist in pygame/SDL2:

*  ``pygame.joystick.Joystick``: raw buttons and axes in whatever order
   the hardware reports them.  These need a mapping.
*  ``pygame._sdl2.controller.Controller``: hardware SDL already knows;
   buttons and axes come out in standard order and pass straight through.

A database mapping always describes raw joystick indices, so when the
engine holds one for a controller the controller is sampled through its
underlying joystick instead.

Enumeration, hot-plug handling and the poll loop stay with the caller.
pygame is only imported when a controller is sampled.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Any

from stdpad.core.models import RawDeviceSample

if TYPE_CHECKING:
    from stdpad.core.engine import NormalizationEngine

log = logging.getLogger(__name__)
# SDL controller constants in standard button order (0-16).
_CONTROLLER_BUTTONS: tuple[str | None, ...] = (
    "CONTROLLER_BUTTON_A",
    "CONTROLLER_BUTTON_B",
    "CONTROLLER_BUTTON_X",
    "CONTROLLER_BUTTON_Y",
    "CONTROLLER_BUTTON_LEFTSHOULDER",
    "CONTROLLER_BUTTON_RIGHTSHOULDER",
    None,   # left trigger, read from an axis
    None,   # right trigger, read from an axis
    "CONTROLLER_BUTTON_BACK",
    "CONTROLLER_BUTTON_START",
    "CONTROLLER_BUTTON_LEFTSTICK",
    "CONTROLLER_BUTTON_RIGHTSTICK",
    "CONTROLLER_BUTTON_DPAD_UP",
    "CONTROLLER_BUTTON_DPAD_DOWN",
    "CONTROLLER_BUTTON_DPAD_LEFT",
    "CONTROLLER_BUTTON_DPAD_RIGHT",
    "CONTROLLER_BUTTON_GUIDE",
)

_CONTROLLER_STICKS: tuple[str, ...] = (
    "CONTROLLER_AXIS_LEFTX",
    "CONTROLLER_AXIS_LEFTY",
    "CONTROLLER_AXIS_RIGHTX",
    "CONTROLLER_AXIS_RIGHTY",
)

_SDL_AXIS_MAX = 32767.0


def _scale_axis(raw: float) -> float:
    """Scale an SDL controller axis reading into -1.0..1.0."""
    return max(-1.0, min(1.0, float(raw) / _SDL_AXIS_MAX))


def sample_from_joystick(joy: Any, has_haptics: bool = False) -> RawDeviceSample:
    """Read the current raw state of a pygame ``Joystick``."""
    buttons = tuple(bool(joy.get_button(i)) for i in range(joy.get_numbuttons()))
    axes = tuple(float(joy.get_axis(i)) for i in range(joy.get_numaxes()))
    return RawDeviceSample(
        device_guid=str(joy.get_guid() or ""),
        device_name=str(joy.get_name() or ""),
        buttons=buttons,
        axes=axes,
        is_standard=False,
        has_haptics=has_haptics,
    )


def _controller_identity(ctrl: Any) -> tuple[Any, str, str]:
    """Return ``(joystick, guid, name)``; *joystick* is None if unavailable."""
    try:
        joy = ctrl.as_joystick()
        guid = str(joy.get_guid() or "")
    except Exception:
        log.debug("Controller GUID unavailable", exc_info=True)
        joy, guid = None, ""
    return joy, guid, str(getattr(ctrl, "name", "") or "")


def sample_from_controller(
    ctrl: Any,
    has_haptics: bool = False,
    engine: NormalizationEngine | None = None,
) -> RawDeviceSample:
    """Read the current state of a pygame SDL ``Controller``.

    Triggers are reported as analog button values 0.0-1.0 in slots 6/7.
    If *engine* has a database mapping for the controller, the raw
    joystick state is returned instead so that mapping applies to the
    indices it was written for.
    """
    joy, guid, name = _controller_identity(ctrl)

    if joy is not None and engine is not None and engine.mapping_for(guid, name) is not None:
        raw = sample_from_joystick(joy, has_haptics)
        return dataclasses.replace(raw, device_guid=guid, device_name=name)

    import pygame

    triggers = {
        6: max(0.0, _scale_axis(ctrl.get_axis(pygame.CONTROLLER_AXIS_TRIGGERLEFT))),
        7: max(0.0, _scale_axis(ctrl.get_axis(pygame.CONTROLLER_AXIS_TRIGGERRIGHT))),
    }

    buttons: list[bool | float] = []
    for slot, const in enumerate(_CONTROLLER_BUTTONS):
        if const is None:
            buttons.append(triggers[slot])
        else:
            buttons.append(bool(ctrl.get_button(getattr(pygame, const))))

    axes = tuple(_scale_axis(ctrl.get_axis(getattr(pygame, n))) for n in _CONTROLLER_STICKS)

    return RawDeviceSample(
        device_guid=guid,
        device_name=name,
        buttons=tuple(buttons),
        axes=axes,
        is_standard=True,
        has_haptics=has_haptics,
    )
