# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Apply a compiled mapping to one raw sample.

The normalizer keeps no per-device state.  Its only mutable member is the
fallback policy's warned-identity cache, which affects logging and never
the returned state.
"""

from __future__ import annotations

from .fallback import FallbackPolicy
from .models import (
    AXIS_THRESHOLD,
    BUTTON_PRESS_THRESHOLD,
    STANDARD_AXIS_COUNT,
    STANDARD_BUTTON_COUNT,
    UNMAPPED,
    ButtonState,
    CompiledMapping,
    RawButton,
    RawDeviceSample,
    StandardGamepadState,
    TargetKind,
)


def _is_pressed(raw: RawButton) -> bool:
    if isinstance(raw, bool):
        return raw
    try:
        return float(raw) > BUTTON_PRESS_THRESHOLD
    except (TypeError, ValueError):
        return False


def _button_value(raw: RawButton) -> float:
    if isinstance(raw, bool):
        return 1.0 if raw else 0.0
    try:
        return min(max(float(raw), 0.0), 1.0)
    except (TypeError, ValueError):
        return 0.0


def _axes_to_standard(raw_axes: tuple[float, ...]) -> list[float]:
    axes = [float(v) for v in raw_axes[:STANDARD_AXIS_COUNT]]
    axes.extend([0.0] * (STANDARD_AXIS_COUNT - len(axes)))
    return axes


class InputNormalizer:
    """Turn :class:`RawDeviceSample` objects into standard gamepad state."""

    def __init__(self, fallback: FallbackPolicy | None = None) -> None:
        self.fallback = fallback or FallbackPolicy()

    def normalize(
        self,
        sample: RawDeviceSample,
        mapping: CompiledMapping | None,
    ) -> StandardGamepadState:
        """Return the standard state for *sample*.

        With no *mapping*, natively recognized devices pass through as-is
        and everything else goes through the fallback layout.
        """
        if mapping is None:
            if sample.is_standard:
                return self.passthrough(sample)
            mapping = self.fallback.fallback_for(sample.device_name)
            self.fallback.note_fallback(sample, mapping)
        return self.apply(sample, mapping)

    # -- Paths -------------------------------------------------------------

    @staticmethod
    def passthrough(sample: RawDeviceSample) -> StandardGamepadState:
        """Copy already-standard data, fixing only the array lengths."""
        state = StandardGamepadState.blank()
        for i, raw in enumerate(sample.buttons[:STANDARD_BUTTON_COUNT]):
            pressed = _is_pressed(raw)
            state.buttons[i] = ButtonState(
                pressed=pressed, touched=pressed, value=_button_value(raw),
            )
        state.axes = _axes_to_standard(sample.axes)
        return state

    @staticmethod
    def apply(sample: RawDeviceSample, mapping: CompiledMapping) -> StandardGamepadState:
        state = StandardGamepadState.blank()
        buttons = state.buttons
        table = mapping.button_table

        for raw_index, raw in enumerate(sample.buttons):
            if raw_index >= len(table):
                break
            std = table[raw_index]
            if std == UNMAPPED:
                continue
            pressed = _is_pressed(raw)
            buttons[std] = ButtonState(
                pressed=pressed,
                touched=pressed,
                value=1.0 if pressed else 0.0,
            )

        for raw_index, value in enumerate(sample.axes):
            bindings = mapping.axis_table.get(raw_index)
            if not bindings:
                continue
            v = float(value)
            for binding in bindings:
                # A half-axis binding only reacts to its own direction, so
                # one raw axis can feed two opposite d-pad buttons.
                if binding.sign is not None:
                    if binding.sign < 0 and v >= 0:
                        continue
                    if binding.sign > 0 and v <= 0:
                        continue

                candidate = v * binding.multiplier
                target = binding.target
                if target.kind is TargetKind.STICK:
                    state.axes[target.index] = candidate
                elif target.kind is TargetKind.TRIGGER:
                    btn = buttons[target.index]
                    btn.value = (candidate + 1) / 2
                    btn.pressed = btn.value > AXIS_THRESHOLD
                elif target.kind is TargetKind.DPAD:
                    buttons[target.index].pressed = abs(candidate) > AXIS_THRESHOLD

        return state
