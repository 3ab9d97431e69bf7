# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""Turn controller definitions into executable lookup tables."""

from __future__ import annotations

import logging
from typing import Iterable

from .loader import parse_sdl_line
from .models import (
    AXIS_SYMBOLS,
    BUTTON_SYMBOLS,
    STANDARD_BUTTON_COUNT,
    UNMAPPED,
    AxisBinding,
    CompiledMapping,
    ControllerDefinition,
    InputBinding,
    InputKind,
)

log = logging.getLogger(__name__)


def compile_bindings(bindings: Iterable[InputBinding], layout: str = "") -> CompiledMapping:
    """Build a :class:`CompiledMapping` from *bindings* in declaration order.

    A later button binding for the same raw index replaces the earlier one.
    Axis bindings accumulate per raw axis.  Symbols the standard table does
    not know for the binding's kind are dropped.
    """
    buttons = [UNMAPPED] * STANDARD_BUTTON_COUNT
    axes: dict[int, list[AxisBinding]] = {}

    for b in bindings:
        if b.kind is InputKind.BUTTON:
            std = BUTTON_SYMBOLS.get(b.symbolic_name)
            if std is None:
                continue
            if not 0 <= b.raw_index < STANDARD_BUTTON_COUNT:
                log.debug(
                    "Raw button %d (%s) is outside the button table, dropped",
                    b.raw_index, b.symbolic_name,
                )
                continue
            buttons[b.raw_index] = int(std)

        elif b.kind is InputKind.AXIS:
            target = AXIS_SYMBOLS.get(b.symbolic_name)
            if target is None:
                continue
            multiplier = 1 if b.multiplier is None else b.multiplier
            axes.setdefault(b.raw_index, []).append(
                AxisBinding(target=target, sign=b.sign, multiplier=multiplier)
            )

    return CompiledMapping(
        button_table=tuple(buttons),
        axis_table={k: tuple(v) for k, v in axes.items()},
        layout=layout,
    )


def compile_definition(definition: ControllerDefinition) -> CompiledMapping:
    return compile_bindings(definition.bindings, layout=definition.name)


def compile_sdl_line(line: str) -> CompiledMapping:
    """Compile a raw ``GUID,Name,token:value,...`` line.

    The ``platform:`` token is optional here.  Raises
    :class:`~stdpad.core.models.MappingFormatError` for lines with fewer
    than three fields.
    """
    return compile_definition(parse_sdl_line(line, require_platform=False))


def compile_mapping(source: ControllerDefinition | str) -> CompiledMapping:
    """Compile either a loaded definition or a raw delimited mapping line."""
    if isinstance(source, str):
        return compile_sdl_line(source)
    return compile_definition(source)
