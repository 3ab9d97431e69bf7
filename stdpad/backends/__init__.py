# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""Adapters that turn device-backend state into :class:`RawDeviceSample`.

Each backend module imports its library lazily so the core stays usable
without it.
"""

from .pygame_sampler import sample_from_controller, sample_from_joystick

__all__ = ["sample_from_controller", "sample_from_joystick"]
