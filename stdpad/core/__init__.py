# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""Mapping database, resolver, compiler and normalizer.

Pure Python with no dependencies beyond the standard library, except
:mod:`stdpad.core.config`, which locates its settings file through Qt.
"""
