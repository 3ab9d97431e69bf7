# Copyright (C) 2025-2026 stdpad Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Persistent configuration for stdpad.

Settings are stored as a JSON file in the OS-appropriate config directory
(``%APPDATA%/stdpad`` on Windows).  Pass an explicit path to
:meth:`Config.load` / :meth:`Config.save` to keep them somewhere else.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

from .loader import SDL_PLATFORMS, current_platform, preferred_platforms


# -- Defaults --------------------------------------------------------------

_APP_DIR_NAME = "stdpad"
_CONFIG_FILE  = "settings.json"
_LOG_FILE     = "stdpad_debug.log"
_LOG_FORMAT   = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _config_dir() -> Path:
    """Return (and create) the per-user config directory."""
    from PySide6.QtCore import QStandardPaths

    base = QStandardPaths.writableLocation(
        QStandardPaths.StandardLocation.GenericConfigLocation,
    )
    path = Path(base) / _APP_DIR_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


@dataclass
class Config:
    # Mapping databases, in load order
    json_databases: list[str] = field(default_factory=list)
    sdl_databases: list[str] = field(default_factory=list)

    # Delimited-database platform handling
    preferred_platform: str = ""        # "" = the host platform
    platform_filter: bool = False       # keep only preferred_platform lines

    # Fallback diagnostics
    warn_cache_size: int = 256

    # Debug
    debug_logging: bool = False
    debug_log_level: str = "WARNING"    # DEBUG / INFO / WARNING / ERROR

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path | None = None) -> Config:
        """Load from disk, returning defaults if the file is missing or bad.

        Unknown keys in the JSON are silently ignored so that adding or
        removing Config fields never causes a crash.
        """
        path = Path(path) if path is not None else _config_dir() / _CONFIG_FILE
        if not path.exists():
            return cls()
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            known = {f.name for f in fields(cls)}
            raw = {k: v for k, v in raw.items() if k in known}
            return cls(**raw)
        except Exception:
            return cls()

    def save(self, path: str | Path | None = None) -> Path:
        """Write current settings to disk and return the path written."""
        path = Path(path) if path is not None else _config_dir() / _CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(asdict(self), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        return path

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def sdl_platforms(self) -> list[str]:
        """Platforms to keep from delimited databases, preferred first.

        An empty or unknown ``preferred_platform`` means the host platform.
        """
        head = self.preferred_platform
        if head not in SDL_PLATFORMS:
            head = current_platform()
        if self.platform_filter:
            return [head]
        return preferred_platforms(head)

    def add_database(self, path: str | Path) -> bool:
        """Register a database file by extension.  Returns True if added."""
        normed = str(Path(path).resolve())
        target = self.json_databases if normed.lower().endswith(".json") else self.sdl_databases
        if normed in target:
            return False
        target.append(normed)
        return True


def apply_debug_logging(cfg: Config, log_dir: str | Path | None = None) -> None:
    """Configure Python logging based on the debug settings in *cfg*."""
    if cfg.debug_logging:
        level = getattr(logging, str(cfg.debug_log_level).upper(), logging.WARNING)
        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            handlers.insert(
                0, logging.FileHandler(str(log_dir / _LOG_FILE), encoding="utf-8"),
            )
        logging.basicConfig(level=level, format=_LOG_FORMAT, handlers=handlers, force=True)
    else:
        logging.basicConfig(level=logging.WARNING, force=True)
