from __future__ import annotations
import os
import sys
from pathlib import Path
from typing import Optional

from platformdirs import user_config_dir

from ..settings import APP_NAME, DATA_DIR_ENV, LEGACY_DIR_ENV


def storage_dir() -> Path:
    """Storage directory: $CONTEXT_FORGE_DATA_DIR, else the per-user config dir."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser().resolve()
    return Path(user_config_dir(APP_NAME, appauthor=False)).resolve()


def legacy_storage_dir(platform: str | None = None) -> Optional[Path]:
    """
    Where the old Electron build kept projects.json, or None.

    Only macOS ever had a distinct location; elsewhere the old and new
    directories coincide, so there is nothing to import.
    """
    override = os.environ.get(LEGACY_DIR_ENV)
    if override:
        return Path(override).expanduser().resolve()
    platform = platform or sys.platform
    if platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME / APP_NAME
    return None
