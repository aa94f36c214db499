"""Resolution of the platform application data directory."""

import os
import sys
from pathlib import Path
from typing import Optional

APP_NAME = "vaultsync"


def default_data_dir() -> Path:
    """
    Platform default location for cached session and vault files.

    Windows uses %LOCALAPPDATA%, macOS ~/Library/Application Support, and
    other systems $XDG_DATA_HOME or ~/.local/share.
    """
    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA") or os.path.expanduser("~")
        return Path(base) / APP_NAME

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    xdg = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / APP_NAME


def get_app_data_dir(override: Optional[Path] = None) -> Path:
    """
    Resolve the data directory, creating it if absent.

    Args:
        override: Explicit directory (e.g. from settings), used as is

    Returns:
        Existing directory path

    Raises:
        OSError: If the directory cannot be created
    """
    target = Path(override).expanduser() if override else default_data_dir()
    target.mkdir(parents=True, exist_ok=True)
    return target
