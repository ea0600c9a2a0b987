"""Filesystem locations used by brewctl.

Locations follow the XDG base directory layout:

    settings    $XDG_CONFIG_HOME/brewctl/settings.toml
    badge       $XDG_STATE_HOME/brewctl/badge
    Brewfiles   $XDG_CACHE_HOME/brewctl/brewfile-*/   (temporary)
"""

import os
from pathlib import Path

APP_NAME = "brewctl"

# Fallbacks below $HOME when the XDG variable is unset or empty
_XDG_DEFAULTS: dict[str, str] = {
    "XDG_CONFIG_HOME": ".config",
    "XDG_STATE_HOME": ".local/state",
    "XDG_CACHE_HOME": ".cache",
}


def _xdg_app_dir(variable: str) -> Path:
    base = os.environ.get(variable)
    root = Path(base) if base else Path.home() / _XDG_DEFAULTS[variable]
    return root / APP_NAME


def get_config_dir() -> Path:
    """Directory holding settings.toml."""
    return _xdg_app_dir("XDG_CONFIG_HOME")


def get_state_dir() -> Path:
    """Directory holding runtime state read by other programs (the badge)."""
    return _xdg_app_dir("XDG_STATE_HOME")


def get_cache_dir() -> Path:
    """Parent of the temporary Brewfile working directories."""
    return _xdg_app_dir("XDG_CACHE_HOME")


def get_settings_path() -> Path:
    return get_config_dir() / "settings.toml"


def get_badge_path() -> Path:
    return get_state_dir() / "badge"


def ensure_cache_dir() -> Path:
    """Create the cache directory if needed.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    path = get_cache_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        msg = f"Cannot create cache directory {path}: {e.strerror or e}"
        raise RuntimeError(msg) from e
    return path
