"""Package manager backends.

This module exports the package manager interface and the Homebrew backend.
"""

from brewctl.brew.base import PackageManager, PackageManagerUnavailableError
from brewctl.brew.homebrew import HomebrewManager, resolve_brew_executable

__all__ = [
    "HomebrewManager",
    "PackageManager",
    "PackageManagerUnavailableError",
    "resolve_brew_executable",
]
