"""brewctl - background update checks and Brewfile transfer for Homebrew."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

try:
    __version__ = _version("brewctl")
except PackageNotFoundError:
    __version__ = "0.0.0"
