"""Package models for installed and outdated Homebrew packages.

This module defines the core data structures for representing
formulae and casks as reported by the package manager.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class PackageKind(Enum):
    """Kind of Homebrew package. Names are unique within a kind."""

    FORMULA = "formula"
    CASK = "cask"


@dataclass(frozen=True, slots=True)
class Package:
    """An installed package, immutable for a given check cycle.

    Attributes:
        name: Package name (e.g., 'wget', 'firefox').
        kind: Formula or cask.
        installed_version: Installed version string (if known).
        installed_on: When the package was installed (if known).
    """

    name: str
    kind: PackageKind
    installed_version: str | None = field(default=None)
    installed_on: datetime | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate package data after initialization."""
        if not self.name:
            msg = "Package name cannot be empty"
            raise ValueError(msg)

    @property
    def identity(self) -> tuple[PackageKind, str]:
        """Identity key: (kind, name)."""
        return (self.kind, self.name)


@dataclass(frozen=True, slots=True, eq=False)
class OutdatedPackage:
    """An installed package with a newer version available.

    Equality and hashing use the wrapped package's identity only, so a
    version bump of an already-outdated package is the same record for
    set-difference purposes. The versions are payload.

    Attributes:
        package: The installed package.
        available_version: Newer version available upstream.
        pinned: Whether the package is pinned (formulae only).
    """

    package: Package
    available_version: str
    pinned: bool = field(default=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OutdatedPackage):
            return NotImplemented
        return self.package.identity == other.package.identity

    def __hash__(self) -> int:
        return hash(self.package.identity)

    @property
    def name(self) -> str:
        """Name of the wrapped package."""
        return self.package.name

    @property
    def identity(self) -> tuple[PackageKind, str]:
        """Identity of the wrapped package."""
        return self.package.identity

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.package.name,
            "kind": self.package.kind.value,
            "installed_version": self.package.installed_version,
            "available_version": self.available_version,
            "pinned": self.pinned,
            "installed_on": (
                self.package.installed_on.isoformat() if self.package.installed_on else None
            ),
        }


# Set of outdated packages; identity uniqueness comes from OutdatedPackage hashing.
OutdatedPackageSet = frozenset[OutdatedPackage]


def sort_by_install_date(packages: Iterable[OutdatedPackage]) -> list[OutdatedPackage]:
    """Sort outdated packages oldest install first; unknown dates go last."""

    def key(pkg: OutdatedPackage) -> tuple[int, float, str]:
        installed_on = pkg.package.installed_on
        if installed_on is None:
            return (1, 0.0, pkg.name)
        return (0, installed_on.timestamp(), pkg.name)

    return sorted(packages, key=key)
