"""Data models for brewctl.

This module exports the core data structures used throughout the application.
"""

from brewctl.models.manifest import Manifest, ManifestEntry
from brewctl.models.package import (
    OutdatedPackage,
    OutdatedPackageSet,
    Package,
    PackageKind,
)

__all__ = [
    "Manifest",
    "ManifestEntry",
    "OutdatedPackage",
    "OutdatedPackageSet",
    "Package",
    "PackageKind",
]
