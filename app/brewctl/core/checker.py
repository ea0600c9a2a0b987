"""Outdated package checker.

Refreshes the package index, asks for upgradable packages and parses the
result into an outdated set. It is a pure producer: it never writes the
repository.
"""

import json
import logging
import subprocess
from enum import Enum
from typing import Any

from brewctl.brew.base import PackageManager, PackageManagerUnavailableError
from brewctl.core.repository import PackageSetRepository
from brewctl.models.package import (
    OutdatedPackage,
    OutdatedPackageSet,
    Package,
    PackageKind,
)

logger = logging.getLogger(__name__)


class CheckFailure(Enum):
    """Why an outdated check failed."""

    UNAVAILABLE = "unavailable"
    LISTING_FAILED = "listing_failed"
    PARSE_FAILED = "parse_failed"


class CheckError(Exception):
    """Raised when an outdated check yields no usable information."""

    def __init__(self, kind: CheckFailure, message: str) -> None:
        self.kind = kind
        super().__init__(message)


class OutdatedPackageChecker:
    """Produces the current outdated set from the package manager.

    Attributes:
        refresh_index: Run ``brew update`` before listing.
    """

    def __init__(
        self,
        manager: PackageManager,
        repository: PackageSetRepository | None = None,
        refresh_index: bool = True,
    ) -> None:
        self._manager = manager
        self._repository = repository
        self.refresh_index = refresh_index

    def check(self) -> OutdatedPackageSet:
        """Run a check.

        Returns:
            The outdated set reported by the package manager.

        Raises:
            CheckError: If the listing fails or its output cannot be parsed.
        """
        try:
            if self.refresh_index:
                self._update_index()
            result = self._manager.outdated()
        except PackageManagerUnavailableError as e:
            raise CheckError(CheckFailure.UNAVAILABLE, str(e)) from e
        except (OSError, subprocess.TimeoutExpired) as e:
            raise CheckError(CheckFailure.LISTING_FAILED, f"Could not run package manager: {e}") from e

        if not result.success:
            msg = f"Listing outdated packages failed: {result.error_message()}"
            raise CheckError(CheckFailure.LISTING_FAILED, msg)

        outdated = self.parse(result.stdout)
        logger.debug("Outdated packages checker output: %s", sorted(p.name for p in outdated))
        return outdated

    def _update_index(self) -> None:
        result = self._manager.update()
        logger.debug(
            "Update result:\nStandard output: %s\nStandard error: %s",
            result.stdout,
            result.stderr,
        )
        if not result.success:
            # A stale index still yields a valid (older) listing
            logger.warning("Index refresh failed: %s", result.error_message())

    def parse(self, output: str) -> OutdatedPackageSet:
        """Parse ``brew outdated --json=v2`` output.

        Raises:
            CheckError: If the output is not the expected JSON document.
        """
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise CheckError(CheckFailure.PARSE_FAILED, f"Invalid JSON: {e}") from e
        if not isinstance(data, dict) or "formulae" not in data or "casks" not in data:
            raise CheckError(CheckFailure.PARSE_FAILED, "Unexpected outdated listing format")

        records: list[OutdatedPackage] = []
        for kind, key in ((PackageKind.FORMULA, "formulae"), (PackageKind.CASK, "casks")):
            for record in data[key]:
                outdated = self._parse_record(record, kind)
                if outdated is not None:
                    records.append(outdated)
        return frozenset(records)

    def _parse_record(self, record: dict[str, Any], kind: PackageKind) -> OutdatedPackage | None:
        name = record.get("name")
        available = record.get("current_version")
        if not name or not available:
            logger.debug("Skipping malformed outdated record: %r", record)
            return None

        package = self._known_package(name, kind)
        if package is None:
            installed_versions = record.get("installed_versions") or []
            package = Package(
                name=name,
                kind=kind,
                installed_version=installed_versions[-1] if installed_versions else None,
            )
        return OutdatedPackage(
            package=package,
            available_version=str(available),
            pinned=bool(record.get("pinned", False)),
        )

    def _known_package(self, name: str, kind: PackageKind) -> Package | None:
        if self._repository is None:
            return None
        for package in self._repository.installed:
            if package.name == name and package.kind == kind:
                return package
        return None
