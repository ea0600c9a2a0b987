"""Installed-package listing and repository resync.

The installed set is always re-fetched from the package manager, never
inferred from a manifest.
"""

import json
import logging
import subprocess
from datetime import UTC, datetime
from typing import Any

from brewctl.brew.base import PackageManager, PackageManagerUnavailableError
from brewctl.core.repository import PackageSetRepository
from brewctl.models.package import Package, PackageKind

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """Raised when the installed package list cannot be obtained."""


def _timestamp(value: Any) -> datetime | None:
    if isinstance(value, int | float) and value > 0:
        return datetime.fromtimestamp(value, tz=UTC)
    return None


def _parse_formula(record: dict[str, Any]) -> Package | None:
    name = record.get("name")
    if not name:
        return None
    installs = record.get("installed") or []
    latest = installs[-1] if installs else {}
    return Package(
        name=name,
        kind=PackageKind.FORMULA,
        installed_version=latest.get("version"),
        installed_on=_timestamp(latest.get("time")),
    )


def _parse_cask(record: dict[str, Any]) -> Package | None:
    name = record.get("token") or record.get("name")
    if not name or isinstance(name, list):
        return None
    installed = record.get("installed")
    return Package(
        name=name,
        kind=PackageKind.CASK,
        installed_version=installed if isinstance(installed, str) else None,
        installed_on=_timestamp(record.get("installed_time")),
    )


def parse_installed(output: str) -> list[Package]:
    """Parse ``brew info --json=v2 --installed`` output.

    Raises:
        InventoryError: If the output is not the expected JSON document.
    """
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise InventoryError(f"Invalid JSON from package manager: {e}") from e
    if not isinstance(data, dict) or "formulae" not in data or "casks" not in data:
        raise InventoryError("Unexpected installed-package listing format")

    packages: list[Package] = []
    for record in data["formulae"]:
        package = _parse_formula(record)
        if package is not None:
            packages.append(package)
    for record in data["casks"]:
        package = _parse_cask(record)
        if package is not None:
            packages.append(package)
    return packages


def load_installed_packages(manager: PackageManager) -> list[Package]:
    """Fetch installed formulae and casks.

    Raises:
        InventoryError: If the listing fails or cannot be parsed.
    """
    try:
        result = manager.installed()
    except (PackageManagerUnavailableError, OSError, subprocess.TimeoutExpired) as e:
        raise InventoryError(f"Could not list installed packages: {e}") from e

    if not result.success:
        msg = f"Listing installed packages failed: {result.error_message()}"
        raise InventoryError(msg)

    return parse_installed(result.stdout)


def synchronize_installed_packages(
    manager: PackageManager,
    repository: PackageSetRepository,
) -> int:
    """Re-fetch the installed set and store it in the repository.

    Returns:
        Number of installed packages.

    Raises:
        InventoryError: If the listing fails; the repository is left as-is.
    """
    packages = load_installed_packages(manager)
    repository.replace_installed(packages)
    logger.info("Synchronized %d installed packages", len(packages))
    return len(packages)
