"""Unit tests for installed-package listing."""

from datetime import UTC, datetime

import pytest
from brewctl.core.inventory import (
    InventoryError,
    load_installed_packages,
    parse_installed,
    synchronize_installed_packages,
)
from brewctl.core.repository import PackageSetRepository
from brewctl.models.package import OutdatedPackage, Package, PackageKind
from brewctl.utils.shell import CommandResult

INSTALLED_JSON = """\
{
  "formulae": [
    {"name": "wget", "installed": [
      {"version": "1.21", "time": 1600000000},
      {"version": "1.24", "time": 1700000000}
    ]},
    {"name": "orphan", "installed": []}
  ],
  "casks": [
    {"token": "firefox", "name": ["Mozilla Firefox"], "installed": "121.0",
     "installed_time": 1700000000},
    {"token": "broken", "installed": null}
  ]
}
"""


class TestParseInstalled:
    """Tests for parse_installed."""

    def test_parses_formulae_and_casks(self) -> None:
        """Latest install wins for formulae; casks use the token."""
        packages = {p.name: p for p in parse_installed(INSTALLED_JSON)}

        assert packages["wget"].installed_version == "1.24"
        assert packages["wget"].installed_on == datetime.fromtimestamp(1700000000, tz=UTC)
        assert packages["firefox"].kind is PackageKind.CASK
        assert packages["firefox"].installed_version == "121.0"

    def test_missing_versions_are_none(self) -> None:
        """Records without install data have unknown version and date."""
        packages = {p.name: p for p in parse_installed(INSTALLED_JSON)}

        assert packages["orphan"].installed_version is None
        assert packages["broken"].installed_on is None

    def test_invalid_json(self) -> None:
        """Garbage output raises InventoryError."""
        with pytest.raises(InventoryError, match="Invalid JSON"):
            parse_installed("Error: oops")


class TestSynchronize:
    """Tests for load and synchronize."""

    def test_load_failure(self, fake_brew) -> None:
        """A failed listing raises InventoryError."""
        fake_brew.responses["info"] = CommandResult("", "Error: boom", 1)
        with pytest.raises(InventoryError, match="boom"):
            load_installed_packages(fake_brew)

    def test_synchronize_replaces_installed(self, fake_brew) -> None:
        """The repository receives the fetched set."""
        repo = PackageSetRepository()

        count = synchronize_installed_packages(fake_brew, repo)

        assert count == 3
        assert {p.name for p in repo.installed} == {"wget", "jq", "firefox"}

    def test_synchronize_prunes_outdated(self, fake_brew) -> None:
        """Outdated records of uninstalled packages are dropped."""
        gone = Package("gone", PackageKind.FORMULA, "1.0")
        repo = PackageSetRepository(installed=[gone], outdated=[OutdatedPackage(gone, "2.0")])

        synchronize_installed_packages(fake_brew, repo)

        assert repo.outdated_count == 0

    def test_synchronize_failure_leaves_repository(self, fake_brew) -> None:
        """On failure the repository keeps its previous contents."""
        existing = Package("keep", PackageKind.FORMULA)
        repo = PackageSetRepository(installed=[existing])
        fake_brew.responses["info"] = CommandResult("", "", 1)

        with pytest.raises(InventoryError):
            synchronize_installed_packages(fake_brew, repo)

        assert repo.installed == frozenset({existing})
