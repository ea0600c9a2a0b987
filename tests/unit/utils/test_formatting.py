"""Unit tests for formatting helpers."""

from datetime import UTC, datetime

import pytest
from brewctl.models.package import OutdatedPackage, Package, PackageKind
from brewctl.utils.formatting import format_list, format_outdated_row, format_size, plural


class TestFormatList:
    """Tests for format_list."""

    @pytest.mark.parametrize(
        ("names", "expected"),
        [
            ([], ""),
            (["a"], "a"),
            (["a", "b"], "a and b"),
            (["a", "b", "c"], "a, b and c"),
        ],
    )
    def test_joins(self, names: list[str], expected: str) -> None:
        """Names are joined as an English list."""
        assert format_list(names) == expected


class TestPluralAndSize:
    """Tests for plural and format_size."""

    def test_plural(self) -> None:
        """Singular only for exactly one."""
        assert plural(1, "package") == "1 package"
        assert plural(0, "package") == "0 packages"
        assert plural(2, "formula", "formulae") == "2 formulae"

    def test_format_size(self) -> None:
        """Sizes are scaled to the largest fitting unit."""
        assert format_size(512) == "512.0 B"
        assert format_size(1536) == "1.5 KB"
        assert format_size(5 * 1024**3) == "5.0 GB"


class TestFormatOutdatedRow:
    """Tests for format_outdated_row."""

    def test_row(self) -> None:
        """Rows carry versions, kind and install date."""
        pkg = OutdatedPackage(
            Package("wget", PackageKind.FORMULA, "1.21", datetime(2024, 2, 1, tzinfo=UTC)),
            "1.24",
            pinned=True,
        )
        name, kind, installed, available, installed_on = format_outdated_row(pkg)

        assert "wget" in name
        assert "pinned" in name
        assert (kind, installed, available, installed_on) == (
            "formula",
            "1.21",
            "1.24",
            "2024-02-01",
        )

    def test_unknown_values(self) -> None:
        """Unknown version and date render as dashes."""
        pkg = OutdatedPackage(Package("firefox", PackageKind.CASK), "121.0")
        row = format_outdated_row(pkg)
        assert row[2] == "-"
        assert row[4] == "-"
