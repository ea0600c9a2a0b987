"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

if TYPE_CHECKING:
    from brewctl.models.package import OutdatedPackage

THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "header": "#69B9A1",
        "bold_header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "#f53263",
        "info": "#0ec1c8",
        "added": "#c1ff62",
        "formula": "#69B9A1",
        "cask": "#0e8ac8",
    }
)


def _detect_color_system() -> str | None:
    """Return "truecolor" for interactive terminals, None to let Rich decide."""
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=THEME, color_system=_detect_color_system())
err_console = Console(theme=THEME, stderr=True, color_system=_detect_color_system())


def format_list(names: Sequence[str]) -> str:
    """Join names as an English list: "a", "a and b", "a, b and c"."""
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return f"{', '.join(names[:-1])} and {names[-1]}"


def plural(count: int, singular: str, plural_form: str | None = None) -> str:
    """Return "1 package" / "3 packages"."""
    word = singular if count == 1 else (plural_form or f"{singular}s")
    return f"{count} {word}"


def format_size(size_bytes: int) -> str:
    """Return a human-readable size string."""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def create_outdated_table(title: str = "Outdated Packages") -> Table:
    """Create a pre-configured table for outdated packages."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Package", no_wrap=True)
    table.add_column("Kind", style="muted")
    table.add_column("Installed", style="muted")
    table.add_column("Available", style="added")
    table.add_column("Installed On", style="info")
    return table


def format_outdated_row(pkg: OutdatedPackage) -> tuple[str, str, str, str, str]:
    """Format an outdated package as a table row."""
    kind = pkg.package.kind.value
    name = f"[{kind}]{pkg.name}[/]"
    if pkg.pinned:
        name += " [muted](pinned)[/]"
    installed_on = pkg.package.installed_on
    return (
        name,
        kind,
        pkg.package.installed_version or "-",
        pkg.available_version,
        installed_on.strftime("%Y-%m-%d") if installed_on else "-",
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
