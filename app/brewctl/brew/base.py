"""Abstract base class for the external package manager.

The package manager is an opaque, possibly slow, possibly failing I/O
boundary. Everything brewctl needs from it goes through ``run``; the
convenience methods below only build argument lists.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from brewctl.utils.shell import CommandResult


class PackageManagerUnavailableError(RuntimeError):
    """Raised when the package manager executable cannot be found."""


class PackageManager(ABC):
    """Abstract base class for package manager backends.

    Example:
        >>> brew = HomebrewManager()
        >>> if brew.is_available():
        ...     result = brew.outdated()
        ...     print(result.stdout)
    """

    # Timeout for quick queries
    QUERY_TIMEOUT: float = 120.0
    # Timeout for operations that download or install (30 minutes)
    INSTALL_TIMEOUT: float = 1800.0

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the package manager can be used on this system."""

    @abstractmethod
    def run(
        self,
        args: list[str],
        *,
        timeout: float | None = QUERY_TIMEOUT,
        cwd: Path | None = None,
        auto_update: bool = False,
    ) -> CommandResult:
        """Run a package manager subcommand.

        Args:
            args: Subcommand and arguments (without the executable).
            timeout: Maximum time in seconds to wait.
            cwd: Working directory for the process.
            auto_update: Allow the package manager to refresh its index
                implicitly while running this subcommand.

        Returns:
            CommandResult with captured output.

        Raises:
            PackageManagerUnavailableError: If the executable is missing.
            subprocess.TimeoutExpired: If the command exceeds timeout.
        """

    def update(self) -> CommandResult:
        """Refresh the package index."""
        return self.run(["update"], timeout=self.INSTALL_TIMEOUT, auto_update=True)

    def outdated(self) -> CommandResult:
        """List upgradable formulae and casks as JSON (v2)."""
        return self.run(["outdated", "--json=v2"])

    def installed(self) -> CommandResult:
        """List installed formulae and casks as JSON (v2)."""
        return self.run(["info", "--json=v2", "--installed"])

    def bundle_dump(self, brewfile: Path) -> CommandResult:
        """Dump the installed package set into a Brewfile."""
        return self.run(
            ["bundle", "dump", "--force", f"--file={brewfile}"],
            cwd=brewfile.parent,
        )

    def bundle_install(self, brewfile: Path, cwd: Path | None = None) -> CommandResult:
        """Install every entry of a Brewfile."""
        return self.run(
            ["bundle", "install", f"--file={brewfile}"],
            timeout=self.INSTALL_TIMEOUT,
            cwd=cwd,
        )

    def autoremove(self) -> CommandResult:
        """Uninstall dependencies no longer needed by any installed package."""
        return self.run(["autoremove"], timeout=self.INSTALL_TIMEOUT)

    def cleanup(self) -> CommandResult:
        """Remove stale lock files, outdated downloads and old versions."""
        return self.run(["cleanup"], timeout=self.INSTALL_TIMEOUT)

    def cache_path(self) -> Path | None:
        """Return the download cache directory, or None if it cannot be determined."""
        result = self.run(["--cache"])
        if not result.success or not result.stdout.strip():
            return None
        return Path(result.stdout.strip())
