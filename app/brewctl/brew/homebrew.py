"""Homebrew package manager backend."""

import logging
from pathlib import Path

from brewctl.brew.base import PackageManager, PackageManagerUnavailableError
from brewctl.utils.shell import CommandResult, run_command, which

logger = logging.getLogger(__name__)

# Default install prefixes, checked when `brew` is not on PATH
WELL_KNOWN_PATHS: tuple[Path, ...] = (
    Path("/opt/homebrew/bin/brew"),
    Path("/usr/local/bin/brew"),
    Path("/home/linuxbrew/.linuxbrew/bin/brew"),
)

# Keep subcommands quiet and deterministic
_QUIET_ENV: dict[str, str] = {
    "HOMEBREW_NO_AUTO_UPDATE": "1",
    "HOMEBREW_NO_ENV_HINTS": "1",
}


def resolve_brew_executable(configured: Path | None = None) -> Path | None:
    """Locate the brew executable.

    Order: explicitly configured path, ``brew`` on PATH, well-known prefixes.

    Args:
        configured: Path from settings, if any.

    Returns:
        Path to the executable, or None if Homebrew is not installed.
    """
    if configured is not None:
        return configured if configured.exists() else None

    on_path = which("brew")
    if on_path:
        return Path(on_path)

    for candidate in WELL_KNOWN_PATHS:
        if candidate.exists():
            return candidate
    return None


class HomebrewManager(PackageManager):
    """Runs ``brew`` subcommands as subprocesses."""

    def __init__(self, executable: Path | None = None) -> None:
        """Initialize the backend.

        Args:
            executable: Explicit brew path. If None, it is resolved lazily.
        """
        self._configured = executable
        self._executable: Path | None = None

    @property
    def executable(self) -> Path | None:
        """Resolved brew executable, or None if unavailable."""
        if self._executable is None:
            self._executable = resolve_brew_executable(self._configured)
        return self._executable

    def is_available(self) -> bool:
        """Check if brew can be found."""
        return self.executable is not None

    def run(
        self,
        args: list[str],
        *,
        timeout: float | None = PackageManager.QUERY_TIMEOUT,
        cwd: Path | None = None,
        auto_update: bool = False,
    ) -> CommandResult:
        """Run ``brew <args>`` and capture its output."""
        executable = self.executable
        if executable is None:
            msg = "Homebrew is not installed or could not be located"
            raise PackageManagerUnavailableError(msg)

        command = [str(executable), *args]
        env = {"HOMEBREW_NO_ENV_HINTS": "1"} if auto_update else _QUIET_ENV
        result = run_command(
            command,
            timeout=timeout,
            cwd=cwd,
            env=env,
        )
        if not result.success:
            logger.debug(
                "brew %s exited with %d: %s",
                args[0] if args else "",
                result.returncode,
                result.error_message(),
            )
        return result
