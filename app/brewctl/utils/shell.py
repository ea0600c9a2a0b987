"""Subprocess helpers.

Every external program brewctl starts (brew, osascript, notify-send) goes
through ``run_command``, so output capture, timeouts and environment
handling live in one place.
"""

import logging
import os
import shlex
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of a finished process.

    Attributes:
        stdout: Decoded standard output.
        stderr: Decoded standard error.
        returncode: Exit status.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """True for exit status 0."""
        return self.returncode == 0

    @property
    def combined_output(self) -> str:
        """stdout followed by stderr (brew prints warnings to either)."""
        return f"{self.stdout}\n{self.stderr}"

    def error_message(self, fallback: str = "unknown error") -> str:
        """Text to show for a failure: stderr, else stdout, else ``fallback``."""
        return self.stderr.strip() or self.stdout.strip() or fallback


def run_command(
    args: Sequence[str],
    *,
    timeout: float | None = 60.0,
    cwd: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> CommandResult:
    """Run a program to completion and capture its output.

    A non-zero exit status is not an error here; callers inspect
    ``CommandResult.success``.

    Args:
        args: Program and arguments.
        timeout: Seconds before the process is killed. None waits forever.
        cwd: Working directory. Default: the current one.
        env: Variables layered over the current environment.

    Raises:
        FileNotFoundError: If the program does not exist.
        subprocess.TimeoutExpired: If the process outlives ``timeout``.
    """
    logger.debug("Running %s", shlex.join(args))
    completed = subprocess.run(
        list(args),
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
        cwd=cwd,
        env={**os.environ, **env} if env else None,
    )
    return CommandResult(completed.stdout, completed.stderr, completed.returncode)


def which(name: str) -> str | None:
    """Absolute path of ``name`` on PATH, or None."""
    return shutil.which(name)


def command_exists(name: str) -> bool:
    """Whether ``name`` can be found on PATH."""
    return which(name) is not None
