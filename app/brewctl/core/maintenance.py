"""Maintenance tasks: orphan removal and cache cleanup.

Failures are reported with typed exceptions; the orchestrator turns them
into notifications. None of them is fatal to the process.
"""

import logging
import re
import shutil
import subprocess
from pathlib import Path

from brewctl.brew.base import PackageManager, PackageManagerUnavailableError

logger = logging.getLogger(__name__)

_AUTOREMOVE_RE = re.compile(r"Autoremoving (\d+) unneeded formula", re.IGNORECASE)
_SKIPPING_RE = re.compile(r"Skipping (\S+): most recent version .* not installed")


class OrphanRemovalError(Exception):
    """Raised when uninstalling orphaned packages fails."""


class CachePurgeError(Exception):
    """Raised when purging the package cache fails."""


def parse_autoremove_count(output: str) -> int:
    """Number of orphans reported by ``brew autoremove`` (0 if none)."""
    match = _AUTOREMOVE_RE.search(output)
    return int(match.group(1)) if match else 0


def parse_cleanup_holdbacks(output: str) -> list[str]:
    """Packages whose cache could not be purged because they are outdated."""
    return sorted(set(_SKIPPING_RE.findall(output)))


def directory_size(path: Path) -> int:
    """Total size in bytes of regular files below ``path``."""
    if not path.is_dir():
        return 0
    total = 0
    for entry in path.rglob("*"):
        try:
            if entry.is_file() and not entry.is_symlink():
                total += entry.stat().st_size
        except OSError:
            continue
    return total


class MaintenanceRunner:
    """Runs maintenance subcommands against the package manager."""

    def __init__(self, manager: PackageManager) -> None:
        self._manager = manager

    def remove_orphans(self) -> int:
        """Uninstall orphaned dependencies.

        Returns:
            Number of packages removed.

        Raises:
            OrphanRemovalError: If the package manager reports a failure.
        """
        try:
            result = self._manager.autoremove()
        except (PackageManagerUnavailableError, OSError, subprocess.TimeoutExpired) as e:
            raise OrphanRemovalError(str(e)) from e

        if not result.success:
            raise OrphanRemovalError(result.error_message("brew autoremove failed"))

        count = parse_autoremove_count(result.stdout)
        logger.info("Removed %d orphaned packages", count)
        return count

    def purge_cache(self) -> list[str]:
        """Purge the package cache.

        Returns:
            Packages that held back the purge (sorted, possibly empty).

        Raises:
            CachePurgeError: If the package manager reports a failure.
        """
        try:
            result = self._manager.cleanup()
        except (PackageManagerUnavailableError, OSError, subprocess.TimeoutExpired) as e:
            raise CachePurgeError(str(e)) from e

        holdbacks = parse_cleanup_holdbacks(result.combined_output)
        if not result.success:
            raise CachePurgeError(result.error_message("brew cleanup failed"))

        if holdbacks:
            logger.info("Cache purge skipped: %s", ", ".join(holdbacks))
        return holdbacks

    def downloads_path(self) -> Path | None:
        """Location of cached downloads, or None if unknown."""
        try:
            cache = self._manager.cache_path()
        except (PackageManagerUnavailableError, OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Could not determine the download cache: %s", e)
            return None
        return cache / "downloads" if cache is not None else None

    def cached_downloads_size(self) -> int:
        """Size in bytes of the cached downloads folder."""
        path = self.downloads_path()
        return directory_size(path) if path is not None else 0

    def delete_cached_downloads(self) -> int:
        """Delete everything in the cached downloads folder.

        Returns:
            Bytes reclaimed.
        """
        path = self.downloads_path()
        if path is None or not path.is_dir():
            return 0

        before = directory_size(path)
        for entry in path.iterdir():
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                logger.warning("Could not delete %s: %s", entry, e)

        reclaimed = before - directory_size(path)
        logger.info("Deleted cached downloads, reclaimed %d bytes", reclaimed)
        return reclaimed
