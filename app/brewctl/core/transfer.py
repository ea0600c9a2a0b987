"""Brewfile export and import.

Export dumps the installed package set into a temporary Brewfile and
returns its text. Import applies a Brewfile and then re-synchronizes the
installed set from the package manager. Each step fails with its own
error kind.

Import is reported all-or-nothing even though ``brew bundle`` may have
installed some entries before failing.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from datetime import date
from enum import Enum
from pathlib import Path
from tempfile import NamedTemporaryFile

from brewctl.brew.base import PackageManager, PackageManagerUnavailableError
from brewctl.core.inventory import InventoryError, synchronize_installed_packages
from brewctl.core.paths import ensure_cache_dir
from brewctl.core.repository import PackageSetRepository
from brewctl.models.manifest import Manifest

logger = logging.getLogger(__name__)

BREWFILE_NAME = "Brewfile"


class ExportFailure(Enum):
    """Step at which an export failed."""

    COULD_NOT_DETERMINE_WORKING_DIRECTORY = "could_not_determine_working_directory"
    ERROR_WHILE_DUMPING_BREWFILE = "error_while_dumping_brewfile"
    COULD_NOT_READ_BREWFILE = "could_not_read_brewfile"


class ImportFailure(Enum):
    """Step at which an import failed."""

    COULD_NOT_GET_BREWFILE_LOCATION = "could_not_get_brewfile_location"
    COULD_NOT_IMPORT_FILE = "could_not_import_file"


class ExportError(Exception):
    """Raised when exporting the Brewfile fails."""

    def __init__(self, kind: ExportFailure, message: str) -> None:
        self.kind = kind
        super().__init__(message)


class ManifestImportError(Exception):
    """Raised when importing a Brewfile fails."""

    def __init__(self, kind: ImportFailure, message: str) -> None:
        self.kind = kind
        super().__init__(message)


class ManifestWriteError(Exception):
    """Raised when an exported manifest cannot be written to its destination."""


def default_export_name(today: date | None = None) -> str:
    """Default file name for an exported Brewfile."""
    return f"Brewfile-{(today or date.today()).isoformat()}"


def write_manifest_file(text: str, destination: Path) -> Path:
    """Write manifest text atomically.

    The text goes to a temporary file next to ``destination`` first, so a
    failure never leaves a partial Brewfile behind.

    Raises:
        ManifestWriteError: If the file cannot be written.
    """
    tmp_path: Path | None = None
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(text)
        os.replace(str(tmp_path), str(destination))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ManifestWriteError(f"Failed to write Brewfile to {destination}: {e}") from e
    return destination


class ManifestTransferEngine:
    """Exports and imports Brewfiles through the package manager."""

    def __init__(
        self,
        manager: PackageManager,
        repository: PackageSetRepository,
        work_root: Path | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            manager: Package manager backend.
            repository: Repository to resync after an import.
            work_root: Parent of temporary working directories.
                Default: ~/.cache/brewctl
        """
        self._manager = manager
        self._repository = repository
        self._work_root = work_root

    def _make_working_directory(self) -> Path:
        root = self._work_root if self._work_root is not None else ensure_cache_dir()
        root.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix="brewfile-", dir=root))

    def export_manifest(self) -> str:
        """Dump the installed package set and return the Brewfile text.

        Raises:
            ExportError: With the kind of the step that failed.
        """
        try:
            workdir = self._make_working_directory()
        except (OSError, RuntimeError) as e:
            raise ExportError(
                ExportFailure.COULD_NOT_DETERMINE_WORKING_DIRECTORY,
                f"Could not create a working directory: {e}",
            ) from e

        try:
            brewfile = workdir / BREWFILE_NAME
            logger.info("Dumping Brewfile into %s", workdir)
            try:
                result = self._manager.bundle_dump(brewfile)
            except (PackageManagerUnavailableError, OSError, subprocess.TimeoutExpired) as e:
                raise ExportError(
                    ExportFailure.ERROR_WHILE_DUMPING_BREWFILE, f"Could not run brew bundle: {e}"
                ) from e
            if not result.success:
                raise ExportError(
                    ExportFailure.ERROR_WHILE_DUMPING_BREWFILE,
                    f"brew bundle dump failed: {result.error_message()}",
                )

            try:
                text = brewfile.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise ExportError(
                    ExportFailure.COULD_NOT_READ_BREWFILE, f"Could not read dumped Brewfile: {e}"
                ) from e
        finally:
            shutil.rmtree(workdir, ignore_errors=True)

        logger.info("Exported Brewfile with %d lines", len(text.splitlines()))
        return text

    def import_manifest(self, source: Path | str | None) -> Manifest:
        """Apply a Brewfile and resync the installed package set.

        The Brewfile is handed to ``brew bundle install`` as is. Lines the
        manifest model does not understand are logged, never rejected.

        Args:
            source: Brewfile location chosen by the user.

        Returns:
            The parsed manifest that was applied.

        Raises:
            ManifestImportError: With the kind of the step that failed.
        """
        # Path("") normalises to "."
        if source is None or str(source).strip() in ("", "."):
            raise ManifestImportError(
                ImportFailure.COULD_NOT_GET_BREWFILE_LOCATION, "No Brewfile location was given"
            )
        source = Path(source).expanduser()
        if not source.is_file():
            raise ManifestImportError(
                ImportFailure.COULD_NOT_GET_BREWFILE_LOCATION, f"No Brewfile at {source}"
            )

        try:
            manifest = Manifest.parse(source.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestImportError(
                ImportFailure.COULD_NOT_IMPORT_FILE, f"Could not read {source}: {e}"
            ) from e
        if manifest.unrecognised:
            logger.info(
                "Leaving %d Brewfile lines to brew bundle: %s",
                len(manifest.unrecognised),
                "; ".join(manifest.unrecognised),
            )

        logger.info("Importing %d Brewfile entries from %s", len(manifest), source)
        try:
            result = self._manager.bundle_install(source, cwd=source.parent)
        except (PackageManagerUnavailableError, OSError, subprocess.TimeoutExpired) as e:
            raise ManifestImportError(
                ImportFailure.COULD_NOT_IMPORT_FILE, f"Could not run brew bundle: {e}"
            ) from e
        if not result.success:
            raise ManifestImportError(
                ImportFailure.COULD_NOT_IMPORT_FILE,
                f"brew bundle install failed: {result.error_message()}",
            )

        try:
            synchronize_installed_packages(self._manager, self._repository)
        except InventoryError as e:
            # The import itself succeeded; the stale view fixes itself on the next sync
            logger.warning("Resync after import failed: %s", e)

        return manifest
