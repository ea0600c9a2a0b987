"""Wires the background update machinery and user-triggered tasks.

The orchestrator owns the process-wide state (repository, suppression)
and hands it to every component. Concurrency discipline:

- every task that writes the repository (scheduled checks, manual checks,
  Brewfile import, orphan removal, resync) runs on a single-worker writer
  executor, so writes never interleave;
- read-only tasks (export, cache purge, download cleanup) run on a
  separate worker pool;
- nothing blocks the calling thread: each operation returns a future
  resolving to a ``TaskResult``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import TypeVar

from brewctl.brew.base import PackageManager
from brewctl.core.background import BackgroundUpdateJob
from brewctl.core.checker import CheckError, OutdatedPackageChecker
from brewctl.core.clock import Clock, SystemClock
from brewctl.core.dispatcher import NotificationDispatcher
from brewctl.core.inventory import InventoryError, synchronize_installed_packages
from brewctl.core.maintenance import CachePurgeError, MaintenanceRunner, OrphanRemovalError
from brewctl.core.reconcile import ReconciliationResult
from brewctl.core.repository import PackageSetRepository
from brewctl.core.scheduler import BackgroundScheduler, Completion, JobResult
from brewctl.core.settings import Settings, SettingsStore
from brewctl.core.suppression import NotificationSuppressionState
from brewctl.core.tasks import CancellationToken, TaskResult
from brewctl.core.transfer import ExportError, ManifestImportError, ManifestTransferEngine
from brewctl.models.manifest import Manifest
from brewctl.models.package import OutdatedPackageSet
from brewctl.notifications.base import NotificationSink, Urgency
from brewctl.utils.formatting import format_list, format_size, plural

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCHEDULER_IDENTIFIER = "brewctl.backgroundAutoUpdate"


class Orchestrator:
    """Entry point for presentation layers (CLI, tray, GUI)."""

    def __init__(
        self,
        manager: PackageManager,
        settings: SettingsStore,
        sink: NotificationSink,
        clock: Clock | None = None,
        repository: PackageSetRepository | None = None,
        work_root: Path | None = None,
    ) -> None:
        current = settings.current
        self._clock = clock or SystemClock()
        self.manager = manager
        self.settings = settings
        self.repository = repository or PackageSetRepository()
        self.suppression = NotificationSuppressionState(
            clock=self._clock, grace_seconds=current.suppression_grace_seconds
        )
        self.dispatcher = NotificationDispatcher(self.repository, settings, sink, self.suppression)
        self.checker = OutdatedPackageChecker(manager, self.repository)
        self.job = BackgroundUpdateJob(self.checker, self.repository, self.dispatcher)
        self.scheduler = BackgroundScheduler(
            SCHEDULER_IDENTIFIER,
            interval=current.background_update_interval,
            tolerance=current.background_update_tolerance,
            clock=self._clock,
        )
        self.transfer = ManifestTransferEngine(manager, self.repository, work_root=work_root)
        self.maintenance = MaintenanceRunner(manager)

        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="brewctl-writer")
        self._workers = ThreadPoolExecutor(max_workers=4, thread_name_prefix="brewctl-task")

        # In-progress flags; guarded maintenance tasks claim theirs under the lock
        self._flags_lock = threading.Lock()
        self.is_importing_manifest = False
        self.is_exporting_manifest = False
        self.is_removing_orphans = False
        self.is_purging_cache = False
        self.is_deleting_cached_downloads = False

        settings.subscribe(self._on_settings_changed)

    @property
    def sink(self) -> NotificationSink:
        return self.dispatcher.sink

    def _on_settings_changed(self, old: Settings, new: Settings) -> None:
        # Takes effect from the next firing
        self.scheduler.interval = new.background_update_interval
        self.scheduler.tolerance = new.background_update_tolerance

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    def start(self) -> None:
        """Load the installed set, apply the badge and start background checks."""
        self.synchronize()
        self.dispatcher.apply_badge()
        self.scheduler.schedule(self._scheduled_check)

    def stop(self) -> None:
        """Stop background checks and wait for running tasks."""
        self.scheduler.invalidate()
        self._writer.shutdown(wait=True)
        self._workers.shutdown(wait=True)
        self.dispatcher.close()

    def __enter__(self) -> Orchestrator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _scheduled_check(self, completion: Completion) -> None:
        future = self._writer.submit(self.job.run_once)
        future.add_done_callback(lambda _: completion(JobResult.FINISHED))

    # -----------------------------------------------------------------
    # Task plumbing
    # -----------------------------------------------------------------

    def _submit(
        self,
        executor: ThreadPoolExecutor,
        name: str,
        body: Callable[[], TaskResult[T]],
    ) -> Future[TaskResult[T]]:
        def run() -> TaskResult[T]:
            try:
                return body()
            except Exception as e:
                logger.exception("Task %s failed unexpectedly", name)
                return TaskResult.failed(e)

        return executor.submit(run)

    def _claim(self, flag: str) -> bool:
        """Set an in-progress flag unless it is already set."""
        with self._flags_lock:
            if getattr(self, flag):
                return False
            setattr(self, flag, True)
            return True

    def _release(self, flag: str) -> None:
        with self._flags_lock:
            setattr(self, flag, False)

    # -----------------------------------------------------------------
    # Outdated packages
    # -----------------------------------------------------------------

    def check_now(self) -> Future[TaskResult[ReconciliationResult]]:
        """Run one background-style check cycle immediately."""

        def body() -> TaskResult[ReconciliationResult]:
            try:
                return TaskResult.succeeded(self.job.run_cycle())
            except CheckError as e:
                logger.warning("Manual check failed: %s", e)
                return TaskResult.failed(e, e.kind)

        return self._submit(self._writer, "check", body)

    def refresh_outdated(self) -> Future[TaskResult[OutdatedPackageSet]]:
        """Replace the stored outdated set with a fresh check, shrinking included."""

        def body() -> TaskResult[OutdatedPackageSet]:
            try:
                incoming = self.checker.check()
            except CheckError as e:
                logger.warning("Refreshing outdated packages failed: %s", e)
                return TaskResult.failed(e, e.kind)
            self.repository.replace_outdated(incoming)
            return TaskResult.succeeded(incoming)

        return self._submit(self._writer, "refresh", body)

    def synchronize(self) -> Future[TaskResult[int]]:
        """Re-fetch the installed package set."""

        def body() -> TaskResult[int]:
            try:
                return TaskResult.succeeded(
                    synchronize_installed_packages(self.manager, self.repository)
                )
            except InventoryError as e:
                logger.warning("Synchronizing installed packages failed: %s", e)
                return TaskResult.failed(e)

        return self._submit(self._writer, "synchronize", body)

    # -----------------------------------------------------------------
    # Brewfile transfer
    # -----------------------------------------------------------------

    def export_manifest(
        self, cancel: CancellationToken | None = None
    ) -> Future[TaskResult[str]]:
        """Export the installed package set as Brewfile text.

        The caller persists the text (see ``write_manifest_file``).
        """

        def body() -> TaskResult[str]:
            if cancel is not None and cancel.is_cancelled:
                return TaskResult.cancelled()
            self.is_exporting_manifest = True
            try:
                text = self.transfer.export_manifest()
            except ExportError as e:
                logger.error("Brewfile export failed (%s): %s", e.kind.value, e)
                return TaskResult.failed(e, e.kind)
            finally:
                self.is_exporting_manifest = False
            if cancel is not None and cancel.is_cancelled:
                return TaskResult.cancelled()
            return TaskResult.succeeded(text)

        return self._submit(self._workers, "export", body)

    def import_manifest(
        self,
        source: Path | str | None,
        cancel: CancellationToken | None = None,
    ) -> Future[TaskResult[Manifest]]:
        """Apply a Brewfile and resync the installed set.

        A cancelled token (the user closed the picker) makes this a no-op.
        """

        def body() -> TaskResult[Manifest]:
            if cancel is not None and cancel.is_cancelled:
                logger.info("Brewfile import cancelled before it started")
                return TaskResult.cancelled()
            self.is_importing_manifest = True
            try:
                return TaskResult.succeeded(self.transfer.import_manifest(source))
            except ManifestImportError as e:
                logger.error("Brewfile import failed (%s): %s", e.kind.value, e)
                return TaskResult.failed(e, e.kind)
            finally:
                self.is_importing_manifest = False

        return self._submit(self._writer, "import", body)

    # -----------------------------------------------------------------
    # Maintenance
    # -----------------------------------------------------------------

    def remove_orphans(self) -> Future[TaskResult[int]]:
        """Uninstall orphaned packages, report via notification, then resync."""

        def body() -> TaskResult[int]:
            if not self._claim("is_removing_orphans"):
                return TaskResult.skipped()
            try:
                count = self.maintenance.remove_orphans()
            except OrphanRemovalError as e:
                logger.error("Failed while uninstalling orphans: %s", e)
                self.sink.notify("Failed to remove orphans", f"Details: {e}", Urgency.ACTIVE)
                result: TaskResult[int] = TaskResult.failed(e)
            else:
                self.sink.notify(
                    "Orphans removed",
                    f"Removed {plural(count, 'orphaned package')}",
                    Urgency.ACTIVE,
                )
                result = TaskResult.succeeded(count)
            finally:
                self._release("is_removing_orphans")

            try:
                synchronize_installed_packages(self.manager, self.repository)
            except InventoryError as e:
                logger.warning("Resync after orphan removal failed: %s", e)
            return result

        return self._submit(self._writer, "remove-orphans", body)

    def purge_cache(self) -> Future[TaskResult[list[str]]]:
        """Purge the package cache and report the outcome."""

        def body() -> TaskResult[list[str]]:
            if not self._claim("is_purging_cache"):
                return TaskResult.skipped()
            try:
                holdbacks = self.maintenance.purge_cache()
            except CachePurgeError as e:
                logger.warning("There were errors while purging the package cache: %s", e)
                self.sink.notify("Failed to purge package cache", f"Details: {e}", Urgency.ACTIVE)
                return TaskResult.failed(e)
            finally:
                self._release("is_purging_cache")

            if holdbacks:
                self.sink.notify(
                    "Package cache purged",
                    f"Skipped {format_list(holdbacks)} because they are outdated",
                    Urgency.ACTIVE,
                )
            else:
                self.sink.notify("Package cache purged", urgency=Urgency.ACTIVE)
            return TaskResult.succeeded(holdbacks)

        return self._submit(self._workers, "purge-cache", body)

    def delete_cached_downloads(self) -> Future[TaskResult[int]]:
        """Delete cached downloads and report the reclaimed space."""

        def body() -> TaskResult[int]:
            if not self._claim("is_deleting_cached_downloads"):
                return TaskResult.skipped()
            try:
                reclaimed = self.maintenance.delete_cached_downloads()
            finally:
                self._release("is_deleting_cached_downloads")
            self.sink.notify(
                "Cached downloads deleted",
                f"Reclaimed {format_size(reclaimed)}",
                Urgency.ACTIVE,
            )
            return TaskResult.succeeded(reclaimed)

        return self._submit(self._workers, "delete-downloads", body)
