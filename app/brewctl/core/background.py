"""Background outdated-package check cycle.

One cycle: check -> reconcile -> (announce, store) on growth. A failed
check is "no new information": it is logged and the stored set is kept.
"""

import logging
import threading

from brewctl.core.checker import CheckError, OutdatedPackageChecker
from brewctl.core.dispatcher import NotificationDispatcher
from brewctl.core.reconcile import Grown, ReconciliationResult, reconcile
from brewctl.core.repository import PackageSetRepository
from brewctl.core.scheduler import Completion, JobResult

logger = logging.getLogger(__name__)


class BackgroundUpdateJob:
    """The scheduled job body; also used for user-triggered checks."""

    def __init__(
        self,
        checker: OutdatedPackageChecker,
        repository: PackageSetRepository,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self._checker = checker
        self._repository = repository
        self._dispatcher = dispatcher
        self._lock = threading.Lock()

    def __call__(self, completion: Completion) -> None:
        """Scheduler entry point. Always signals completion."""
        try:
            self.run_once()
        finally:
            completion(JobResult.FINISHED)

    def run_once(self) -> ReconciliationResult | None:
        """Run one check cycle.

        Returns:
            The reconciliation result, or None if the check failed.
        """
        try:
            return self.run_cycle()
        except CheckError as e:
            logger.warning("Checking for outdated packages failed (%s): %s", e.kind.value, e)
            return None

    def run_cycle(self) -> ReconciliationResult:
        """Run one check cycle, propagating check failures.

        Raises:
            CheckError: If the check failed; the stored set is untouched.
        """
        with self._lock:
            incoming = self._checker.check()
            result = reconcile(self._repository.outdated, incoming)
            if isinstance(result, Grown):
                logger.info("New updates found: %s", ", ".join(result.added_names))
                # Suppression must be in place before the write triggers observers
                self._dispatcher.announce_new_outdated(result.added)
                self._repository.replace_outdated(incoming)
            else:
                logger.info("No new updates found")
            return result
