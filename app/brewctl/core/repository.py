"""Shared, observable store of installed and outdated packages.

The repository is the single source of truth that presentation layers
read. It is owned by the orchestrator and handed to every component that
needs it.

Writers:
    - the background check's ``Grown`` path (``replace_outdated``)
    - the post-import and post-maintenance resync (``replace_installed``)

Both writers are serialized by an internal lock. Observers run on the
writing thread after the lock is released, in write order.
"""

import logging
import threading
from collections.abc import Callable, Iterable

from brewctl.models.package import (
    OutdatedPackage,
    OutdatedPackageSet,
    Package,
    sort_by_install_date,
)

logger = logging.getLogger(__name__)

CountObserver = Callable[[int], None]


class PackageSetRepository:
    """In-memory store of the installed and outdated package sets."""

    def __init__(
        self,
        installed: Iterable[Package] = (),
        outdated: Iterable[OutdatedPackage] = (),
    ) -> None:
        self._installed: frozenset[Package] = frozenset(installed)
        self._outdated: OutdatedPackageSet = frozenset(outdated)
        self._write_lock = threading.Lock()
        # Held while observers run so notifications keep write order
        self._notify_lock = threading.RLock()
        self._observers: list[CountObserver] = []

    @property
    def installed(self) -> frozenset[Package]:
        """Snapshot of installed packages."""
        return self._installed

    @property
    def outdated(self) -> OutdatedPackageSet:
        """Snapshot of outdated packages."""
        return self._outdated

    @property
    def outdated_count(self) -> int:
        """Number of outdated packages."""
        return len(self._outdated)

    def outdated_sorted(self) -> list[OutdatedPackage]:
        """Outdated packages ordered by install date, oldest first."""
        return sort_by_install_date(self._outdated)

    def subscribe(self, observer: CountObserver) -> Callable[[], None]:
        """Observe outdated-count changes.

        Args:
            observer: Called with the new outdated count.

        Returns:
            Function that removes the observer.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def replace_outdated(self, outdated: Iterable[OutdatedPackage]) -> None:
        """Replace the outdated set, notifying observers if the count changed."""
        with self._notify_lock:
            with self._write_lock:
                previous_count = len(self._outdated)
                self._outdated = frozenset(outdated)
                new_count = len(self._outdated)

            logger.debug("Outdated packages: %d -> %d", previous_count, new_count)
            if new_count != previous_count:
                self._emit(new_count)

    def replace_installed(self, installed: Iterable[Package]) -> None:
        """Replace the installed set.

        Outdated records whose package is no longer installed are dropped.
        """
        with self._notify_lock:
            with self._write_lock:
                self._installed = frozenset(installed)
                installed_ids = {p.identity for p in self._installed}
                previous_count = len(self._outdated)
                self._outdated = frozenset(
                    o for o in self._outdated if o.identity in installed_ids
                )
                new_count = len(self._outdated)

            logger.debug("Installed packages: %d", len(self._installed))
            if new_count != previous_count:
                self._emit(new_count)

    def _emit(self, count: int) -> None:
        for observer in list(self._observers):
            try:
                observer(count)
            except Exception:
                logger.exception("Outdated-count observer failed")
