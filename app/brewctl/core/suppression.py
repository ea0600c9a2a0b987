"""Suppression of the generic outdated-packages notification.

When the background check finds new outdated packages it sends a
specific notification naming them. The repository update that follows
would also trigger the generic "outdated packages found" notification;
the suppression state swallows that duplicate.

States:
    ALLOWED    -> generic notifications are sent
    SUPPRESSED -> the next generic notification is skipped

``suppress`` enters SUPPRESSED and schedules a non-cancelable reset to
ALLOWED after the grace period. Skipping one generic notification also
returns to ALLOWED.
"""

import logging
import threading
from enum import Enum

from brewctl.core.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

DEFAULT_GRACE_SECONDS = 1.0


class SuppressionStatus(Enum):
    """Suppression state."""

    ALLOWED = "allowed"
    SUPPRESSED = "suppressed"


class NotificationSuppressionState:
    """Timer-backed flag that inhibits one generic notification."""

    def __init__(
        self,
        clock: Clock | None = None,
        grace_seconds: float = DEFAULT_GRACE_SECONDS,
    ) -> None:
        self._clock = clock or SystemClock()
        self._grace_seconds = grace_seconds
        self._lock = threading.Lock()
        self._status = SuppressionStatus.ALLOWED
        # Incremented on every suppress; a reset only applies to its own epoch
        self._epoch = 0

    @property
    def status(self) -> SuppressionStatus:
        """Current state."""
        return self._status

    @property
    def is_suppressed(self) -> bool:
        """True while the generic notification is inhibited."""
        return self._status is SuppressionStatus.SUPPRESSED

    @property
    def grace_seconds(self) -> float:
        return self._grace_seconds

    @grace_seconds.setter
    def grace_seconds(self, value: float) -> None:
        self._grace_seconds = value

    def suppress(self) -> None:
        """Enter SUPPRESSED and schedule the automatic reset."""
        with self._lock:
            self._status = SuppressionStatus.SUPPRESSED
            self._epoch += 1
            epoch = self._epoch
        logger.debug("Generic notification suppressed for %.1fs", self._grace_seconds)
        self._clock.call_later(self._grace_seconds, lambda: self._reset(epoch))

    def consume(self) -> bool:
        """Check and clear the suppression.

        Returns:
            True if a generic notification should be skipped now.
        """
        with self._lock:
            if self._status is SuppressionStatus.ALLOWED:
                return False
            self._status = SuppressionStatus.ALLOWED
            return True

    def _reset(self, epoch: int) -> None:
        with self._lock:
            if epoch != self._epoch or self._status is SuppressionStatus.ALLOWED:
                return
            self._status = SuppressionStatus.ALLOWED
        logger.debug("Generic notification suppression lifted")
