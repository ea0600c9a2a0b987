"""Recurring, non-overlapping background job scheduler.

A scheduler owns one job. The job receives a ``completion`` callback and
must call it when its work is done (it may do so from another thread).
The next firing is armed only after completion, so two executions never
overlap. Manual ``trigger_now`` calls are skipped while a run is in flight.
"""

import logging
import random
import threading
from collections.abc import Callable
from enum import Enum

from brewctl.core.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class JobResult(Enum):
    """Outcome reported through the completion callback."""

    FINISHED = "finished"
    DEFERRED = "deferred"


Completion = Callable[[JobResult], None]
Job = Callable[[Completion], None]


class BackgroundScheduler:
    """Fires a job roughly every ``interval`` seconds, never concurrently.

    Each delay is drawn uniformly from ``[interval - tolerance,
    interval + tolerance]``, so firings are never closer than
    ``interval - tolerance``.

    Example:
        >>> scheduler = BackgroundScheduler("brewctl.backgroundUpdate", 600, 60)
        >>> scheduler.schedule(lambda completion: completion(JobResult.FINISHED))
        >>> scheduler.invalidate()
    """

    def __init__(
        self,
        identifier: str,
        interval: float,
        tolerance: float = 0.0,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if interval <= 0:
            msg = f"Interval must be positive, got {interval}"
            raise ValueError(msg)
        if not 0 <= tolerance < interval:
            msg = f"Tolerance must be in [0, interval), got {tolerance}"
            raise ValueError(msg)

        self.identifier = identifier
        self.interval = interval
        self.tolerance = tolerance
        self._clock = clock or SystemClock()
        self._rng = rng or random.Random()
        self._job: Job | None = None
        self._thread: threading.Thread | None = None
        self._shutdown = threading.Event()
        self._run_lock = threading.Lock()
        self._fire_count = 0

    @property
    def is_running(self) -> bool:
        """True while an execution is in flight."""
        return self._run_lock.locked()

    @property
    def is_scheduled(self) -> bool:
        """True while the timer loop is active."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def fire_count(self) -> int:
        """Number of executions started so far."""
        return self._fire_count

    def next_delay(self) -> float:
        """Draw the delay before the next firing."""
        if self.tolerance == 0:
            return self.interval
        return self._rng.uniform(self.interval - self.tolerance, self.interval + self.tolerance)

    def schedule(self, job: Job) -> None:
        """Register the job and start the timer loop on a daemon thread.

        Raises:
            RuntimeError: If a job is already scheduled.
        """
        if self.is_scheduled:
            msg = f"Scheduler {self.identifier} already has a job"
            raise RuntimeError(msg)

        self._job = job
        self._shutdown.clear()
        self._thread = threading.Thread(
            target=self._loop,
            daemon=True,
            name=f"scheduler-{self.identifier}",
        )
        self._thread.start()
        logger.info(
            "Scheduled %s every %.0fs (±%.0fs)", self.identifier, self.interval, self.tolerance
        )

    def invalidate(self, timeout: float | None = 5.0) -> None:
        """Stop the timer loop. An in-flight run is allowed to finish."""
        self._shutdown.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        self._thread = None

    def trigger_now(self) -> bool:
        """Run the job immediately on the calling thread.

        Returns:
            False if a run was already in flight and this one was skipped.
        """
        return self._fire(blocking=False)

    def _loop(self) -> None:
        while not self._clock.sleep(self.next_delay(), self._shutdown):
            self._fire(blocking=True)
        logger.debug("Scheduler %s stopped", self.identifier)

    def _fire(self, blocking: bool) -> bool:
        job = self._job
        if job is None:
            return False
        if not self._run_lock.acquire(blocking=blocking):
            logger.info("Skipping %s firing; previous run still in progress", self.identifier)
            return False

        try:
            self._fire_count += 1
            logger.debug("Scheduled event %s fired (#%d)", self.identifier, self._fire_count)
            done = threading.Event()

            def completion(result: JobResult) -> None:
                logger.debug("%s completed: %s", self.identifier, result.value)
                done.set()

            try:
                job(completion)
            except Exception:
                logger.exception("Scheduled job %s failed", self.identifier)
                done.set()

            done.wait()
        finally:
            self._run_lock.release()
        return True
