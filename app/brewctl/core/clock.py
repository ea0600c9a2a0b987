"""Clocks for deferred callbacks.

Time-dependent components (the suppression reset, the scheduler) take a
``Clock`` so tests can drive them with ``ManualClock`` instead of waiting
on the wall clock.
"""

import heapq
import itertools
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable


class Clock(ABC):
    """Source of time and deferred execution."""

    @abstractmethod
    def monotonic(self) -> float:
        """Return a monotonic timestamp in seconds."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        """Run ``callback`` once, ``delay`` seconds from now.

        The call cannot be cancelled.
        """

    @abstractmethod
    def sleep(self, seconds: float, interrupt: threading.Event) -> bool:
        """Wait up to ``seconds``; return True if ``interrupt`` was set."""


class SystemClock(Clock):
    """Wall-clock implementation backed by daemon ``threading.Timer``s."""

    def monotonic(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()

    def sleep(self, seconds: float, interrupt: threading.Event) -> bool:
        return interrupt.wait(timeout=seconds)


class ManualClock(Clock):
    """Virtual clock advanced explicitly with ``advance``.

    Deferred callbacks run synchronously inside ``advance`` in due order.
    ``sleep`` returns immediately after moving time forward.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._lock = threading.Lock()
        self._pending: list[tuple[float, int, Callable[[], None]]] = []
        self._sequence = itertools.count()

    def monotonic(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        with self._lock:
            heapq.heappush(self._pending, (self._now + delay, next(self._sequence), callback))

    def sleep(self, seconds: float, interrupt: threading.Event) -> bool:
        if interrupt.is_set():
            return True
        self.advance(seconds)
        return interrupt.is_set()

    @property
    def pending(self) -> int:
        """Number of callbacks not yet due."""
        return len(self._pending)

    def advance(self, seconds: float) -> None:
        """Move time forward, running every callback that becomes due."""
        target = self._now + seconds
        while True:
            with self._lock:
                if not self._pending or self._pending[0][0] > target:
                    break
                due, _, callback = heapq.heappop(self._pending)
                self._now = max(self._now, due)
            callback()
        self._now = target
