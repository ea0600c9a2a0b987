"""Unit tests for clocks."""

import threading

from brewctl.core.clock import ManualClock, SystemClock


class TestManualClock:
    """Tests for the virtual clock."""

    def test_callbacks_run_when_due(self) -> None:
        """A callback runs only once its delay has elapsed."""
        clock = ManualClock()
        fired: list[float] = []
        clock.call_later(1.0, lambda: fired.append(clock.monotonic()))

        clock.advance(0.5)
        assert fired == []
        assert clock.pending == 1

        clock.advance(0.5)
        assert fired == [1.0]
        assert clock.pending == 0

    def test_callbacks_run_in_due_order(self) -> None:
        """Callbacks due in the same advance run by due time, then FIFO."""
        clock = ManualClock()
        order: list[str] = []
        clock.call_later(2.0, lambda: order.append("late"))
        clock.call_later(1.0, lambda: order.append("first"))
        clock.call_later(1.0, lambda: order.append("second"))

        clock.advance(5.0)

        assert order == ["first", "second", "late"]
        assert clock.monotonic() == 5.0

    def test_callback_scheduled_during_advance(self) -> None:
        """A callback scheduled by another callback runs if it falls in the window."""
        clock = ManualClock()
        fired: list[str] = []

        def outer() -> None:
            fired.append("outer")
            clock.call_later(1.0, lambda: fired.append("inner"))

        clock.call_later(1.0, outer)
        clock.advance(3.0)

        assert fired == ["outer", "inner"]

    def test_sleep_advances_time(self) -> None:
        """sleep moves time forward and reports no interruption."""
        clock = ManualClock(start=10.0)
        assert clock.sleep(5.0, threading.Event()) is False
        assert clock.monotonic() == 15.0

    def test_sleep_interrupted(self) -> None:
        """sleep returns True immediately when the event is set."""
        clock = ManualClock()
        interrupt = threading.Event()
        interrupt.set()
        assert clock.sleep(5.0, interrupt) is True
        assert clock.monotonic() == 0.0


class TestSystemClock:
    """Tests for the wall clock."""

    def test_call_later_runs_callback(self) -> None:
        """call_later runs the callback on a timer thread."""
        done = threading.Event()
        SystemClock().call_later(0.01, done.set)
        assert done.wait(timeout=2.0)

    def test_sleep_returns_on_interrupt(self) -> None:
        """sleep returns True as soon as the interrupt is set."""
        interrupt = threading.Event()
        interrupt.set()
        assert SystemClock().sleep(10.0, interrupt) is True
