"""Task results and cancellation for user-triggered operations.

Every orchestrator operation returns a ``TaskResult`` instead of raising
into the caller. Typed failures carry their error kind; unexpected
exceptions are reported as FAILED without one.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class TaskStatus(Enum):
    """Outcome of a task."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class TaskResult(Generic[T]):
    """Outcome of a user-triggered task.

    Attributes:
        status: How the task ended.
        value: Return value on success.
        error: The exception on failure.
        kind: Error kind enum for typed failures.
    """

    status: TaskStatus
    value: T | None = field(default=None)
    error: Exception | None = field(default=None)
    kind: Enum | None = field(default=None)

    @property
    def ok(self) -> bool:
        return self.status is TaskStatus.SUCCEEDED

    @property
    def message(self) -> str:
        """Error text for display, empty on success."""
        return str(self.error) if self.error is not None else ""

    @classmethod
    def succeeded(cls, value: T | None = None) -> "TaskResult[T]":
        return cls(TaskStatus.SUCCEEDED, value=value)

    @classmethod
    def failed(cls, error: Exception, kind: Enum | None = None) -> "TaskResult[T]":
        return cls(TaskStatus.FAILED, error=error, kind=kind)

    @classmethod
    def cancelled(cls) -> "TaskResult[T]":
        return cls(TaskStatus.CANCELLED)

    @classmethod
    def skipped(cls) -> "TaskResult[T]":
        return cls(TaskStatus.SKIPPED)


class CancellationToken:
    """Cooperative cancellation flag shared between the UI and a task."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()
