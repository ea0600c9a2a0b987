"""Abstract notification sink.

Sinks are fire-and-forget: they log delivery problems and never raise
into the caller.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class Urgency(Enum):
    """Interruption level of a notification."""

    PASSIVE = "passive"
    ACTIVE = "active"
    CRITICAL = "critical"


@dataclass(frozen=True, slots=True)
class Notification:
    """A notification as handed to a sink.

    Attributes:
        title: Headline.
        body: Optional detail text.
        urgency: Interruption level.
    """

    title: str
    body: str | None = field(default=None)
    urgency: Urgency = field(default=Urgency.ACTIVE)


class NotificationSink(ABC):
    """Destination for notifications and the outdated-count badge."""

    @abstractmethod
    def send(self, notification: Notification) -> None:
        """Deliver a notification."""

    @abstractmethod
    def set_badge(self, count: int | None) -> None:
        """Show ``count`` on the badge, or clear it when None."""

    def notify(self, title: str, body: str | None = None, urgency: Urgency = Urgency.ACTIVE) -> None:
        """Convenience wrapper around ``send``."""
        self.send(Notification(title=title, body=body, urgency=urgency))
