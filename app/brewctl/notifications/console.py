"""Notification sink that prints to the terminal."""

from rich.console import Console

from brewctl.notifications.base import Notification, NotificationSink, Urgency
from brewctl.utils.formatting import console as default_console

_URGENCY_STYLE = {
    Urgency.PASSIVE: "muted",
    Urgency.ACTIVE: "info",
    Urgency.CRITICAL: "error",
}


class ConsoleNotificationSink(NotificationSink):
    """Prints notifications with Rich and remembers the badge value."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or default_console
        self.badge: int | None = None

    def send(self, notification: Notification) -> None:
        style = _URGENCY_STYLE[notification.urgency]
        self._console.print(f"[{style}]● {notification.title}[/]")
        if notification.body:
            self._console.print(f"  [text]{notification.body}[/]")

    def set_badge(self, count: int | None) -> None:
        if count == self.badge:
            return
        self.badge = count
        if count is None:
            self._console.print("[muted]Badge cleared[/]")
        else:
            self._console.print(f"[muted]Badge: {count}[/]")
