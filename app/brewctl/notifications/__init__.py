"""Notification sinks.

This module exports the sink interface and its implementations.
"""

from brewctl.notifications.base import Notification, NotificationSink, Urgency
from brewctl.notifications.console import ConsoleNotificationSink
from brewctl.notifications.desktop import DesktopNotificationSink

__all__ = [
    "ConsoleNotificationSink",
    "DesktopNotificationSink",
    "Notification",
    "NotificationSink",
    "Urgency",
]
