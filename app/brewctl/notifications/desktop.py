"""Desktop notification sink.

Posts notifications through ``osascript`` on macOS and ``notify-send``
elsewhere. There is no portable dock badge, so the badge is written to
~/.local/state/brewctl/badge for status-bar widgets to read.
"""

import logging
import subprocess
import sys
from pathlib import Path

from brewctl.core.paths import get_badge_path
from brewctl.notifications.base import Notification, NotificationSink, Urgency
from brewctl.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

APP_TITLE = "brewctl"

_NOTIFY_SEND_URGENCY = {
    Urgency.PASSIVE: "low",
    Urgency.ACTIVE: "normal",
    Urgency.CRITICAL: "critical",
}


def _applescript_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class DesktopNotificationSink(NotificationSink):
    """Sends system notifications and maintains a badge file."""

    def __init__(self, badge_path: Path | None = None, platform: str | None = None) -> None:
        self._badge_path = badge_path or get_badge_path()
        self._platform = platform or sys.platform

    def _build_command(self, notification: Notification) -> list[str] | None:
        if self._platform == "darwin":
            script = f"display notification {_applescript_string(notification.body or '')}"
            script += f" with title {_applescript_string(APP_TITLE)}"
            script += f" subtitle {_applescript_string(notification.title)}"
            return ["osascript", "-e", script]

        if command_exists("notify-send"):
            args = [
                "notify-send",
                "--app-name",
                APP_TITLE,
                "--urgency",
                _NOTIFY_SEND_URGENCY[notification.urgency],
                notification.title,
            ]
            if notification.body:
                args.append(notification.body)
            return args

        return None

    def send(self, notification: Notification) -> None:
        command = self._build_command(notification)
        if command is None:
            logger.info("No notification command available: %s", notification.title)
            return

        try:
            result = run_command(command, timeout=10.0)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Failed to post notification: %s", e)
            return

        if not result.success:
            logger.warning("Notification command failed: %s", result.error_message())

    def set_badge(self, count: int | None) -> None:
        try:
            if count is None:
                self._badge_path.unlink(missing_ok=True)
            else:
                self._badge_path.parent.mkdir(parents=True, exist_ok=True)
                self._badge_path.write_text(f"{count}\n", encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to update badge file %s: %s", self._badge_path, e)
