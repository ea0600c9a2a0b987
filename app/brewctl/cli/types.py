"""Shared types and helpers for CLI commands."""

from enum import Enum

import typer

from brewctl.brew.homebrew import HomebrewManager
from brewctl.core.orchestrator import Orchestrator
from brewctl.core.settings import SettingsError, SettingsStore
from brewctl.notifications.base import NotificationSink
from brewctl.notifications.console import ConsoleNotificationSink
from brewctl.notifications.desktop import DesktopNotificationSink
from brewctl.utils.formatting import print_error, print_info


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


class SinkChoice(str, Enum):
    """Where notifications go."""

    CONSOLE = "console"
    DESKTOP = "desktop"


def require_settings() -> SettingsStore:
    """Load settings or exit with a helpful error message.

    Raises:
        typer.Exit: If the settings file is invalid.
    """
    try:
        return SettingsStore.load()
    except SettingsError as e:
        print_error(f"Failed to load settings: {e}")
        print_info("Fix or remove the file, or run 'brewctl config reset'.")
        raise typer.Exit(code=1) from e


def create_orchestrator(
    settings: SettingsStore | None = None,
    sink: SinkChoice = SinkChoice.CONSOLE,
) -> Orchestrator:
    """Build an orchestrator for the local Homebrew installation.

    Raises:
        typer.Exit: If Homebrew cannot be found.
    """
    store = settings or require_settings()
    manager = HomebrewManager(store.current.brew_path)
    if not manager.is_available():
        print_error("Homebrew is not installed or could not be located.")
        print_info("Install it from https://brew.sh or set 'brew_path' with 'brewctl config set'.")
        raise typer.Exit(code=1)

    notification_sink: NotificationSink = (
        DesktopNotificationSink() if sink == SinkChoice.DESKTOP else ConsoleNotificationSink()
    )
    return Orchestrator(manager, store, notification_sink)
