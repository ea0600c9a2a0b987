"""User settings and their persistence.

Settings are stored in ~/.config/brewctl/settings.toml and consulted by
the notification dispatcher on every outdated-count change.
"""

import logging
import os
import threading
import tomllib
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from brewctl.core.paths import get_settings_path

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    """How outdated packages are announced."""

    BADGE = "badge"
    NOTIFICATION = "notification"
    BOTH = "both"
    NONE = "none"

    @property
    def shows_badge(self) -> bool:
        """Whether this type keeps a badge with the outdated count."""
        return self in (NotificationType.BADGE, NotificationType.BOTH)

    @property
    def sends_notifications(self) -> bool:
        """Whether this type posts system notifications."""
        return self in (NotificationType.NOTIFICATION, NotificationType.BOTH)


class Settings(BaseModel):
    """Persisted user settings.

    Attributes:
        are_notifications_enabled: Master switch for badge and notifications.
        outdated_package_notification_type: Badge, notification, both or none.
        background_update_interval: Seconds between background checks.
        background_update_tolerance: Allowed deviation from the interval.
        suppression_grace_seconds: How long a specific notification inhibits
            the generic one.
        brew_path: Explicit brew executable (None = auto-detect).
    """

    model_config = ConfigDict(extra="forbid")

    are_notifications_enabled: Annotated[
        bool, Field(description="Enable badge and notifications")
    ] = False
    outdated_package_notification_type: Annotated[
        NotificationType, Field(description="How outdated packages are announced")
    ] = NotificationType.BADGE
    background_update_interval: Annotated[
        float, Field(ge=60, le=86400, description="Seconds between background checks")
    ] = 600.0
    background_update_tolerance: Annotated[
        float, Field(ge=0, description="Allowed deviation from the interval")
    ] = 60.0
    suppression_grace_seconds: Annotated[
        float, Field(gt=0, le=60, description="Specific-notification grace period")
    ] = 1.0
    brew_path: Annotated[Path | None, Field(description="brew executable override")] = None

    @model_validator(mode="after")
    def validate_tolerance(self) -> "Settings":
        """Tolerance must be smaller than the interval."""
        if self.background_update_tolerance >= self.background_update_interval:
            msg = "background_update_tolerance must be smaller than background_update_interval"
            raise ValueError(msg)
        return self


class SettingsError(Exception):
    """Base exception for settings errors."""


class SettingsParseError(SettingsError):
    """Raised when the settings file cannot be parsed."""


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    A missing file yields default settings.

    Raises:
        SettingsParseError: If the TOML syntax is invalid.
        SettingsError: If the file cannot be read or fails validation.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        return Settings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings: {e}") from e


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings atomically.

    Writes to a temporary file in the target directory, then renames it.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    data: dict[str, Any] = settings.model_dump(mode="json", exclude_none=True)

    tmp_path: Path | None = None
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path


SettingsListener = Callable[[Settings, Settings], None]


class SettingsStore:
    """In-memory holder of the current settings.

    ``update`` persists the change (when a path is set) and calls every
    listener with ``(old, new)``.
    """

    def __init__(self, settings: Settings | None = None, path: Path | None = None) -> None:
        self._settings = settings if settings is not None else Settings()
        self._path = path
        self._lock = threading.Lock()
        self._listeners: list[SettingsListener] = []

    @classmethod
    def load(cls, path: Path | None = None) -> "SettingsStore":
        """Create a store backed by the settings file."""
        settings_path = path or get_settings_path()
        return cls(load_settings(settings_path), path=settings_path)

    @property
    def current(self) -> Settings:
        """Current settings snapshot."""
        return self._settings

    def subscribe(self, listener: SettingsListener) -> None:
        """Register a listener called after each update."""
        self._listeners.append(listener)

    def update(self, **changes: Any) -> Settings:
        """Apply changes, validate, persist and notify listeners.

        Raises:
            SettingsError: If the changes are invalid or cannot be saved.
        """
        with self._lock:
            old = self._settings
            try:
                new = Settings.model_validate({**old.model_dump(), **changes})
            except ValidationError as e:
                raise SettingsError(f"Invalid settings: {e}") from e
            if self._path is not None:
                save_settings(new, self._path)
            self._settings = new

        logger.debug("Settings updated: %s", ", ".join(sorted(changes)))
        for listener in list(self._listeners):
            listener(old, new)
        return new
