"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from brewctl.brew.base import PackageManager
from brewctl.core.clock import ManualClock
from brewctl.core.settings import NotificationType, Settings, SettingsStore
from brewctl.models.manifest import Manifest
from brewctl.notifications.base import Notification, NotificationSink
from brewctl.utils.shell import CommandResult

OK = CommandResult(stdout="", stderr="", returncode=0)


class FakePackageManager(PackageManager):
    """In-memory package manager.

    Installed packages live in ``formulae`` / ``casks`` (name -> version).
    ``bundle dump`` writes them as a Brewfile and ``bundle install`` adds
    the entries of a Brewfile. ``responses`` overrides the result of a
    subcommand (keyed by the first argument, or "bundle dump" /
    "bundle install").
    """

    def __init__(self) -> None:
        self.taps: list[str] = []
        self.formulae: dict[str, str] = {}
        self.casks: dict[str, str] = {}
        self.outdated_output = json.dumps({"formulae": [], "casks": []})
        self.responses: dict[str, CommandResult] = {}
        self.cache_dir: Path | None = None
        self.calls: list[list[str]] = []
        self.available = True

    def is_available(self) -> bool:
        return self.available

    def run(
        self,
        args: list[str],
        *,
        timeout: float | None = PackageManager.QUERY_TIMEOUT,
        cwd: Path | None = None,
        auto_update: bool = False,
    ) -> CommandResult:
        self.calls.append(list(args))
        key = " ".join(args[:2]) if args[0] == "bundle" else args[0]
        if key in self.responses:
            return self.responses[key]

        if key == "outdated":
            return CommandResult(stdout=self.outdated_output, stderr="", returncode=0)
        if key == "info":
            return CommandResult(stdout=self._installed_json(), stderr="", returncode=0)
        if key == "bundle dump":
            self._file(args).write_text(self._brewfile(), encoding="utf-8")
            return OK
        if key == "bundle install":
            self._install(Manifest.parse(self._file(args).read_text(encoding="utf-8")))
            return OK
        if key == "--cache":
            return CommandResult(stdout=f"{self.cache_dir}\n", stderr="", returncode=0)
        return OK

    @staticmethod
    def _file(args: list[str]) -> Path:
        return Path(next(a for a in args if a.startswith("--file=")).removeprefix("--file="))

    def _installed_json(self) -> str:
        return json.dumps(
            {
                "formulae": [
                    {"name": name, "installed": [{"version": version, "time": 1700000000}]}
                    for name, version in self.formulae.items()
                ],
                "casks": [
                    {"token": name, "installed": version, "installed_time": 1700000000}
                    for name, version in self.casks.items()
                ],
            }
        )

    def _brewfile(self) -> str:
        lines = [f'tap "{tap}"' for tap in self.taps]
        lines += [f'brew "{name}"' for name in self.formulae]
        lines += [f'cask "{name}"' for name in self.casks]
        return "".join(line + "\n" for line in lines)

    def _install(self, manifest: Manifest) -> None:
        for entry in manifest.entries:
            if entry.kind == "tap" and entry.name not in self.taps:
                self.taps.append(entry.name)
            elif entry.kind == "brew":
                self.formulae.setdefault(entry.name, "1.0")
            elif entry.kind == "cask":
                self.casks.setdefault(entry.name, "1.0")


class RecordingSink(NotificationSink):
    """Notification sink that records everything it receives."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []
        self.badges: list[int | None] = []

    def send(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def set_badge(self, count: int | None) -> None:
        self.badges.append(count)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notifications]

    @property
    def badge(self) -> int | None:
        return self.badges[-1] if self.badges else None


def outdated_json(
    formulae: dict[str, tuple[str, str]] | None = None,
    casks: dict[str, tuple[str, str]] | None = None,
) -> str:
    """Build ``brew outdated --json=v2`` output from name -> (installed, available)."""
    return json.dumps(
        {
            "formulae": [
                {
                    "name": name,
                    "installed_versions": [installed],
                    "current_version": available,
                    "pinned": False,
                    "pinned_version": None,
                }
                for name, (installed, available) in (formulae or {}).items()
            ],
            "casks": [
                {"name": name, "installed_versions": [installed], "current_version": available}
                for name, (installed, available) in (casks or {}).items()
            ],
        }
    )


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every XDG directory into the test's temporary directory."""
    for var in ("XDG_CONFIG_HOME", "XDG_STATE_HOME", "XDG_CACHE_HOME"):
        monkeypatch.setenv(var, str(tmp_path / var.lower()))
    return tmp_path


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo handlers and levels installed by CLI invocations."""
    logger = logging.getLogger("brewctl")
    yield
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def fake_brew() -> FakePackageManager:
    """Package manager fake with two formulae and one cask installed."""
    brew = FakePackageManager()
    brew.taps = ["homebrew/bundle"]
    brew.formulae = {"wget": "1.21", "jq": "1.7"}
    brew.casks = {"firefox": "120.0"}
    return brew


@pytest.fixture
def manual_clock() -> ManualClock:
    """Virtual clock starting at t=0."""
    return ManualClock()


@pytest.fixture
def sink() -> RecordingSink:
    """Recording notification sink."""
    return RecordingSink()


@pytest.fixture
def notifying_settings() -> SettingsStore:
    """In-memory settings with notifications and badge enabled."""
    return SettingsStore(
        Settings(
            are_notifications_enabled=True,
            outdated_package_notification_type=NotificationType.BOTH,
        )
    )


@pytest.fixture
def sample_outdated_json() -> str:
    """Sample ``brew outdated --json=v2`` output."""
    return outdated_json(
        formulae={"wget": ("1.21", "1.24"), "jq": ("1.6", "1.7.1")},
        casks={"firefox": ("120.0", "121.0")},
    )


@pytest.fixture
def make_outdated_json():
    """Factory for ``brew outdated --json=v2`` output."""
    return outdated_json
