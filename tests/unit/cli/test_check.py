"""Unit tests for the check and watch commands."""

import json
import signal
import threading
from unittest.mock import MagicMock, patch

from brewctl.cli.commands.watch import _wait_until_stopped
from brewctl.cli.main import app
from brewctl.utils.shell import CommandResult
from typer.testing import CliRunner

runner = CliRunner()


class TestMain:
    """Tests for global options."""

    def test_version(self) -> None:
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "brewctl version" in result.stdout

    def test_missing_homebrew(self, fake_brew) -> None:
        """Commands fail cleanly when Homebrew is not installed."""
        fake_brew.available = False
        with patch("brewctl.cli.types.HomebrewManager", return_value=fake_brew):
            result = runner.invoke(app, ["check"])
        assert result.exit_code == 1
        assert "Homebrew is not installed" in result.output


class TestCheckCommand:
    """Tests for brewctl check."""

    def test_lists_outdated(self, cli_brew, sample_outdated_json) -> None:
        """Outdated packages are shown in a table and reported as new."""
        cli_brew.outdated_output = sample_outdated_json

        result = runner.invoke(app, ["check"])

        assert result.exit_code == 0
        assert "wget" in result.stdout
        assert "Newly outdated: firefox, jq, wget" in result.stdout
        assert cli_brew.calls[1][0] == "update"

    def test_no_update(self, cli_brew) -> None:
        """--no-update skips the index refresh."""
        result = runner.invoke(app, ["check", "--no-update"])

        assert result.exit_code == 0
        assert "Everything is up to date." in result.stdout
        assert ["update"] not in cli_brew.calls

    def test_json_output(self, cli_brew, make_outdated_json) -> None:
        """--format json prints machine-readable output."""
        cli_brew.outdated_output = make_outdated_json(formulae={"jq": ("1.6", "1.7")})

        result = runner.invoke(app, ["check", "--no-update", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [p["name"] for p in data["outdated"]] == ["jq"]
        assert data["outdated"][0]["available_version"] == "1.7"

    def test_failure_exits_nonzero(self, cli_brew) -> None:
        """A failed listing exits with code 1."""
        cli_brew.responses["outdated"] = CommandResult("", "Error: boom", 1)

        result = runner.invoke(app, ["check", "--no-update"])

        assert result.exit_code == 1
        assert "Checking for outdated packages failed" in result.output


class TestWatchCommand:
    """Tests for brewctl watch."""

    @patch("brewctl.cli.commands.watch._wait_until_stopped", side_effect=KeyboardInterrupt)
    def test_runs_until_interrupted(self, mock_wait: MagicMock, cli_brew) -> None:
        """watch starts the scheduler and stops on Ctrl+C."""
        result = runner.invoke(app, ["watch", "--interval", "900", "--sink", "console"])

        assert result.exit_code == 0
        assert "every 900s" in result.stdout
        assert "Stopping" in result.stdout
        assert ["info", "--json=v2", "--installed"] in cli_brew.calls

    def test_sigterm_stops(self, cli_brew) -> None:
        """SIGTERM sets the stop event; the previous handler is restored afterwards."""
        previous = signal.getsignal(signal.SIGTERM)
        seen: list[bool] = []

        def terminate(stop: threading.Event) -> None:
            signal.getsignal(signal.SIGTERM)(signal.SIGTERM, None)
            seen.append(stop.is_set())

        with patch("brewctl.cli.commands.watch._wait_until_stopped", side_effect=terminate):
            result = runner.invoke(app, ["watch", "--sink", "console"])

        assert result.exit_code == 0
        assert seen == [True]
        assert "Stopping" in result.stdout
        assert signal.getsignal(signal.SIGTERM) is previous

    def test_wait_returns_once_stopped(self) -> None:
        """The wait loop returns as soon as the event is set."""
        stop = threading.Event()
        threading.Timer(0.05, stop.set).start()

        _wait_until_stopped(stop)

        assert stop.is_set()

    def test_rejects_short_interval(self, cli_brew) -> None:
        """Intervals below the minimum are refused."""
        result = runner.invoke(app, ["watch", "--interval", "5"])
        assert result.exit_code == 1
