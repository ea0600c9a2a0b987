"""Watch command implementation.

Runs background checks in the foreground until interrupted.
"""

import signal
import threading
from typing import Annotated

import typer

from brewctl.cli.types import SinkChoice, create_orchestrator, require_settings
from brewctl.core.settings import SettingsError, SettingsStore
from brewctl.utils.formatting import print_error, print_info

app = typer.Typer(
    help="Check for outdated packages in the background.",
    invoke_without_command=True,
)


def _wait_until_stopped(stop: threading.Event) -> None:
    """Block until ``stop`` is set.

    Waits in short slices so Ctrl+C is delivered promptly.
    """
    while not stop.wait(timeout=1.0):
        pass


@app.callback(invoke_without_command=True)
def watch(
    ctx: typer.Context,
    interval: Annotated[
        float | None,
        typer.Option(
            "--interval",
            "-i",
            help="Seconds between checks (overrides settings for this run).",
        ),
    ] = None,
    sink: Annotated[
        SinkChoice,
        typer.Option(
            "--sink",
            help="Where notifications go: desktop or console.",
            case_sensitive=False,
        ),
    ] = SinkChoice.DESKTOP,
) -> None:
    """Run the background update scheduler until Ctrl+C.

    Examples:
        brewctl watch                     # Use the configured interval
        brewctl watch --interval 3600     # Check hourly
        brewctl watch --sink console      # Print notifications
    """
    if ctx.invoked_subcommand is not None:
        return

    store = require_settings()
    if interval is not None:
        current = store.current
        tolerance = min(current.background_update_tolerance, interval / 10)
        try:
            # Not persisted: the store has no path
            store = SettingsStore(current.model_copy())
            store.update(
                background_update_interval=interval,
                background_update_tolerance=tolerance,
            )
        except SettingsError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

    orchestrator = create_orchestrator(store, sink=sink)
    with orchestrator:
        orchestrator.start()
        print_info(
            f"Watching for outdated packages every "
            f"{orchestrator.scheduler.interval:.0f}s. Press Ctrl+C to stop."
        )
        stop = threading.Event()
        # launchd and systemd stop services with SIGTERM
        previous = signal.signal(signal.SIGTERM, lambda *_: stop.set())
        try:
            _wait_until_stopped(stop)
        except KeyboardInterrupt:
            pass
        finally:
            signal.signal(signal.SIGTERM, previous)
        print_info("Stopping...")
