"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from brewctl import __version__
from brewctl.cli.commands import brewfile, check, config, maintenance, watch
from brewctl.utils.formatting import err_console

app = typer.Typer(
    name="brewctl",
    help="Background update checks and Brewfile transfer for Homebrew.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"brewctl version {__version__}")
        raise typer.Exit()


def configure_logging(verbosity: int, quiet: bool) -> None:
    """Attach a Rich handler to the brewctl logger.

    WARNING by default, INFO with -v, DEBUG with -vv, ERROR with --quiet.
    """
    if quiet:
        level = logging.ERROR
    elif verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logger = logging.getLogger("brewctl")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
    logger.propagate = False


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase log output (-v info, -vv debug).",
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """brewctl - keep an eye on outdated Homebrew packages.

    Checks for outdated packages in the background, notifies about new
    ones, and exports or imports the installation as a Brewfile.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    configure_logging(verbose, quiet)


app.add_typer(check.app, name="check")
app.add_typer(watch.app, name="watch")
app.add_typer(brewfile.app, name="brewfile")
app.add_typer(maintenance.app, name="maintenance")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
