"""Brewfile export and import commands."""

from pathlib import Path
from typing import Annotated

import typer

from brewctl.cli.types import create_orchestrator
from brewctl.core.tasks import TaskStatus
from brewctl.core.transfer import (
    ExportFailure,
    ImportFailure,
    ManifestWriteError,
    default_export_name,
    write_manifest_file,
)
from brewctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Export and import Brewfiles.",
    no_args_is_help=True,
)

EXPORT_ALERTS: dict[ExportFailure, str] = {
    ExportFailure.COULD_NOT_DETERMINE_WORKING_DIRECTORY: (
        "Could not determine a working directory for Homebrew."
    ),
    ExportFailure.ERROR_WHILE_DUMPING_BREWFILE: "Homebrew failed while dumping the Brewfile.",
    ExportFailure.COULD_NOT_READ_BREWFILE: "Could not read the dumped Brewfile.",
}

IMPORT_ALERTS: dict[ImportFailure, str] = {
    ImportFailure.COULD_NOT_GET_BREWFILE_LOCATION: "Could not get the Brewfile location.",
    ImportFailure.COULD_NOT_IMPORT_FILE: "Could not import the Brewfile.",
}


@app.command("export")
def export_brewfile(
    destination: Annotated[
        Path | None,
        typer.Argument(help="Where to write the Brewfile (default: ./Brewfile-<date>)."),
    ] = None,
    stdout: Annotated[
        bool,
        typer.Option("--stdout", help="Print the Brewfile instead of writing it."),
    ] = False,
) -> None:
    """Export every installed tap, formula and cask as a Brewfile."""
    with create_orchestrator() as orchestrator:
        outcome = orchestrator.export_manifest().result()

    if not outcome.ok or outcome.value is None:
        alert = EXPORT_ALERTS.get(outcome.kind, "Exporting the Brewfile failed.")  # type: ignore[arg-type]
        print_error(alert)
        if outcome.message:
            console.print(f"[muted]{outcome.message}[/]")
        raise typer.Exit(code=1)

    if stdout:
        console.out(outcome.value, end="")
        return

    target = destination or Path.cwd() / default_export_name()
    if target.is_dir():
        target = target / default_export_name()
    try:
        write_manifest_file(outcome.value, target)
    except ManifestWriteError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Brewfile exported to {target}")


@app.command("import")
def import_brewfile(
    source: Annotated[
        Path | None,
        typer.Argument(help="Brewfile to install from."),
    ] = None,
) -> None:
    """Install everything listed in a Brewfile."""
    if source is None:
        print_info("No Brewfile selected; nothing to import.")
        return

    with create_orchestrator() as orchestrator:
        print_info(f"Importing {source}. This may take a while...")
        outcome = orchestrator.import_manifest(source).result()
        installed = len(orchestrator.repository.installed)

    if outcome.status is TaskStatus.CANCELLED:
        print_info("Import cancelled.")
        return
    if not outcome.ok or outcome.value is None:
        alert = IMPORT_ALERTS.get(outcome.kind, "Importing the Brewfile failed.")  # type: ignore[arg-type]
        print_error(alert)
        if outcome.message:
            console.print(f"[muted]{outcome.message}[/]")
        raise typer.Exit(code=1)

    print_success(f"Imported {len(outcome.value)} Brewfile entries ({installed} packages installed)")
