"""Maintenance commands: orphans, cache purge, cached downloads."""

from typing import Annotated

import typer

from brewctl.cli.types import create_orchestrator
from brewctl.utils.formatting import format_size, print_error, print_info, print_warning

app = typer.Typer(
    help="Clean up orphaned packages and caches.",
    no_args_is_help=True,
)


@app.command()
def orphans() -> None:
    """Uninstall dependencies no longer needed by any package."""
    with create_orchestrator() as orchestrator:
        outcome = orchestrator.remove_orphans().result()
    if not outcome.ok:
        raise typer.Exit(code=1)


@app.command("purge-cache")
def purge_cache() -> None:
    """Remove old versions and stale downloads from the package cache."""
    with create_orchestrator() as orchestrator:
        outcome = orchestrator.purge_cache().result()
    if not outcome.ok:
        raise typer.Exit(code=1)


@app.command()
def downloads(
    size_only: Annotated[
        bool,
        typer.Option("--size", help="Only show the size of cached downloads."),
    ] = False,
) -> None:
    """Delete cached downloads."""
    with create_orchestrator() as orchestrator:
        if orchestrator.maintenance.downloads_path() is None:
            print_warning("Could not determine the Homebrew download cache.")
            raise typer.Exit(code=1)
        if size_only:
            size = orchestrator.maintenance.cached_downloads_size()
            print_info(f"Cached downloads: {format_size(size)}")
            return
        if orchestrator.maintenance.cached_downloads_size() == 0:
            print_info("No cached downloads.")
            return
        outcome = orchestrator.delete_cached_downloads().result()

    if not outcome.ok:
        print_error(f"Deleting cached downloads failed: {outcome.message}")
        raise typer.Exit(code=1)
