"""Check command implementation.

Runs one outdated-package check cycle and lists the result.
"""

import json
from typing import Annotated

import typer

from brewctl.cli.types import OutputFormat, SinkChoice, create_orchestrator
from brewctl.core.reconcile import Grown
from brewctl.utils.formatting import (
    console,
    create_outdated_table,
    format_outdated_row,
    print_error,
    print_info,
    print_success,
)

app = typer.Typer(
    help="Check for outdated packages.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def check_packages(
    ctx: typer.Context,
    no_update: Annotated[
        bool,
        typer.Option(
            "--no-update",
            help="Do not refresh the package index first.",
        ),
    ] = False,
    notify: Annotated[
        bool,
        typer.Option(
            "--notify",
            help="Send desktop notifications instead of printing them.",
        ),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Check for outdated packages and notify about new ones.

    Examples:
        brewctl check                 # Refresh the index, then list outdated packages
        brewctl check --no-update     # Use the current index
        brewctl check --format json   # Output as JSON
    """
    if ctx.invoked_subcommand is not None:
        return

    orchestrator = create_orchestrator(sink=SinkChoice.DESKTOP if notify else SinkChoice.CONSOLE)
    with orchestrator:
        orchestrator.checker.refresh_index = not no_update
        orchestrator.synchronize().result()
        outcome = orchestrator.check_now().result()
        outdated = orchestrator.repository.outdated_sorted()

    if not outcome.ok:
        print_error(f"Checking for outdated packages failed: {outcome.message}")
        raise typer.Exit(code=1)

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps({"outdated": [p.to_dict() for p in outdated]}))
        return

    if not outdated:
        print_success("Everything is up to date.")
        return

    table = create_outdated_table()
    for pkg in outdated:
        table.add_row(*format_outdated_row(pkg))
    console.print(table)

    if isinstance(outcome.value, Grown):
        print_info(f"Newly outdated: {', '.join(outcome.value.added_names)}")
    console.print(f"\n[muted]{len(outdated)} outdated packages[/]")
