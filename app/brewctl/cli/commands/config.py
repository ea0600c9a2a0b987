"""Settings commands."""

import json
from typing import Annotated

import typer
from rich.table import Table

from brewctl.cli.types import OutputFormat, require_settings
from brewctl.core.paths import get_settings_path
from brewctl.core.settings import Settings, SettingsError, save_settings
from brewctl.utils.formatting import console, print_error, print_success

app = typer.Typer(
    help="Show and change settings.",
    no_args_is_help=True,
)


@app.command()
def show(
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
    """Show the current settings."""
    data = require_settings().current.model_dump(mode="json")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(data))
        return

    table = Table(
        title=f"Settings ({get_settings_path()})",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Key", style="info", no_wrap=True)
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)


@app.command("set")
def set_value(
    key: Annotated[str, typer.Argument(help="Setting name.")],
    value: Annotated[str, typer.Argument(help="New value.")],
) -> None:
    """Change one setting.

    Examples:
        brewctl config set are_notifications_enabled true
        brewctl config set outdated_package_notification_type both
        brewctl config set background_update_interval 3600
    """
    if key not in Settings.model_fields:
        print_error(f"Unknown setting: {key}")
        console.print(f"[muted]Known settings: {', '.join(Settings.model_fields)}[/]")
        raise typer.Exit(code=1)

    new_value: str | None = value
    if key == "brew_path" and value.lower() in ("", "none"):
        new_value = None

    store = require_settings()
    try:
        store.update(**{key: new_value})
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"{key} = {value}")


@app.command()
def reset() -> None:
    """Restore default settings."""
    try:
        path = save_settings(Settings())
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Settings reset ({path})")
