"""Config commands for managing cratesweep settings.

Provides set, get, and list operations for the settings stored
in ``~/.cratesweep/config``.
"""

from rich import box
from rich.markup import escape
from rich.table import Table

from cratesweep.cli._console import get_console
from cratesweep.config.settings import (
    VALID_KEYS,
    get_setting_value,
    list_settings,
    resolve_key,
    set_setting_value,
)


def do_config_set(key: str, value: str) -> None:
    """Set a setting value.

    Args:
        key: The CLI key name (e.g. "cargo-home", "top-count").
        value: The value to store.
    """
    console = get_console()

    internal_key = resolve_key(key)
    if internal_key is None:
        console.print(f"[red]Unknown config key: '{escape(key)}'[/red]")
        console.print(f"[dim]Valid keys: {', '.join(VALID_KEYS)}[/dim]")
        return

    set_setting_value(internal_key, value)
    console.print(f"[green]Set '{escape(key)}' = '{escape(value)}'[/green]")


def do_config_get(key: str) -> None:
    """Get a setting value and display it with its source.

    Args:
        key: The CLI key name (e.g. "cargo-home", "top-count").
    """
    console = get_console()

    internal_key = resolve_key(key)
    if internal_key is None:
        console.print(f"[red]Unknown config key: '{escape(key)}'[/red]")
        console.print(f"[dim]Valid keys: {', '.join(VALID_KEYS)}[/dim]")
        return

    entry = get_setting_value(internal_key)
    display_value = entry.value or "(empty)"
    console.print(f"[bold]{escape(key)}[/bold] = {escape(display_value)}  [dim](source: {entry.source})[/dim]")


def do_config_list() -> None:
    """List all setting values with their sources."""
    console = get_console()

    table = Table(title="cratesweep configuration", box=box.ROUNDED, show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")

    for entry in list_settings():
        display_value = entry.value or "(empty)"
        table.add_row(escape(entry.cli_key), escape(display_value), str(entry.source))

    console.print(table)
