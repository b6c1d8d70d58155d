from pathlib import Path

import typer
from rich.markup import escape

from cratesweep.cli._console import get_console
from cratesweep.exceptions import RegistryCacheError
from cratesweep.registry.cache import find_cached_crates, get_registry_cache_dir


def do_cached(cache_dir: Path | None = None) -> None:
    """List the relevant crate versions present in cargo's archive cache.

    Args:
        cache_dir: Override for the archive cache directory.
    """
    console = get_console()
    directory = cache_dir or get_registry_cache_dir()
    try:
        cached = find_cached_crates(directory)
    except RegistryCacheError as exc:
        console.print(f"[red]{escape(exc.message)}[/red]")
        raise typer.Exit(code=1) from exc

    if not cached:
        console.print(f"[yellow]No crates cached in {escape(str(directory))}.[/yellow]")
        return

    for crate in cached:
        typer.echo(str(crate.identifier))
