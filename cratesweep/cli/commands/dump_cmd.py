"""Commands reading the crates.io database dump: ranking and downloading."""

import typer
from rich import box
from rich.markup import escape
from rich.table import Table

from cratesweep.cli._console import get_console, resolve_existing_directory
from cratesweep.config.settings import get_excluded_prefixes, get_top_count
from cratesweep.dump.reader import DumpCrate, load_dump, select_top_crates
from cratesweep.exceptions import DumpReadError
from cratesweep.registry.cache import get_registry_cache_dir
from cratesweep.registry.fetcher import download_crates
from cratesweep.versions.identifier import PackageIdentifier


def _load_top_crates(dump_path: str, count: int | None) -> list[DumpCrate]:
    console = get_console()
    dump_dir = resolve_existing_directory(dump_path, "Dump directory")
    try:
        crates = load_dump(dump_dir, excluded_prefixes=get_excluded_prefixes())
    except DumpReadError as exc:
        console.print(f"[red]Could not read dump: {escape(exc.message)}[/red]")
        raise typer.Exit(code=1) from exc
    return select_top_crates(crates, get_top_count() if count is None else count)


def do_top(dump_path: str, count: int | None = None) -> None:
    """Display the most-downloaded crates with their relevant versions.

    Args:
        dump_path: The dump directory.
        count: How many crates to show (defaults to the top-count setting).
    """
    console = get_console()
    crates = _load_top_crates(dump_path, count)
    if not crates:
        console.print("[yellow]No crates found in the dump.[/yellow]")
        return

    table = Table(title="Top crates", box=box.ROUNDED, show_header=True)
    table.add_column("Rank", justify="right", style="dim")
    table.add_column("Crate", style="cyan")
    table.add_column("Downloads", justify="right")
    table.add_column("Versions")
    for rank, crate in enumerate(crates, start=1):
        versions = ", ".join(str(identifier.version) for identifier in crate.identifiers)
        table.add_row(str(rank), escape(crate.name), f"{crate.downloads:,}", escape(versions))
    console.print(table)


def do_download(dump_path: str, count: int | None = None) -> None:
    """Fetch the relevant versions of the most-downloaded crates into cargo's cache.

    Args:
        dump_path: The dump directory.
        count: How many crates to fetch (defaults to the top-count setting).
    """
    console = get_console()
    crates = _load_top_crates(dump_path, count)
    identifiers = [identifier for crate in crates for identifier in crate.identifiers]
    cache_dir = get_registry_cache_dir()

    def _on_progress(position: int, total: int, identifier: PackageIdentifier) -> None:
        console.print(f"[dim]{position}/{total}[/dim] {escape(str(identifier))}")

    summary = download_crates(identifiers, cache_dir, on_progress=_on_progress)

    for identifier in summary.failed:
        console.print(f"[red]Error fetching '{escape(str(identifier))}'[/red]")
    console.print(
        f"[green]Fetched {len(summary.fetched)} crate(s), {len(summary.cached)} already cached, "
        f"{len(summary.failed)} failed.[/green]"
    )
    if summary.failed and not summary.fetched and not summary.cached:
        raise typer.Exit(code=1)
