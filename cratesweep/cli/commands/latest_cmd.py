"""Resolve the relevant versions of a single package from version strings."""

import typer
from rich.markup import escape

from cratesweep.cli._console import get_console
from cratesweep.versions.identifier import PackageIdentifier
from cratesweep.versions.tracker import LatestVersionTracker
from cratesweep.versions.version import parse_version


def _read_stdin_versions() -> list[str]:
    stdin = typer.get_text_stream("stdin")
    return [line.strip() for line in stdin if line.strip()]


def do_latest(name: str, versions: list[str] | None = None, sort_streams: bool = False) -> None:
    """Print the latest stable version and latest pre-release per stream.

    Versions are pushed in the given order; when none are given they are read
    one per line from standard input. Identifiers go to stdout, one per line.

    Args:
        name: The package name.
        versions: Version strings in observation order.
        sort_streams: Order pre-release streams by name.
    """
    console = get_console()
    raw_versions = versions if versions else _read_stdin_versions()

    tracker = LatestVersionTracker()
    for raw in raw_versions:
        version = parse_version(raw)
        if version is None:
            console.print(f"[yellow]Skipping invalid version: '{escape(raw)}'[/yellow]")
            continue
        tracker.push(version)

    identifiers = list(tracker.resolve(name, sort_streams=sort_streams))
    if not identifiers:
        console.print(f"[red]No valid versions given for '{escape(name)}'.[/red]")
        raise typer.Exit(code=1)

    for identifier in identifiers:
        typer.echo(str(identifier))


def do_parse_id(raw: str) -> None:
    """Split a ``name-version`` string (or ``.crate`` file name) and show its parts.

    Args:
        raw: The combined identifier or archive file name.
    """
    console = get_console()
    identifier = PackageIdentifier.from_file_name(raw) or PackageIdentifier.parse(raw)
    if identifier is None:
        console.print(f"[red]Not a valid package identifier: '{escape(raw)}'[/red]")
        raise typer.Exit(code=1)

    typer.echo(f"name: {identifier.name}")
    typer.echo(f"version: {identifier.version}")
    typer.echo(f"archive: {identifier.archive_name}")
    typer.echo(f"requirement: {identifier.requirement}")
