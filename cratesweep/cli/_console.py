import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

_console: Console | None = None


def get_console() -> Console:
    """Return the shared Rich console instance for CLI output."""
    global _console  # noqa: PLW0603
    if _console is None:
        _console = Console(stderr=True)
    return _console


def configure_logging(verbose: bool) -> None:
    """Route log records through the shared console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=get_console(), show_path=False)],
        force=True,
    )


def resolve_existing_directory(directory: str | Path, label: str) -> Path:
    """Resolve a user-provided path to an existing directory.

    Args:
        directory: User-provided directory path.
        label: What the directory is, for error messages (e.g. "Dump directory").

    Returns:
        Resolved absolute path to the directory.

    Raises:
        typer.Exit: If the path does not exist or is not a directory.
    """
    resolved = Path(directory).expanduser().resolve()
    if not resolved.exists():
        get_console().print(f"[red]{label} not found: {escape(str(resolved))}[/red]")
        raise typer.Exit(code=1)
    if not resolved.is_dir():
        get_console().print(f"[red]{label} is not a directory: {escape(str(resolved))}[/red]")
        raise typer.Exit(code=1)
    return resolved
