from pathlib import Path

import typer
from rich import box
from rich.markup import escape
from rich.table import Table

from cratesweep.cli._console import get_console, resolve_existing_directory
from cratesweep.exceptions import RegistryCacheError, ReportError, ToolchainError
from cratesweep.lint.report import default_report_name
from cratesweep.lint.runner import run_lints
from cratesweep.registry.cache import CachedCrate, get_registry_cache_dir


def do_lint(clippy_dir: str, lints: list[str], report_file: str | None = None) -> None:
    """Build clippy and check every cached crate with the given lints.

    Args:
        clippy_dir: The clippy checkout.
        lints: Lint names to track (e.g. ``needless_return``).
        report_file: Report path (defaults to ``{branch}-{date}.txt``).
    """
    console = get_console()
    clippy_path = resolve_existing_directory(clippy_dir, "Clippy directory")
    report_path = Path(report_file) if report_file else default_report_name(clippy_path)

    def _on_crate(position: int, total: int, crate: CachedCrate) -> None:
        console.print(f"[dim]{position}/{total}[/dim] Checking crate `{escape(str(crate.identifier))}`...")

    console.print("Compiling clippy...")
    try:
        summary = run_lints(clippy_path, lints, report_path, get_registry_cache_dir(), on_crate=_on_crate)
    except (RegistryCacheError, ToolchainError, ReportError) as exc:
        console.print(f"[red]{escape(exc.message)}[/red]")
        raise typer.Exit(code=1) from exc

    for crate_name, message in summary.failures.items():
        console.print(f"[red]Error checking crate '{escape(crate_name)}':[/red] {escape(message)}")

    table = Table(title="Lint occurrences", box=box.ROUNDED, show_header=True)
    table.add_column("Lint", style="cyan")
    table.add_column("Occurrences", justify="right")
    for lint, count in summary.lint_counts.items():
        table.add_row(escape(lint), str(count))
    console.print(table)
    console.print(
        f"[green]Checked {summary.crates_checked} crate(s); "
        f"{len(summary.crate_counts)} with warnings. Report written to {escape(str(report_path))}.[/green]"
    )
