"""cratesweep CLI.

Provides commands for resolving the latest crate versions, ranking and
downloading crates from the crates.io dump, listing cargo's archive cache,
running clippy lints over cached crates, and managing configuration.
"""

from pathlib import Path
from typing import Annotated

import typer

from cratesweep.cli._console import configure_logging
from cratesweep.cli.commands.cache_cmd import do_cached
from cratesweep.cli.commands.config_cmd import do_config_get, do_config_list, do_config_set
from cratesweep.cli.commands.dump_cmd import do_download, do_top
from cratesweep.cli.commands.latest_cmd import do_latest, do_parse_id
from cratesweep.cli.commands.lint_cmd import do_lint

app = typer.Typer(
    name="cratesweep",
    no_args_is_help=True,
    help="cratesweep: pick the latest crate releases, fetch them, and lint them with clippy.",
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    configure_logging(verbose)


# ── Config subcommand group ──────────────────────────────────────────
config_app = typer.Typer(
    name="config",
    no_args_is_help=True,
    help="Manage cratesweep configuration.",
)
app.add_typer(config_app, name="config")


@config_app.command("set", help="Set a configuration value")
def config_set_cmd(
    key: Annotated[
        str,
        typer.Argument(help="Configuration key (e.g. 'cargo-home', 'index-dir', 'top-count', 'excluded-prefixes')"),
    ],
    value: Annotated[
        str,
        typer.Argument(help="Value to set"),
    ],
) -> None:
    """Set a configuration value."""
    do_config_set(key=key, value=value)


@config_app.command("get", help="Get a configuration value")
def config_get_cmd(
    key: Annotated[
        str,
        typer.Argument(help="Configuration key (e.g. 'cargo-home', 'index-dir', 'top-count', 'excluded-prefixes')"),
    ],
) -> None:
    """Get a configuration value and its source."""
    do_config_get(key=key)


@config_app.command("list", help="List all configuration values")
def config_list_cmd() -> None:
    """List all configuration values with their sources."""
    do_config_list()


# ── Version commands ─────────────────────────────────────────────────


@app.command("latest", help="Resolve the latest stable version and latest pre-release per stream")
def latest_cmd(
    name: Annotated[
        str,
        typer.Argument(help="Package name"),
    ],
    versions: Annotated[
        list[str] | None,
        typer.Argument(help="Versions in the order they were observed (read from stdin if omitted)"),
    ] = None,
    sort_streams: Annotated[
        bool,
        typer.Option("--sort-streams", help="Order pre-release streams by name"),
    ] = False,
) -> None:
    """Print the relevant identifiers of one package."""
    do_latest(name=name, versions=versions, sort_streams=sort_streams)


@app.command("parse-id", help="Split a 'name-version' identifier or .crate file name")
def parse_id_cmd(
    raw: Annotated[
        str,
        typer.Argument(help="Identifier such as 'serde-1.0.130' or 'serde-1.0.130.crate'"),
    ],
) -> None:
    """Show the parts of a package identifier."""
    do_parse_id(raw=raw)


# ── Dump commands ────────────────────────────────────────────────────


@app.command("top", help="Rank crates from a crates.io dump by downloads")
def top_cmd(
    dump_path: Annotated[
        str,
        typer.Argument(help="Directory containing the crates.io data dump"),
    ],
    count: Annotated[
        int | None,
        typer.Option("--count", "-n", min=0, help="Number of crates (defaults to the 'top-count' setting)"),
    ] = None,
) -> None:
    """Show the most-downloaded crates and their relevant versions."""
    do_top(dump_path=dump_path, count=count)


@app.command("download", help="Download the top crates into cargo's crate cache")
def download_cmd(
    dump_path: Annotated[
        str,
        typer.Argument(help="Directory containing the crates.io data dump"),
    ],
    count: Annotated[
        int | None,
        typer.Option("--count", "-n", min=0, help="Number of crates (defaults to the 'top-count' setting)"),
    ] = None,
) -> None:
    """Fetch the relevant versions of the most-downloaded crates."""
    do_download(dump_path=dump_path, count=count)


# ── Cache and lint commands ──────────────────────────────────────────


@app.command("cached", help="List the relevant crate versions in cargo's crate cache")
def cached_cmd(
    cache_dir: Annotated[
        Path | None,
        typer.Option("--cache-dir", help="Crate archive directory (defaults to cargo's registry cache)"),
    ] = None,
) -> None:
    """List cached crates."""
    do_cached(cache_dir=cache_dir)


@app.command("lint", help="Test clippy lints on all downloaded crates")
def lint_cmd(
    clippy_dir: Annotated[
        str,
        typer.Argument(help="Clippy checkout directory"),
    ],
    lints: Annotated[
        list[str] | None,
        typer.Option("--lint", "-l", help="Lint to test (repeatable)"),
    ] = None,
    report_file: Annotated[
        str | None,
        typer.Option("--report-file", "-r", help="Report file name (defaults to BRANCH-DATE.txt)"),
    ] = None,
) -> None:
    """Run clippy over every cached crate and write a report."""
    do_lint(clippy_dir=clippy_dir, lints=lints or [], report_file=report_file)
