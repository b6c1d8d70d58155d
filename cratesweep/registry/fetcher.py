"""Download crates into cargo's archive cache.

Each crate is fetched by writing a throwaway Cargo package that depends on
it and running ``cargo fetch``, which stores the archive (and those of its
dependencies) in the shared registry cache.
"""

import logging
import subprocess  # noqa: S404
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path

import tomlkit
from pydantic import BaseModel, Field

from cratesweep.exceptions import CrateFetchError
from cratesweep.registry.cache import is_cached
from cratesweep.versions.identifier import PackageIdentifier

logger = logging.getLogger(__name__)

FETCH_PACKAGE_NAME = "package"
FETCH_PACKAGE_VERSION = "0.1.0"

ProgressCallback = Callable[[int, int, PackageIdentifier], None]


class DownloadSummary(BaseModel):
    """Outcome of a batch download."""

    fetched: list[PackageIdentifier] = Field(default_factory=list)
    cached: list[PackageIdentifier] = Field(default_factory=list)
    failed: list[PackageIdentifier] = Field(default_factory=list)


def render_fetch_manifest(identifiers: Sequence[PackageIdentifier]) -> str:
    """Render the Cargo.toml of a scratch package depending on the given crates.

    Args:
        identifiers: The crates to depend on; names must be distinct.

    Returns:
        The manifest content.
    """
    document = tomlkit.document()

    package = tomlkit.table()
    package.add("name", FETCH_PACKAGE_NAME)
    package.add("version", FETCH_PACKAGE_VERSION)
    document.add("package", package)

    dependencies = tomlkit.table()
    for identifier in identifiers:
        dependencies.add(identifier.name, str(identifier.version))
    document.add("dependencies", dependencies)

    return tomlkit.dumps(document)


def fetch_crate(identifier: PackageIdentifier, workspace: Path, *, timeout: int = 600) -> None:
    """Fetch a single crate into the registry cache.

    Args:
        identifier: The crate version to fetch.
        workspace: Scratch directory for the throwaway package; reused across calls.
        timeout: Timeout in seconds for ``cargo fetch``.

    Raises:
        CrateFetchError: If cargo is missing, fails, or times out.
    """
    source_dir = workspace / "src"
    source_dir.mkdir(parents=True, exist_ok=True)
    (source_dir / "lib.rs").touch()
    (workspace / "Cargo.lock").unlink(missing_ok=True)
    (workspace / "Cargo.toml").write_text(render_fetch_manifest([identifier]), encoding="utf-8")

    try:
        subprocess.run(  # noqa: S603
            ["cargo", "fetch"],  # noqa: S607
            cwd=workspace,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        msg = "cargo is not installed or not found on PATH"
        raise CrateFetchError(msg) from exc
    except subprocess.CalledProcessError as exc:
        msg = f"Failed to fetch '{identifier}': {exc.stderr.strip()}"
        raise CrateFetchError(msg) from exc
    except subprocess.TimeoutExpired as exc:
        msg = f"Timed out fetching '{identifier}'"
        raise CrateFetchError(msg) from exc


def download_crates(
    identifiers: Sequence[PackageIdentifier],
    cache_dir: Path,
    *,
    on_progress: ProgressCallback | None = None,
    timeout: int = 600,
) -> DownloadSummary:
    """Fetch every crate that is not already in the archive cache.

    Args:
        identifiers: Crates ranked by popularity, most downloaded first.
        cache_dir: The archive cache directory to check before fetching.
        on_progress: Called with ``(position, total, identifier)`` before each crate.
        timeout: Timeout in seconds for each ``cargo fetch``.

    Returns:
        Which crates were fetched, already cached, or failed.
    """
    summary = DownloadSummary()
    total = len(identifiers)
    with tempfile.TemporaryDirectory(prefix="cratesweep-fetch-") as tmp_dir:
        workspace = Path(tmp_dir)
        # Least popular first: fetching a crate also caches its dependencies,
        # which tend to be the popular ones further down the list.
        for position, identifier in enumerate(reversed(identifiers), start=1):
            if on_progress is not None:
                on_progress(position, total, identifier)
            if is_cached(identifier, cache_dir):
                summary.cached.append(identifier)
                continue

            logger.info("Fetching %s", identifier)
            try:
                fetch_crate(identifier, workspace, timeout=timeout)
            except CrateFetchError as exc:
                logger.warning("Error fetching %s: %s", identifier, exc.message)
                summary.failed.append(identifier)
                continue
            summary.fetched.append(identifier)

    return summary
