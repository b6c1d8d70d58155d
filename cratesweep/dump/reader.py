"""Reader for the crates.io database dump.

The dump directory holds (among others) two CSV tables:

- ``versions.csv``: one row per published version (``crate_id``, ``num``,
  ``yanked``, ...).
- ``crates.csv``: one row per crate (``id``, ``name``, ``downloads``, ...).

Versions are aggregated per crate id with a :class:`LatestVersionTracker`,
then joined against the crate table and ranked by download count.

A table that cannot be opened or lacks a required column fails the whole
read; individual malformed rows are skipped.
"""

import csv
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from cratesweep.exceptions import DumpReadError
from cratesweep.versions.filters import DEFAULT_EXCLUDED_PREFIXES, is_excluded_package
from cratesweep.versions.identifier import PackageIdentifier
from cratesweep.versions.tracker import LatestVersionTracker
from cratesweep.versions.version import parse_version

logger = logging.getLogger(__name__)

VERSIONS_FILENAME = "versions.csv"
CRATES_FILENAME = "crates.csv"

_VERSIONS_COLUMNS = ("crate_id", "num", "yanked")
_CRATES_COLUMNS = ("downloads", "id", "name")

# crates.csv carries whole READMEs in some columns
_FIELD_SIZE_LIMIT = 2**31 - 1


class DumpCrate(BaseModel):
    """A crate from the dump with its relevant versions."""

    model_config = ConfigDict(frozen=True)

    name: str
    crate_id: int
    downloads: int
    identifiers: tuple[PackageIdentifier, ...]


def _read_table(path: Path, required_columns: tuple[str, ...]) -> Iterator[dict[str, str]]:
    """Iterate the rows of a CSV table as dicts keyed by header name.

    Raises:
        DumpReadError: If the file cannot be read, is not valid CSV, or lacks
            one of the required columns.
    """
    csv.field_size_limit(_FIELD_SIZE_LIMIT)
    try:
        with path.open(newline="", encoding="utf-8") as file:
            reader = csv.DictReader(file)
            header = reader.fieldnames or []
            missing = [column for column in required_columns if column not in header]
            if missing:
                msg = f"Missing column(s) {', '.join(missing)} in '{path}'"
                raise DumpReadError(msg)
            yield from reader
    except OSError as exc:
        msg = f"Failed to read '{path}': {exc}"
        raise DumpReadError(msg) from exc
    except csv.Error as exc:
        msg = f"Malformed CSV in '{path}': {exc}"
        raise DumpReadError(msg) from exc


def read_versions(dump_dir: Path) -> dict[int, LatestVersionTracker]:
    """Aggregate the non-yanked versions of every crate id.

    Args:
        dump_dir: The dump directory containing ``versions.csv``.

    Returns:
        A tracker per crate id, fed in file order.

    Raises:
        DumpReadError: If the table cannot be read.
    """
    trackers: dict[int, LatestVersionTracker] = {}
    skipped = 0
    for row in _read_table(dump_dir / VERSIONS_FILENAME, _VERSIONS_COLUMNS):
        if row["yanked"] == "t":
            continue
        try:
            crate_id = int(row["crate_id"])
        except (TypeError, ValueError):
            logger.debug("Skipping version row with invalid crate id %r", row["crate_id"])
            skipped += 1
            continue
        version = parse_version(row["num"] or "")
        if version is None:
            logger.debug("Skipping unparseable version %r of crate id %d", row["num"], crate_id)
            skipped += 1
            continue

        tracker = trackers.get(crate_id)
        if tracker is None:
            tracker = LatestVersionTracker()
            trackers[crate_id] = tracker
        tracker.push(version)

    if skipped:
        logger.info("Skipped %d malformed row(s) in %s", skipped, VERSIONS_FILENAME)
    return trackers


def read_crates(
    dump_dir: Path,
    trackers: dict[int, LatestVersionTracker],
    excluded_prefixes: Iterable[str] = DEFAULT_EXCLUDED_PREFIXES,
) -> list[DumpCrate]:
    """Join the crate table against the aggregated versions.

    Crates without any tracked version and crates whose names match an
    excluded prefix are dropped.

    Args:
        dump_dir: The dump directory containing ``crates.csv``.
        trackers: Trackers keyed by crate id, from :func:`read_versions`.
        excluded_prefixes: Name prefixes of crates to leave out.

    Returns:
        The crates sorted by download count, highest first.

    Raises:
        DumpReadError: If the table cannot be read.
    """
    prefixes = tuple(excluded_prefixes)
    crates: list[DumpCrate] = []
    for row in _read_table(dump_dir / CRATES_FILENAME, _CRATES_COLUMNS):
        try:
            crate_id = int(row["id"])
            downloads = int(row["downloads"])
        except (TypeError, ValueError):
            logger.debug("Skipping crate row with invalid id or download count: %r", row["name"])
            continue

        tracker = trackers.get(crate_id)
        if tracker is None:
            continue
        name = row["name"]
        if not name or is_excluded_package(name, prefixes):
            continue

        identifiers = tuple(tracker.resolve(name))
        if not identifiers:
            continue
        crates.append(DumpCrate(name=name, crate_id=crate_id, downloads=downloads, identifiers=identifiers))

    crates.sort(key=lambda crate: crate.downloads, reverse=True)
    return crates


def load_dump(dump_dir: Path, excluded_prefixes: Iterable[str] = DEFAULT_EXCLUDED_PREFIXES) -> list[DumpCrate]:
    """Read a dump directory into crates ranked by download count.

    Raises:
        DumpReadError: If the dump directory or one of its tables cannot be read.
    """
    if not dump_dir.is_dir():
        msg = f"Dump directory not found: '{dump_dir}'"
        raise DumpReadError(msg)
    trackers = read_versions(dump_dir)
    return read_crates(dump_dir, trackers, excluded_prefixes)


def select_top_crates(crates: list[DumpCrate], count: int) -> list[DumpCrate]:
    """Keep the ``count`` most-downloaded crates of an already ranked list."""
    return crates[:count]
