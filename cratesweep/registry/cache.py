"""Cargo's local crate archive cache.

Cache layout: ``{cargo_home}/registry/cache/{index_dir}/{name}-{version}.crate``
(e.g. ``~/.cargo/registry/cache/github.com-1ecc6299db9ec823/serde-1.0.130.crate``).
"""

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from cratesweep.config.settings import get_cargo_home, get_index_dir
from cratesweep.exceptions import RegistryCacheError
from cratesweep.versions.identifier import CRATE_ARCHIVE_SUFFIX, PackageIdentifier
from cratesweep.versions.tracker import VersionIndex

logger = logging.getLogger(__name__)


class CachedCrate(BaseModel):
    """A relevant crate version found in the archive cache."""

    model_config = ConfigDict(frozen=True)

    identifier: PackageIdentifier
    path: Path

    @property
    def archive_stem(self) -> str:
        """Archive file name without ``.crate``; also the directory the archive unpacks to."""
        return self.path.name.removesuffix(CRATE_ARCHIVE_SUFFIX)


def get_registry_cache_dir(cargo_home: Path | None = None, index_dir: str | None = None) -> Path:
    """Compute the archive cache directory for a registry index.

    Args:
        cargo_home: Override for cargo's home directory.
        index_dir: Override for the registry index directory name.

    Returns:
        The directory holding the ``.crate`` archives.
    """
    home = cargo_home or get_cargo_home()
    return home / "registry" / "cache" / (index_dir or get_index_dir())


def is_cached(identifier: PackageIdentifier, cache_dir: Path) -> bool:
    """Check whether the archive for a crate version exists in the cache."""
    return (cache_dir / identifier.archive_name).is_file()


def find_cached_crates(cache_dir: Path) -> list[CachedCrate]:
    """List the relevant crate versions present in the cache.

    Every archive name is parsed and fed into a per-name tracker, so the
    result holds the latest stable version of each crate plus its surviving
    pre-release streams.

    Args:
        cache_dir: The archive cache directory.

    Returns:
        The relevant cached crates, grouped by crate name in file-name order.

    Raises:
        RegistryCacheError: If the directory does not exist or cannot be listed.
    """
    if not cache_dir.is_dir():
        msg = f"Crate cache directory not found: '{cache_dir}'"
        raise RegistryCacheError(msg)

    index = VersionIndex()
    paths: dict[str, Path] = {}
    try:
        archives = sorted(cache_dir.glob(f"*{CRATE_ARCHIVE_SUFFIX}"))
    except OSError as exc:
        msg = f"Failed to list crate cache '{cache_dir}': {exc}"
        raise RegistryCacheError(msg) from exc

    for archive in archives:
        identifier = PackageIdentifier.from_file_name(archive.name)
        if identifier is None:
            logger.debug("Ignoring cache entry with unparseable name: %s", archive.name)
            continue
        index.push(identifier.name, identifier.version)
        paths[str(identifier)] = archive

    cached: list[CachedCrate] = []
    for identifier in index.resolve():
        path = paths.get(str(identifier))
        if path is not None:
            cached.append(CachedCrate(identifier=identifier, path=path))
    return cached
