"""Rewrite an unpacked crate's Cargo.toml so it builds on its own.

Published manifests can still mention their original workspace, benches
missing from the archive, or sibling crates by path. Those are stripped so
every crate builds as a standalone package against the registry.
"""

from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

from cratesweep._utils.toml_utils import TomlError, load_toml_document, save_toml_document
from cratesweep.exceptions import ManifestPrepareError

DEPENDENCY_TABLES = ("dependencies", "build-dependencies", "dev-dependencies")
_REMOVED_TABLES = ("workspace", "bench")


def _remove_path_dependencies(dependencies: Any) -> bool:
    """Turn ``path`` dependencies into registry dependencies.

    Returns:
        True if at least one dependency was changed.
    """
    if not isinstance(dependencies, MutableMapping):
        return False
    changed = False
    for dependency in dependencies.values():
        if isinstance(dependency, MutableMapping) and "path" in dependency:
            del dependency["path"]
            if "version" not in dependency:
                dependency["version"] = "*"
            changed = True
    return changed


def _dependency_tables(manifest: MutableMapping[str, Any]) -> list[Any]:
    tables = [manifest[name] for name in DEPENDENCY_TABLES if name in manifest]
    targets = manifest.get("target")
    if isinstance(targets, MutableMapping):
        for target in targets.values():
            if isinstance(target, MutableMapping):
                tables.extend(target[name] for name in DEPENDENCY_TABLES if name in target)
    return tables


def prepare_manifest(path: Path) -> bool:
    """Strip workspace membership, benches and path dependencies from a manifest.

    The file is only rewritten when something changed.

    Args:
        path: Path to the crate's Cargo.toml.

    Returns:
        True if the manifest was rewritten.

    Raises:
        ManifestPrepareError: If the manifest cannot be read, parsed, or written.
    """
    try:
        manifest = load_toml_document(path)
    except TomlError as exc:
        raise ManifestPrepareError(exc.message) from exc
    except OSError as exc:
        msg = f"Error reading manifest '{path}': {exc}"
        raise ManifestPrepareError(msg) from exc

    changed = False
    for table_name in _REMOVED_TABLES:
        if table_name in manifest:
            del manifest[table_name]
            changed = True
    for dependencies in _dependency_tables(manifest):
        if _remove_path_dependencies(dependencies):
            changed = True

    if changed:
        try:
            save_toml_document(manifest, path)
        except OSError as exc:
            msg = f"Error writing manifest '{path}': {exc}"
            raise ManifestPrepareError(msg) from exc
    return changed
