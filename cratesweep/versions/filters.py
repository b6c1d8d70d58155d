from collections.abc import Iterable

# Auto-generated mirrors of compiler internals; they never build standalone.
DEFAULT_EXCLUDED_PREFIXES: tuple[str, ...] = ("rustc-ap", "fast-rustc-ap")


def is_excluded_package(name: str, prefixes: Iterable[str] = DEFAULT_EXCLUDED_PREFIXES) -> bool:
    """Check whether a package name belongs to a known non-buildable family.

    Args:
        name: The package name.
        prefixes: Name prefixes to exclude.

    Returns:
        True if the name starts with any of the prefixes.
    """
    return name.startswith(tuple(prefixes))
