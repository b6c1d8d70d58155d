from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[no-redef]


class TomlError(Exception):
    def __init__(self, message: str, lineno: int = 0, colno: int = 0):
        super().__init__(message)
        self.message = message
        self.lineno = lineno
        self.colno = colno


def load_toml_from_path(path: Path) -> dict[str, Any]:
    """Load TOML from file path.

    Args:
        path: Path to the TOML file

    Returns:
        Dictionary loaded from TOML

    Raises:
        TomlError: If TOML parsing fails, with file path included
    """
    try:
        with path.open("rb") as file:
            return tomllib.load(file)
    except tomllib.TOMLDecodeError as exc:
        msg = f"TOML parsing error in file '{path}': {getattr(exc, 'msg', str(exc))}"
        raise TomlError(
            message=msg,
            lineno=int(getattr(exc, "lineno", 0)),
            colno=int(getattr(exc, "colno", 0)),
        ) from exc


def load_toml_document(path: Path) -> tomlkit.TOMLDocument:
    """Load TOML using tomlkit to preserve formatting and comments.

    Args:
        path: Path to the TOML file

    Returns:
        TOMLDocument that preserves formatting and comments

    Raises:
        TomlError: If TOML parsing fails
    """
    with path.open(encoding="utf-8") as file:
        try:
            return tomlkit.load(file)
        except ParseError as exc:
            msg = f"TOML parsing error in file '{path}': {exc}"
            raise TomlError(message=msg, lineno=exc.line, colno=exc.col) from exc


def save_toml_document(data: dict[str, Any] | tomlkit.TOMLDocument, path: Path) -> None:
    """Save a dictionary or TOMLDocument to path, preserving formatting and comments."""
    with path.open("w", encoding="utf-8") as file:
        tomlkit.dump(data, file)  # type: ignore[arg-type]
