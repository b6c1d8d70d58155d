"""Settings management for the cratesweep CLI.

Reads and writes ``~/.cratesweep/config`` using a dotenv-style format
(``KEY=VALUE``, ``#`` comments, blank lines allowed).

Resolution order: environment variables > config file > defaults.
"""

from __future__ import annotations

import logging
import os
from enum import unique
from pathlib import Path
from typing import NamedTuple

from cratesweep._compat import StrEnum
from cratesweep.versions.filters import DEFAULT_EXCLUDED_PREFIXES

logger = logging.getLogger(__name__)

# ── Types ───────────────────────────────────────────────────────────


@unique
class SettingSource(StrEnum):
    ENV = "env"
    FILE = "file"
    DEFAULT = "default"


class SettingEntry(NamedTuple):
    key: str
    cli_key: str
    value: str
    source: SettingSource


# ── Paths ───────────────────────────────────────────────────────────

CONFIG_DIR = Path.home() / ".cratesweep"
SETTINGS_PATH = CONFIG_DIR / "config"

# ── Setting keys ───────────────────────────────────────────────────

DEFAULT_INDEX_DIR = "github.com-1ecc6299db9ec823"
DEFAULT_TOP_COUNT = 500

# Map from internal key to setting key (env var name and file key share the same names)
_SETTING_KEYS: dict[str, str] = {
    "cargo_home": "CARGO_HOME",
    "index_dir": "CRATESWEEP_INDEX_DIR",
    "top_count": "CRATESWEEP_TOP_COUNT",
    "excluded_prefixes": "CRATESWEEP_EXCLUDED_PREFIXES",
}

# An empty cargo_home means ``~/.cargo``
_DEFAULTS: dict[str, str] = {
    "cargo_home": "",
    "index_dir": DEFAULT_INDEX_DIR,
    "top_count": str(DEFAULT_TOP_COUNT),
    "excluded_prefixes": ",".join(DEFAULT_EXCLUDED_PREFIXES),
}

# Map from CLI flag names (kebab-case) to internal keys
_KEY_ALIASES: dict[str, str] = {
    "cargo-home": "cargo_home",
    "index-dir": "index_dir",
    "top-count": "top_count",
    "excluded-prefixes": "excluded_prefixes",
}

VALID_KEYS: list[str] = list(_KEY_ALIASES.keys())


def resolve_key(cli_key: str) -> str | None:
    """Resolve a CLI flag name to an internal setting key."""
    return _KEY_ALIASES.get(cli_key)


# ── Dotenv parser / serializer ─────────────────────────────────────


def _parse_dotenv(content: str) -> dict[str, str]:
    result: dict[str, str] = {}
    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        key, sep, value = trimmed.partition("=")
        if not sep:
            continue
        result[key.strip()] = value.strip()
    return result


def _serialize_dotenv(entries: dict[str, str]) -> str:
    return "".join(f"{key}={value}\n" for key, value in entries.items())


# ── File I/O ───────────────────────────────────────────────────────


def _read_settings_file() -> dict[str, str]:
    if not SETTINGS_PATH.is_file():
        return {}
    try:
        return _parse_dotenv(SETTINGS_PATH.read_text(encoding="utf-8"))
    except OSError as exc:
        logger.warning("Could not read settings file %s: %s", SETTINGS_PATH, exc)
        return {}


def _write_settings_file(entries: dict[str, str]) -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(_serialize_dotenv(entries), encoding="utf-8")


# ── Public API ─────────────────────────────────────────────────────


def load_settings() -> dict[str, str]:
    """Load all settings with resolution: env > file > defaults.

    Returns:
        A dict with keys: cargo_home, index_dir, top_count, excluded_prefixes.
    """
    file_entries = _read_settings_file()
    merged = dict(_DEFAULTS)

    for internal_key, file_key in _SETTING_KEYS.items():
        if file_key in file_entries:
            merged[internal_key] = file_entries[file_key]

    for internal_key, env_name in _SETTING_KEYS.items():
        env_val = os.environ.get(env_name)
        if env_val is not None:
            merged[internal_key] = env_val

    return merged


def _cli_key_for(internal_key: str) -> str:
    return next(cli_k for cli_k, int_k in _KEY_ALIASES.items() if int_k == internal_key)


def get_setting_value(key: str) -> SettingEntry:
    """Get a single setting value with its source.

    Args:
        key: Internal key (e.g. "cargo_home", "top_count").

    Returns:
        A SettingEntry with the value and its source.
    """
    cli_key = _cli_key_for(key)

    env_name = _SETTING_KEYS[key]
    env_val = os.environ.get(env_name)
    if env_val is not None:
        return SettingEntry(key=key, cli_key=cli_key, value=env_val, source=SettingSource.ENV)

    file_entries = _read_settings_file()
    if env_name in file_entries:
        return SettingEntry(key=key, cli_key=cli_key, value=file_entries[env_name], source=SettingSource.FILE)

    return SettingEntry(key=key, cli_key=cli_key, value=_DEFAULTS[key], source=SettingSource.DEFAULT)


def set_setting_value(key: str, value: str) -> None:
    """Set a setting value in the config file.

    Args:
        key: Internal key (e.g. "cargo_home", "top_count").
        value: The value to set.
    """
    file_entries = _read_settings_file()
    file_entries[_SETTING_KEYS[key]] = value
    _write_settings_file(file_entries)


def list_settings() -> list[SettingEntry]:
    """List all setting values with their sources."""
    return [get_setting_value(internal_key) for internal_key in _KEY_ALIASES.values()]


# ── Typed accessors ────────────────────────────────────────────────


def get_cargo_home() -> Path:
    """Return cargo's home directory (``CARGO_HOME``, else ``~/.cargo``)."""
    value = load_settings()["cargo_home"]
    if value:
        return Path(value).expanduser()
    return Path.home() / ".cargo"


def get_index_dir() -> str:
    """Return the registry index directory name used under ``registry/cache``."""
    return load_settings()["index_dir"] or DEFAULT_INDEX_DIR


def get_top_count() -> int:
    """Return how many of the most-downloaded crates to select by default."""
    raw = load_settings()["top_count"]
    try:
        count = int(raw)
    except ValueError:
        logger.warning("Invalid top-count setting %r, using %d", raw, DEFAULT_TOP_COUNT)
        return DEFAULT_TOP_COUNT
    if count < 0:
        logger.warning("Negative top-count setting %r, using %d", raw, DEFAULT_TOP_COUNT)
        return DEFAULT_TOP_COUNT
    return count


def get_excluded_prefixes() -> tuple[str, ...]:
    """Return the package name prefixes excluded from selection."""
    raw = load_settings()["excluded_prefixes"]
    return tuple(prefix.strip() for prefix in raw.split(",") if prefix.strip())
