"""Tests for cratesweep.config.settings: load, get, set, and typed accessors."""

from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from cratesweep.config.settings import (
    DEFAULT_INDEX_DIR,
    DEFAULT_TOP_COUNT,
    SettingSource,
    get_cargo_home,
    get_excluded_prefixes,
    get_index_dir,
    get_setting_value,
    get_top_count,
    list_settings,
    load_settings,
    resolve_key,
    set_setting_value,
)

_ENV_NAMES = ("CARGO_HOME", "CRATESWEEP_INDEX_DIR", "CRATESWEEP_TOP_COUNT", "CRATESWEEP_EXCLUDED_PREFIXES")


class TestSettings:
    """Tests for the settings module public API."""

    @pytest.fixture(autouse=True)
    def _isolate_settings(self, tmp_path: Path, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch) -> None:
        """Redirect settings I/O to a temporary directory and clear related env vars."""
        config_dir = tmp_path / ".cratesweep"
        config_dir.mkdir()
        mocker.patch("cratesweep.config.settings.CONFIG_DIR", config_dir)
        mocker.patch("cratesweep.config.settings.SETTINGS_PATH", config_dir / "config")
        for env_name in _ENV_NAMES:
            monkeypatch.delenv(env_name, raising=False)

    # ── resolve_key ──────────────────────────────────────────────

    @pytest.mark.parametrize(
        ("cli_key", "expected"),
        [
            ("cargo-home", "cargo_home"),
            ("index-dir", "index_dir"),
            ("top-count", "top_count"),
            ("excluded-prefixes", "excluded_prefixes"),
        ],
    )
    def test_resolve_key_valid(self, cli_key: str, expected: str) -> None:
        assert resolve_key(cli_key) == expected

    def test_resolve_key_unknown_returns_none(self) -> None:
        assert resolve_key("nonexistent-key") is None

    # ── load / get / set ─────────────────────────────────────────

    def test_load_settings_returns_defaults_when_no_file(self) -> None:
        settings = load_settings()
        assert settings["cargo_home"] == ""
        assert settings["index_dir"] == DEFAULT_INDEX_DIR
        assert settings["top_count"] == str(DEFAULT_TOP_COUNT)
        assert settings["excluded_prefixes"] == "rustc-ap,fast-rustc-ap"

    def test_load_settings_reads_file(self, tmp_path: Path) -> None:
        settings_path = tmp_path / ".cratesweep" / "config"
        settings_path.write_text("# comment\n\nCRATESWEEP_TOP_COUNT=42\nnot a setting\n", encoding="utf-8")

        settings = load_settings()
        assert settings["top_count"] == "42"
        assert settings["index_dir"] == DEFAULT_INDEX_DIR

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        settings_path = tmp_path / ".cratesweep" / "config"
        settings_path.write_text("CRATESWEEP_TOP_COUNT=42\n", encoding="utf-8")
        monkeypatch.setenv("CRATESWEEP_TOP_COUNT", "7")

        assert load_settings()["top_count"] == "7"
        entry = get_setting_value("top_count")
        assert entry.value == "7"
        assert entry.source == SettingSource.ENV

    def test_set_then_get_from_file(self) -> None:
        set_setting_value("index_dir", "index.crates.io-6f17d22bba15001f")

        entry = get_setting_value("index_dir")
        assert entry.value == "index.crates.io-6f17d22bba15001f"
        assert entry.source == SettingSource.FILE
        assert entry.cli_key == "index-dir"

    def test_set_preserves_other_keys(self) -> None:
        set_setting_value("top_count", "10")
        set_setting_value("cargo_home", "/opt/cargo")

        settings = load_settings()
        assert settings["top_count"] == "10"
        assert settings["cargo_home"] == "/opt/cargo"

    def test_get_default_source(self) -> None:
        entry = get_setting_value("excluded_prefixes")
        assert entry.source == SettingSource.DEFAULT

    def test_list_settings_covers_all_keys(self) -> None:
        assert [entry.cli_key for entry in list_settings()] == ["cargo-home", "index-dir", "top-count", "excluded-prefixes"]

    # ── typed accessors ──────────────────────────────────────────

    def test_get_cargo_home_default(self, mocker: MockerFixture, tmp_path: Path) -> None:
        mocker.patch("cratesweep.config.settings.Path.home", return_value=tmp_path)
        assert get_cargo_home() == tmp_path / ".cargo"

    def test_get_cargo_home_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("CARGO_HOME", str(tmp_path / "cargo"))
        assert get_cargo_home() == tmp_path / "cargo"

    def test_get_index_dir(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert get_index_dir() == DEFAULT_INDEX_DIR
        monkeypatch.setenv("CRATESWEEP_INDEX_DIR", "custom-index")
        assert get_index_dir() == "custom-index"

    @pytest.mark.parametrize(("raw", "expected"), [("25", 25), ("0", 0), ("many", DEFAULT_TOP_COUNT), ("-3", DEFAULT_TOP_COUNT)])
    def test_get_top_count(self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: int) -> None:
        monkeypatch.setenv("CRATESWEEP_TOP_COUNT", raw)
        assert get_top_count() == expected

    def test_get_excluded_prefixes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert get_excluded_prefixes() == ("rustc-ap", "fast-rustc-ap")
        monkeypatch.setenv("CRATESWEEP_EXCLUDED_PREFIXES", " internal- , ,legacy-")
        assert get_excluded_prefixes() == ("internal-", "legacy-")
        monkeypatch.setenv("CRATESWEEP_EXCLUDED_PREFIXES", "")
        assert get_excluded_prefixes() == ()
