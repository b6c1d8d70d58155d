from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from cratesweep.exceptions import RegistryCacheError
from cratesweep.registry.cache import find_cached_crates, get_registry_cache_dir, is_cached
from cratesweep.versions.identifier import PackageIdentifier


def _touch_archives(cache_dir: Path, *names: str) -> None:
    cache_dir.mkdir(parents=True, exist_ok=True)
    for name in names:
        (cache_dir / name).write_bytes(b"")


class TestRegistryCache:
    """Tests for the cratesweep.registry.cache module, using tmp_path."""

    # --- get_registry_cache_dir ---

    def test_get_registry_cache_dir_explicit(self, tmp_path: Path):
        assert get_registry_cache_dir(tmp_path, "my-index") == tmp_path / "registry" / "cache" / "my-index"

    def test_get_registry_cache_dir_from_settings(self, tmp_path: Path, mocker: MockerFixture):
        mocker.patch("cratesweep.registry.cache.get_cargo_home", return_value=tmp_path)
        mocker.patch("cratesweep.registry.cache.get_index_dir", return_value="github.com-1ecc6299db9ec823")
        assert get_registry_cache_dir() == tmp_path / "registry" / "cache" / "github.com-1ecc6299db9ec823"

    # --- is_cached ---

    def test_is_cached(self, tmp_path: Path):
        identifier = PackageIdentifier.parse("serde-1.0.130")
        assert identifier is not None
        assert is_cached(identifier, tmp_path) is False
        _touch_archives(tmp_path, "serde-1.0.130.crate")
        assert is_cached(identifier, tmp_path) is True

    # --- find_cached_crates ---

    def test_find_cached_crates_keeps_relevant_versions(self, tmp_path: Path):
        _touch_archives(
            tmp_path,
            "serde-1.0.129.crate",
            "serde-1.0.130.crate",
            "tokio-util-0.6.9.crate",
            "tokio-util-0.7.0-alpha.1.crate",
            "tokio-util-0.7.0-beta.2.crate",
            "tokio-util-0.7.0-beta.1.crate",
            "README.md",
            "garbage.crate",
        )
        cached = find_cached_crates(tmp_path)

        assert [str(crate.identifier) for crate in cached] == [
            "serde-1.0.130",
            "tokio-util-0.6.9",
            "tokio-util-0.7.0-alpha.1",
            "tokio-util-0.7.0-beta.2",
        ]
        assert cached[0].path == tmp_path / "serde-1.0.130.crate"
        assert cached[0].archive_stem == "serde-1.0.130"

    def test_find_cached_crates_keeps_original_file_name(self, tmp_path: Path):
        _touch_archives(tmp_path, "odd-01.0.0.crate")
        cached = find_cached_crates(tmp_path)
        assert str(cached[0].identifier) == "odd-1.0.0"
        assert cached[0].archive_stem == "odd-01.0.0"

    def test_find_cached_crates_empty(self, tmp_path: Path):
        assert find_cached_crates(tmp_path) == []

    def test_find_cached_crates_missing_dir(self, tmp_path: Path):
        with pytest.raises(RegistryCacheError, match="not found"):
            find_cached_crates(tmp_path / "missing")
