import textwrap
from pathlib import Path

import pytest
import tomlkit

from cratesweep.exceptions import ManifestPrepareError
from cratesweep.lint.manifest import prepare_manifest


def _write_manifest(directory: Path, content: str) -> Path:
    path = directory / "Cargo.toml"
    path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return path


class TestPrepareManifest:
    """Tests for cratesweep.lint.manifest.prepare_manifest."""

    def test_removes_workspace_and_bench(self, tmp_path: Path):
        path = _write_manifest(
            tmp_path,
            """
            [package]
            name = "demo"
            version = "0.1.0"

            [workspace]
            members = ["sub"]

            [[bench]]
            name = "speed"
            harness = false
            """,
        )
        assert prepare_manifest(path) is True

        manifest = tomlkit.parse(path.read_text(encoding="utf-8")).unwrap()
        assert "workspace" not in manifest
        assert "bench" not in manifest
        assert manifest["package"]["name"] == "demo"

    def test_replaces_path_dependencies(self, tmp_path: Path):
        path = _write_manifest(
            tmp_path,
            """
            [package]
            name = "demo"
            version = "0.1.0"

            [dependencies]
            serde = "1.0"
            demo-macros = { path = "../demo-macros", version = "0.1.0" }
            demo-core = { path = "../demo-core" }

            [dev-dependencies.demo-test]
            path = "../demo-test"

            [target.'cfg(unix)'.dependencies]
            demo-unix = { path = "../demo-unix" }
            """,
        )
        assert prepare_manifest(path) is True

        manifest = tomlkit.parse(path.read_text(encoding="utf-8")).unwrap()
        assert manifest["dependencies"]["serde"] == "1.0"
        assert manifest["dependencies"]["demo-macros"] == {"version": "0.1.0"}
        assert manifest["dependencies"]["demo-core"] == {"version": "*"}
        assert manifest["dev-dependencies"]["demo-test"] == {"version": "*"}
        assert manifest["target"]["cfg(unix)"]["dependencies"]["demo-unix"] == {"version": "*"}

    def test_unchanged_manifest_is_not_rewritten(self, tmp_path: Path):
        content = """
            # keep this comment
            [package]
            name = "demo"
            version = "0.1.0"

            [dependencies]
            serde = { version = "1.0", features = ["derive"] }
            """
        path = _write_manifest(tmp_path, content)
        before = path.read_text(encoding="utf-8")

        assert prepare_manifest(path) is False
        assert path.read_text(encoding="utf-8") == before

    def test_preserves_comments_when_rewriting(self, tmp_path: Path):
        path = _write_manifest(
            tmp_path,
            """
            # generated by cargo
            [package]
            name = "demo"
            version = "0.1.0"

            [workspace]
            """,
        )
        prepare_manifest(path)
        assert "# generated by cargo" in path.read_text(encoding="utf-8")

    def test_invalid_manifest(self, tmp_path: Path):
        path = _write_manifest(tmp_path, "[package\nname = 1\n")
        with pytest.raises(ManifestPrepareError, match="TOML parsing error"):
            prepare_manifest(path)

    def test_missing_manifest(self, tmp_path: Path):
        with pytest.raises(ManifestPrepareError, match="Error reading manifest"):
            prepare_manifest(tmp_path / "Cargo.toml")
