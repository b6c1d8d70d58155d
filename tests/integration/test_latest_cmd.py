import pytest
import typer

from cratesweep.cli.commands.latest_cmd import do_latest, do_parse_id


class TestLatestCmd:
    """Tests for the cratesweep.cli.commands.latest_cmd module."""

    def test_do_latest_prints_identifiers(self, capsys: pytest.CaptureFixture[str]):
        do_latest(
            name="tokio",
            versions=["1.0.0", "1.1.0-alpha.1", "1.1.0-beta.1", "1.0.2", "1.1.0-alpha.2"],
        )
        assert capsys.readouterr().out.splitlines() == [
            "tokio-1.0.2",
            "tokio-1.1.0-alpha.2",
            "tokio-1.1.0-beta.1",
        ]

    def test_do_latest_sort_streams(self, capsys: pytest.CaptureFixture[str]):
        do_latest(name="demo", versions=["2.0.0-rc.1", "2.0.0-beta.1"], sort_streams=True)
        assert capsys.readouterr().out.splitlines() == ["demo-2.0.0-beta.1", "demo-2.0.0-rc.1"]

    def test_do_latest_skips_invalid(self, capsys: pytest.CaptureFixture[str]):
        do_latest(name="demo", versions=["not-a-version", "0.3.1", "1.2"])
        assert capsys.readouterr().out.splitlines() == ["demo-0.3.1"]

    def test_do_latest_no_valid_versions(self):
        with pytest.raises(typer.Exit):
            do_latest(name="demo", versions=["nope", "1.2"])

    def test_do_parse_id(self, capsys: pytest.CaptureFixture[str]):
        do_parse_id("wasm-bindgen-0.2.78")
        assert capsys.readouterr().out.splitlines() == [
            "name: wasm-bindgen",
            "version: 0.2.78",
            "archive: wasm-bindgen-0.2.78.crate",
            'requirement: wasm-bindgen = "0.2.78"',
        ]

    def test_do_parse_id_archive_name(self, capsys: pytest.CaptureFixture[str]):
        do_parse_id("tokio-util-0.7.0-alpha.1.crate")
        out = capsys.readouterr().out
        assert "name: tokio-util" in out
        assert "version: 0.7.0-alpha.1" in out

    @pytest.mark.parametrize("raw", ["serde", "-1.0.0", "serde-1.0"])
    def test_do_parse_id_invalid(self, raw: str):
        with pytest.raises(typer.Exit):
            do_parse_id(raw)
