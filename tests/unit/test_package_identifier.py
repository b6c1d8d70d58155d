import pytest
from pydantic import ValidationError

from cratesweep.versions.identifier import PackageIdentifier
from cratesweep.versions.version import PreVersion, parse_version


class TestPackageIdentifier:
    """Tests for cratesweep.versions.identifier.PackageIdentifier."""

    # --- parse ---

    @pytest.mark.parametrize(
        ("raw", "name", "version"),
        [
            ("serde-1.0.130", "serde", "1.0.130"),
            ("tokio-util-0.7.0", "tokio-util", "0.7.0"),
            ("tokio-util-0.7.0-alpha.1", "tokio-util", "0.7.0-alpha.1"),
            ("wasm-bindgen-0.2.78+build.1", "wasm-bindgen", "0.2.78+build.1"),
            ("a-b-c-d-1.2.3-rc.4+x-y", "a-b-c-d", "1.2.3-rc.4+x-y"),
            ("x-0.0.0", "x", "0.0.0"),
        ],
    )
    def test_parse(self, raw: str, name: str, version: str):
        identifier = PackageIdentifier.parse(raw)
        assert identifier is not None
        assert identifier.name == name
        assert str(identifier.version) == version
        assert str(identifier) == raw

    def test_parse_prerelease_hyphen_is_not_the_separator(self):
        identifier = PackageIdentifier.parse("foo-1.0.0-rc.1")
        assert identifier is not None
        assert identifier.name == "foo"
        assert identifier.version.pre == PreVersion(stream="rc", number=1)

    @pytest.mark.parametrize(
        "invalid",
        ["", "serde", "serde-", "serde-1.0", "-1.0.0", "serde_1.0.0", "serde-one.two.three", "serde-1.0.0-rc"],
    )
    def test_parse_invalid(self, invalid: str):
        assert PackageIdentifier.parse(invalid) is None

    # --- adversarial names ---

    def test_name_with_version_like_segment_splits_at_rightmost_version(self):
        """Known limitation: the rightmost parseable hyphen wins."""
        identifier = PackageIdentifier.parse("codec-1.0.0-2.0.0")
        assert identifier is not None
        assert identifier.name == "codec-1.0.0"
        assert str(identifier.version) == "2.0.0"

    def test_name_with_numeric_segments(self):
        identifier = PackageIdentifier.parse("base64-0-13-0.13.0")
        assert identifier is not None
        assert identifier.name == "base64-0-13"
        assert str(identifier.version) == "0.13.0"

    def test_name_ending_in_dotted_digits_with_prerelease(self):
        identifier = PackageIdentifier.parse("lib-1.2-3.4.5-beta.1")
        assert identifier is not None
        assert identifier.name == "lib-1.2"
        assert str(identifier.version) == "3.4.5-beta.1"

    # --- display ---

    def test_str_round_trip(self):
        version = parse_version("1.1.0-rc.2+abc")
        assert version is not None
        identifier = PackageIdentifier(name="my-crate", version=version)
        assert str(identifier) == "my-crate-1.1.0-rc.2+abc"
        assert PackageIdentifier.parse(str(identifier)) == identifier

    def test_archive_name_and_requirement(self):
        identifier = PackageIdentifier.parse("serde-1.0.130")
        assert identifier is not None
        assert identifier.archive_name == "serde-1.0.130.crate"
        assert identifier.requirement == 'serde = "1.0.130"'

    def test_empty_name_rejected(self):
        version = parse_version("1.0.0")
        assert version is not None
        with pytest.raises(ValidationError):
            PackageIdentifier(name="", version=version)

    # --- from_file_name ---

    def test_from_file_name(self):
        identifier = PackageIdentifier.from_file_name("regex-syntax-0.6.25.crate")
        assert identifier is not None
        assert identifier.name == "regex-syntax"
        assert str(identifier.version) == "0.6.25"

    @pytest.mark.parametrize("file_name", ["regex-0.6.25", "regex-0.6.25.tar.gz", "README.crate", ".crate"])
    def test_from_file_name_invalid(self, file_name: str):
        assert PackageIdentifier.from_file_name(file_name) is None
